# cx_hub/lineardoc/doc.py
"""
线性文档模型：把页面 HTML 表示为一串有序的条目（文本、开/闭标签、空元素、注释）。

每个条目都保存了它在源文档中的原始文本，因此 `Doc.get_html()` 可以逐字节还原解析前的标记。
"""

from __future__ import annotations

import html
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import unquote

VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)

CATEGORY_REL = "mw:PageProp/Category"
CX_SECTION_REL = "cx:Section"


class ItemKind(str, Enum):
    TEXT = "text"
    RAWTEXT = "rawtext"
    OPEN = "open"
    CLOSE = "close"
    EMPTY = "empty"
    COMMENT = "comment"


@dataclass(frozen=True)
class Item:
    kind: ItemKind
    raw: str
    name: str | None = None
    attributes: tuple[tuple[str, str | None], ...] = ()

    def get(self, attr: str, default: str | None = None) -> str | None:
        for key, value in self.attributes:
            if key == attr:
                return value
        return default

    def has_rel(self, rel: str) -> bool:
        return rel in (self.get("rel") or "").split()

    @property
    def classes(self) -> list[str]:
        return (self.get("class") or "").split()

    @property
    def is_tag(self) -> bool:
        return self.kind in (ItemKind.OPEN, ItemKind.CLOSE, ItemKind.EMPTY)

    @property
    def is_text(self) -> bool:
        return self.kind is ItemKind.TEXT

    @property
    def text(self) -> str:
        """文本条目解码字符实体后的内容；其它条目为空串。"""
        return html.unescape(self.raw) if self.kind is ItemKind.TEXT else ""


def make_open_tag(name: str, attributes: Iterable[tuple[str, str]]) -> Item:
    attrs = tuple(attributes)
    rendered = "".join(f' {k}="{html.escape(v, quote=True)}"' for k, v in attrs)
    return Item(ItemKind.OPEN, f"<{name}{rendered}>", name, attrs)


def make_close_tag(name: str) -> Item:
    return Item(ItemKind.CLOSE, f"</{name}>", name)


@dataclass(frozen=True)
class CategoryTag:
    """源页面中的一个分类链接 `<link rel="mw:PageProp/Category" href="./Category:Name#Sort">`。"""

    name: str
    sort_key: str | None
    item: Item

    @classmethod
    def from_item(cls, item: Item) -> "CategoryTag | None":
        href = item.get("href")
        if not href or not item.has_rel(CATEGORY_REL):
            return None
        target = href[2:] if href.startswith("./") else href
        title, _, sort_key = target.partition("#")
        name = unquote(title).replace("_", " ")
        return cls(name=name, sort_key=unquote(sort_key) or None, item=item)


@dataclass(frozen=True)
class Doc:
    """解析后不可变的页面文档。"""

    items: tuple[Item, ...]
    categories: tuple[CategoryTag, ...] = field(default=())

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def get_html(self) -> str:
        return "".join(item.raw for item in self.items)

    def get_text(self) -> str:
        return "".join(item.text for item in self.items)

    def _top_level_depth(self) -> tuple[int, int]:
        """返回 (内容所在深度, 起始下标)：有 <body> 时为 body 的子节点，否则为根。"""
        depth = 0
        for index, item in enumerate(self.items):
            if item.kind is ItemKind.OPEN and item.name == "body":
                return depth + 1, index + 1
            if item.kind is ItemKind.OPEN:
                depth += 1
            elif item.kind is ItemKind.CLOSE:
                depth -= 1
        return 0, 0

    def wrap_sections(self) -> "Doc":
        """
        把每个顶层元素包进 `<section rel="cx:Section" id="cxSourceSection<N>">`。

        已经是 cx:Section 的元素保持原样；顶层的空白文本与注释留在包装之外。
        """
        top_depth, start = self._top_level_depth()
        items: list[Item] = list(self.items[:start])
        depth = top_depth
        section_number = 0
        wrapping = False

        for item in self.items[start:]:
            if depth == top_depth and item.kind in (ItemKind.OPEN, ItemKind.EMPTY):
                if not (item.name == "section" and item.has_rel(CX_SECTION_REL)):
                    items.append(
                        make_open_tag(
                            "section",
                            [
                                ("rel", CX_SECTION_REL),
                                ("id", f"cxSourceSection{section_number}"),
                            ],
                        )
                    )
                    section_number += 1
                    wrapping = True
            elif (
                depth == top_depth
                and item.kind is ItemKind.TEXT
                and item.raw.strip()
            ):
                # 顶层的非空白裸文本同样需要成为独立的可翻译区块
                items.append(
                    make_open_tag(
                        "section",
                        [
                            ("rel", CX_SECTION_REL),
                            ("id", f"cxSourceSection{section_number}"),
                        ],
                    )
                )
                section_number += 1
                items.append(item)
                items.append(make_close_tag("section"))
                continue

            items.append(item)

            if item.kind is ItemKind.OPEN:
                depth += 1
            elif item.kind is ItemKind.CLOSE:
                depth -= 1
                if depth < top_depth:
                    # 离开了 <body>，后续条目原样保留
                    depth = top_depth - 1
                    continue

            if wrapping and depth == top_depth and item.kind in (
                ItemKind.CLOSE,
                ItemKind.EMPTY,
            ):
                items.append(make_close_tag("section"))
                wrapping = False

        if wrapping:
            items.append(make_close_tag("section"))
        return Doc(items=tuple(items), categories=self.categories)
