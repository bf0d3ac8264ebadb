# cx_hub/lineardoc/parser.py
"""
把页面 HTML 解析为线性文档 `Doc`。

解析器是一个保留原始文本的轻量级分词器：每个标签、文本片段、注释都原样保存，
以保证序列化结果与输入逐字节一致。`Contextualizer` 负责识别需要整体移除的区块
（按类名、RDFa 类型、生成它的模板名），以及与之共享 `about` 标识的兄弟节点。
"""

from __future__ import annotations

import html
import json
import re
from collections.abc import Iterator

import structlog

from cx_hub.config import RemovableSections
from cx_hub.lineardoc.doc import VOID_ELEMENTS, CategoryTag, Doc, Item, ItemKind

logger = structlog.get_logger(__name__)

TOKEN_PATTERN = re.compile(
    r"""
    (?P<comment><!--.*?-->)
    |(?P<decl><![^>]*>)
    |(?P<pi><\?.*?>)
    |(?P<close></(?P<close_name>[A-Za-z][^\s/>]*)\s*>)
    |(?P<open><(?P<open_name>[A-Za-z][^\s/>]*)
        (?P<attrs>(?:[^>"']|"[^"]*"|'[^']*')*?)(?P<selfclose>/?)>)
    """,
    re.S | re.X,
)
ATTRIBUTE_PATTERN = re.compile(
    r"""([^\s/>"'=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+)))?"""
)
UNQUOTED_VALUE_END = re.compile(r"""=\s*[^\s"'>]*$""")
RAW_TEXT_ELEMENTS = frozenset({"script", "style"})


def parse_attributes(source: str) -> tuple[tuple[str, str | None], ...]:
    attributes: list[tuple[str, str | None]] = []
    for match in ATTRIBUTE_PATTERN.finditer(source):
        name, double, single, bare = match.groups()
        value = next((v for v in (double, single, bare) if v is not None), None)
        attributes.append(
            (name.lower(), html.unescape(value) if value is not None else None)
        )
    return tuple(attributes)


def tokenize(source: str) -> Iterator[Item]:
    """把 HTML 切分为条目；相邻条目的 raw 拼接起来恰好等于输入。"""
    position = 0
    length = len(source)
    while position < length:
        match = TOKEN_PATTERN.search(source, position)
        if match is None:
            yield Item(ItemKind.TEXT, source[position:])
            return
        if match.start() > position:
            yield Item(ItemKind.TEXT, source[position : match.start()])

        raw = match.group(0)
        position = match.end()
        if match.group("close"):
            yield Item(ItemKind.CLOSE, raw, match.group("close_name").lower())
            continue
        if not match.group("open"):
            yield Item(ItemKind.COMMENT, raw)
            continue

        name = match.group("open_name").lower()
        attrs = match.group("attrs")
        self_closing = bool(match.group("selfclose"))
        if self_closing and UNQUOTED_VALUE_END.search(attrs):
            # `<a href=/wiki/>` 中的斜杠属于未加引号的属性值
            self_closing = False
            attrs += "/"
        attributes = parse_attributes(attrs)
        if name in VOID_ELEMENTS or self_closing:
            yield Item(ItemKind.EMPTY, raw, name, attributes)
            continue

        yield Item(ItemKind.OPEN, raw, name, attributes)
        if name in RAW_TEXT_ELEMENTS:
            end = re.compile(rf"</{name}\s*>", re.I).search(source, position)
            stop = end.start() if end else length
            if stop > position:
                yield Item(ItemKind.RAWTEXT, source[position:stop])
            position = stop


class Contextualizer:
    """判断一个元素是否属于可移除区块。"""

    def __init__(self, removable_sections: RemovableSections | None = None):
        sections = removable_sections or RemovableSections()
        self.classes = frozenset(sections.classes)
        self.rdfa = frozenset(sections.rdfa)
        self.templates = [re.compile(p) for p in sections.templates]
        self._removed_about: set[str] = set()

    def _template_names(self, item: Item) -> list[str]:
        data_mw = item.get("data-mw")
        if not data_mw:
            return []
        try:
            parts = json.loads(data_mw).get("parts") or []
        except (ValueError, AttributeError):
            return []
        names = []
        for part in parts:
            if not isinstance(part, dict):
                continue
            wikitext = part.get("template", {}).get("target", {}).get("wt")
            if isinstance(wikitext, str):
                names.append(wikitext.strip())
        return names

    def is_removable(self, item: Item) -> bool:
        about = item.get("about")
        removable = (
            (about is not None and about in self._removed_about)
            or any(c in self.classes for c in item.classes)
            or any(t in self.rdfa for t in (item.get("typeof") or "").split())
            or any(
                pattern.search(name)
                for name in self._template_names(item)
                for pattern in self.templates
            )
        )
        if removable and about:
            self._removed_about.add(about)
        return removable


class Parser:
    """把 HTML 解析为 `Doc`，同时抽取分类标签并丢弃可移除区块。"""

    def __init__(
        self,
        removable_sections: RemovableSections | None = None,
        *,
        wrap_sections: bool = False,
    ):
        self.removable_sections = removable_sections
        self.wrap_sections = wrap_sections

    def parse(self, source: str) -> Doc:
        contextualizer = Contextualizer(self.removable_sections)
        items: list[Item] = []
        categories: list[CategoryTag] = []
        stack: list[str] = []
        skip_depth: int | None = None
        skipped: list[Item] = []
        removed = 0

        def keep(item: Item) -> None:
            if item.kind is ItemKind.EMPTY or item.kind is ItemKind.OPEN:
                category = CategoryTag.from_item(item)
                if category is not None:
                    categories.append(category)
            items.append(item)

        for item in tokenize(source):
            if item.kind is ItemKind.OPEN:
                if skip_depth is None and contextualizer.is_removable(item):
                    skip_depth = len(stack)
                    removed += 1
                stack.append(item.name or "")
            elif item.kind is ItemKind.CLOSE:
                if item.name in stack:
                    while stack and stack.pop() != item.name:
                        pass
                if skip_depth is not None and len(stack) <= skip_depth:
                    # 祖先元素的闭合标签同时结束了区块，本身需要保留
                    own_close = len(stack) == skip_depth
                    skip_depth = None
                    skipped = []
                    if own_close:
                        continue
            elif (
                item.kind is ItemKind.EMPTY
                and skip_depth is None
                and contextualizer.is_removable(item)
            ):
                removed += 1
                continue

            if skip_depth is not None:
                skipped.append(item)
                continue
            keep(item)

        if skipped:
            # 区块直到输入结束都没有闭合，无法判断其边界：只丢弃起始标签
            logger.warning(
                "可移除区块没有闭合，保留其后的内容。",
                tag=skipped[0].name,
                kept=len(skipped) - 1,
            )
            removed -= 1
            for item in skipped[1:]:
                keep(item)

        if removed:
            logger.debug("已移除不可翻译的区块。", count=removed)
        doc = Doc(items=tuple(items), categories=tuple(categories))
        return doc.wrap_sections() if self.wrap_sections else doc
