# cx_hub/lineardoc/segmenter.py
"""
按句子切分线性文档。

切分结果 `SegmentedDoc.units` 是对原文档条目的一个划分：没有空隙也没有重叠，
把所有单元的源 HTML 依次拼接即可逐字节还原 `Doc.get_html()`。
句子只在可分段块（段落、列表项、标题、单元格等）内部、且不处于行内标签中时才会断开。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from cx_hub.lineardoc.doc import Doc, Item, ItemKind

SEGMENTABLE_BLOCKS = frozenset(
    {
        "p", "li", "dd", "dt", "h1", "h2", "h3", "h4", "h5", "h6",
        "td", "th", "caption", "figcaption", "blockquote",
    }
)
# 出现在可分段块内部时会打断当前句子的块级元素
BLOCK_ELEMENTS = SEGMENTABLE_BLOCKS | frozenset(
    {
        "div", "section", "table", "tbody", "thead", "tfoot", "tr", "ul", "ol",
        "dl", "figure", "pre", "hr", "body", "html", "article", "aside",
    }
)

ABBREVIATIONS = frozenset(
    {"mr", "mrs", "ms", "dr", "prof", "st", "jr", "sr", "vs", "etc", "e.g", "i.e"}
)
# 仅在后面紧跟数字时才视为缩写，如 "No. 5"
NUMERAL_ABBREVIATIONS = frozenset({"no", "nos", "nr"})

_LATIN_BOUNDARY = re.compile(r"[.!?]+[\"'”’)\]]*(?=\s|$)")
_CJK_BOUNDARY = re.compile(r"[。！？]+[」』”’）]*")
_INDIC_BOUNDARY = re.compile(r"[।॥]+(?=\s|$)")
_ARABIC_BOUNDARY = re.compile(r"[.!?؟۔]+(?=\s|$)")

CJK_LANGUAGES = frozenset({"zh", "ja", "yue", "wuu", "gan", "lzh", "zh-yue"})
INDIC_LANGUAGES = frozenset({"hi", "mr", "ne", "sa", "bn", "as", "mai", "bho", "pa"})
ARABIC_SCRIPT_LANGUAGES = frozenset({"ar", "arz", "fa", "ur", "ps", "ckb", "sd"})


def _base_language(lang: str | None) -> str:
    return (lang or "").lower().split("-")[0]


def find_sentence_boundaries(
    text: str, lang: str | None = None, *, include_end: bool = False
) -> list[int]:
    """
    返回句子结束位置（句末标点之后）的偏移列表。

    默认不包含位于文本末尾的边界；切分文档中的单个文本片段时使用 `include_end=True`。

    拉丁文字会跳过常见缩写与单字母姓名首字母；中日文使用全角句末标点，
    不要求其后有空白。
    """
    base = _base_language(lang)
    if base in CJK_LANGUAGES or (lang or "").lower() in CJK_LANGUAGES:
        return [
            m.end()
            for m in _CJK_BOUNDARY.finditer(text)
            if include_end or m.end() < len(text)
        ]
    if base in INDIC_LANGUAGES:
        pattern = _INDIC_BOUNDARY
    elif base in ARABIC_SCRIPT_LANGUAGES:
        pattern = _ARABIC_BOUNDARY
    else:
        pattern = _LATIN_BOUNDARY

    boundaries = []
    for match in pattern.finditer(text):
        if not include_end and match.end() >= len(text.rstrip()):
            continue
        if pattern is _LATIN_BOUNDARY and text[match.start()] == ".":
            word = re.search(r"([\w.]+)$", text[: match.start()])
            token = word.group(1).lower() if word else ""
            if token in ABBREVIATIONS or (len(token) == 1 and token.isalpha()):
                continue
            following = text[match.end() :].lstrip()[:1]
            if token in NUMERAL_ABBREVIATIONS and following.isdigit():
                continue
        boundaries.append(match.end())
    return boundaries


class UnitKind(str, Enum):
    MARKUP = "markup"
    SENTENCE = "sentence"


@dataclass(frozen=True)
class TranslationUnit:
    """文档的一个连续切片，可被独立翻译。"""

    kind: UnitKind
    items: tuple[Item, ...]
    segment_id: int | None = None

    @property
    def source_html(self) -> str:
        return "".join(item.raw for item in self.items)

    @property
    def text(self) -> str:
        return "".join(item.text for item in self.items)

    def get_html(self) -> str:
        if self.kind is UnitKind.SENTENCE:
            return (
                f'<span class="cx-segment" data-segmentid="{self.segment_id}">'
                f"{self.source_html}</span>"
            )
        return self.source_html


@dataclass(frozen=True)
class SegmentedDoc:
    doc: Doc
    units: tuple[TranslationUnit, ...]

    @property
    def sentences(self) -> list[TranslationUnit]:
        return [u for u in self.units if u.kind is UnitKind.SENTENCE]

    def get_source_html(self) -> str:
        return "".join(unit.source_html for unit in self.units)

    def get_html(self) -> str:
        """带句子标记的 HTML，供前端对齐原文与译文。"""
        return "".join(unit.get_html() for unit in self.units)


class _UnitBuilder:
    def __init__(self) -> None:
        self.units: list[TranslationUnit] = []
        self.markup: list[Item] = []
        self.sentence: list[Item] = []
        self.inline_depth = 0
        self.next_id = 0

    def add_markup(self, item: Item) -> None:
        self.flush_sentence()
        self.markup.append(item)

    def flush_markup(self) -> None:
        if self.markup:
            self.units.append(TranslationUnit(UnitKind.MARKUP, tuple(self.markup)))
            self.markup = []

    def add_to_sentence(self, item: Item) -> None:
        self.sentence.append(item)

    def flush_sentence(self) -> None:
        """
        结束当前句子。

        句子里仍有未闭合的行内标签时（例如行内元素中出现了块级元素），
        整段内容作为标记输出：句子标记不会跨越未闭合的标签。
        """
        if not self.sentence:
            return
        if not self.inline_depth and any(
            i.raw.strip() for i in self.sentence if i.kind is ItemKind.TEXT
        ):
            self.flush_markup()
            self.units.append(
                TranslationUnit(UnitKind.SENTENCE, tuple(self.sentence), self.next_id)
            )
            self.next_id += 1
        else:
            self.markup.extend(self.sentence)
        self.sentence = []
        self.inline_depth = 0

    def finish(self) -> tuple[TranslationUnit, ...]:
        self.flush_sentence()
        self.flush_markup()
        return tuple(self.units)


class Segmenter:
    """语言相关的句子切分器。"""

    def segment(self, doc: Doc, lang: str | None = None) -> SegmentedDoc:
        builder = _UnitBuilder()
        # 记录每个打开的可分段块；块内嵌套的块级元素会暂停分段
        block_stack: list[str] = []
        segmenting = False

        for item in doc.items:
            name = item.name or ""
            is_block = item.is_tag and name in BLOCK_ELEMENTS

            if item.kind is ItemKind.OPEN and is_block:
                builder.add_markup(item)
                block_stack.append(name)
                segmenting = name in SEGMENTABLE_BLOCKS
                continue
            if item.kind is ItemKind.CLOSE and is_block:
                builder.add_markup(item)
                if name in block_stack:
                    while block_stack and block_stack.pop() != name:
                        pass
                segmenting = bool(block_stack) and block_stack[-1] in SEGMENTABLE_BLOCKS
                continue
            if not segmenting or (item.kind is ItemKind.EMPTY and is_block):
                builder.add_markup(item)
                continue

            if item.kind is ItemKind.TEXT:
                self._add_text(builder, item, lang)
                continue

            if item.kind is ItemKind.CLOSE and not builder.inline_depth:
                # 在当前句子之前打开的行内标签
                builder.add_markup(item)
                continue
            if item.kind is ItemKind.OPEN:
                builder.inline_depth += 1
            elif item.kind is ItemKind.CLOSE:
                builder.inline_depth -= 1
            builder.add_to_sentence(item)

        return SegmentedDoc(doc=doc, units=builder.finish())

    def _add_text(self, builder: _UnitBuilder, item: Item, lang: str | None) -> None:
        raw = item.raw
        if not builder.sentence:
            # 句首空白不属于句子
            stripped = raw.lstrip()
            if len(stripped) < len(raw):
                builder.add_markup(Item(ItemKind.TEXT, raw[: len(raw) - len(stripped)]))
                raw = stripped
            if not raw:
                return

        if builder.inline_depth:
            builder.add_to_sentence(Item(ItemKind.TEXT, raw))
            return

        start = 0
        for boundary in find_sentence_boundaries(raw, lang, include_end=True):
            builder.add_to_sentence(Item(ItemKind.TEXT, raw[start:boundary]))
            builder.flush_sentence()
            rest = raw[boundary:]
            gap = len(rest) - len(rest.lstrip())
            if gap:
                builder.add_markup(Item(ItemKind.TEXT, raw[boundary : boundary + gap]))
            start = boundary + gap
        if start < len(raw):
            builder.add_to_sentence(Item(ItemKind.TEXT, raw[start:]))
