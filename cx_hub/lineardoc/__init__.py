# cx_hub/lineardoc/__init__.py
"""页面的线性文档表示：解析、分类抽取、区块包装与句子切分。"""

from cx_hub.lineardoc.doc import CategoryTag, Doc, Item, ItemKind
from cx_hub.lineardoc.parser import Contextualizer, Parser, tokenize
from cx_hub.lineardoc.segmenter import (
    SegmentedDoc,
    Segmenter,
    TranslationUnit,
    UnitKind,
    find_sentence_boundaries,
)

__all__ = [
    "CategoryTag",
    "Contextualizer",
    "Doc",
    "Item",
    "ItemKind",
    "Parser",
    "SegmentedDoc",
    "Segmenter",
    "TranslationUnit",
    "UnitKind",
    "find_sentence_boundaries",
    "tokenize",
]
