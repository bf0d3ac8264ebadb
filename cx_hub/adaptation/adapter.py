# cx_hub/adaptation/adapter.py
"""
内容适配的分派入口。

`Adapter.get_adapter` 根据元素的形状选择适配策略；目前唯一的策略是分类链接
（`<link rel="mw:PageProp/Category">`）。无法识别的元素会直接报错，而不是被静默跳过。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from cx_hub.adaptation.category import CategoryAdapter
from cx_hub.adaptation.models import CategoryAdaptation
from cx_hub.exceptions import AdaptationFailure
from cx_hub.lineardoc.doc import CATEGORY_REL, CategoryTag, Item

if TYPE_CHECKING:
    from cx_hub.wiki.api import ApiRequestManager

Element = Union[CategoryTag, Item]


class Adapter:
    def __init__(self, source_lang: str, target_lang: str, api: ApiRequestManager):
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.api = api

    def get_adapter(self, element: Element) -> CategoryAdapter:
        item = element.item if isinstance(element, CategoryTag) else element
        if item.name == "link" and item.has_rel(CATEGORY_REL):
            return CategoryAdapter(self.source_lang, self.target_lang, self.api)
        raise AdaptationFailure(f"没有可用于元素 <{item.name}> 的适配器。")

    async def adapt(self, element: Element) -> CategoryAdaptation:
        adapter = self.get_adapter(element)
        if isinstance(element, CategoryTag):
            return await adapter.adapt(element)
        tag = CategoryTag.from_item(element)
        if tag is None:
            raise AdaptationFailure("分类链接缺少 href。")
        return await adapter.adapt(tag)
