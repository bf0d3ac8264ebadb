# cx_hub/adaptation/category.py
"""分类适配：通过源维基的跨语言链接找到目标语言中的对应分类。"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from cx_hub.adaptation.models import CategoryAdaptation
from cx_hub.lineardoc.doc import CategoryTag

if TYPE_CHECKING:
    from cx_hub.wiki.api import ApiRequestManager

logger = structlog.get_logger(__name__)


class CategoryAdapter:
    def __init__(self, source_lang: str, target_lang: str, api: ApiRequestManager):
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.api = api

    async def adapt(self, tag: CategoryTag) -> CategoryAdaptation:
        target_name = await self.api.title_pair_request(
            tag.name, self.source_lang, self.target_lang
        )
        if not target_name:
            logger.debug(
                "分类在目标语言中没有对应项。",
                category=tag.name,
                target_lang=self.target_lang,
            )
            return CategoryAdaptation(source_name=tag.name)
        return CategoryAdaptation(
            source_name=tag.name, target_name=target_name, adapted=True
        )
