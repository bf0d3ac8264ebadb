# cx_hub/wiki/page_loader.py
"""
页面加载器：从源维基取得页面，解析、切分为可翻译单元，并可选地适配分类。

数据单向流动：fetch → parse → segment → adapt categories → assemble。
标题适配是独立的入口：优先使用知识库标签，找不到时回退到机器翻译。
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from urllib.parse import quote

import structlog
from pydantic import BaseModel, ConfigDict

from cx_hub.adaptation import Adapter, CategoryAdaptation, TitleAdaptation
from cx_hub.cache import LookupCache
from cx_hub.config import CxHubConfig, PageLoaderConfig
from cx_hub.exceptions import AdaptationFailure, CxHubError
from cx_hub.lineardoc import CategoryTag, Doc, Parser, Segmenter
from cx_hub.mt.base import ContentType, MTClient
from cx_hub.wiki.api import ApiRequestManager, MWApiClient
from cx_hub.wiki.etag import parse_etag

logger = structlog.get_logger(__name__)

HTML_PROFILE = "https://www.mediawiki.org/wiki/Specs/HTML/2.4.0"
ACCEPT_HEADER = f'text/html; charset=utf-8; profile="{HTML_PROFILE}"'


class FetchedPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    body: str
    revision: str


class PageResult(BaseModel):
    """一次页面加载的输出。`categories` 在未指定目标语言时为 None。"""

    model_config = ConfigDict(frozen=True)

    content: str
    revision: str
    categories: dict[str, CategoryAdaptation] | None = None
    segments: int = 0


class PageLoader:
    def __init__(
        self,
        config: CxHubConfig,
        source_lang: str,
        target_lang: str | None = None,
        *,
        api_client: MWApiClient | None = None,
        request_manager: ApiRequestManager | None = None,
        page_loader_config: PageLoaderConfig | None = None,
    ):
        self.config = config
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.api_client = api_client or MWApiClient.from_config(config)
        self.request_manager = request_manager or ApiRequestManager(
            self.api_client, LookupCache(config.cache_config)
        )
        self.page_loader_config = (
            page_loader_config or config.load_page_loader_config()
        )
        self.logger = logger.bind(
            source_lang=source_lang, target_lang=target_lang
        )

    async def fetch(self, title: str, revision: str | int | None = None) -> FetchedPage:
        """
        从内容 API 取得页面 HTML 与修订号。

        修订号取自响应的 ETag 头；ETag 缺失或格式错误、请求失败或返回非 2xx，
        都会以 `InvalidResponse`（或其子类 `ApiRequestError`）中止本次请求。
        """
        path = "page/html/" + quote(title, safe="")
        if revision:
            path += f"/{revision}"
        domain = self.api_client.get_domain(self.source_lang)
        response = await self.api_client.rest_api_get(
            domain, path, headers={"Accept": ACCEPT_HEADER}
        )
        etag = parse_etag(response.headers.get("etag"))
        self.logger.debug("页面已获取。", title=title, revision=etag.revision)
        return FetchedPage(body=response.text, revision=etag.revision)

    def get_parsed_doc(self, html: str, wrap_sections: bool = False) -> Doc:
        parser = Parser(
            self.page_loader_config.removable_sections, wrap_sections=wrap_sections
        )
        return parser.parse(html)

    async def adapt_categories(
        self, tags: Sequence[CategoryTag], adapter: Adapter
    ) -> dict[str, CategoryAdaptation]:
        """
        并发适配所有分类，结果按源顺序排列。

        任一分类失败即整体失败：抛出 `AdaptationFailure`，其中列出每个失败的分类，
        不返回部分结果。
        """
        results = await asyncio.gather(
            *(adapter.adapt(tag) for tag in tags), return_exceptions=True
        )
        failures: dict[str, BaseException] = {}
        adapted: dict[str, CategoryAdaptation] = {}
        for tag, result in zip(tags, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures[tag.name] = result
            else:
                adapted[tag.name] = result

        if failures:
            self.logger.warning(
                "分类适配失败。", failed=list(failures), total=len(tags)
            )
            raise AdaptationFailure(
                f"{len(failures)} 个分类适配失败: {', '.join(failures)}", failures
            )
        return adapted

    async def get_page(
        self,
        title: str,
        revision: str | int | None = None,
        wrap_sections: bool = False,
    ) -> PageResult:
        page = await self.fetch(title, revision)
        doc = self.get_parsed_doc(page.body, wrap_sections)
        segmented = Segmenter().segment(doc, self.source_lang)

        categories = None
        if self.target_lang:
            adapter = Adapter(self.source_lang, self.target_lang, self.request_manager)
            categories = await self.adapt_categories(doc.categories, adapter)

        self.logger.info(
            "页面加载完成。",
            title=title,
            revision=page.revision,
            segments=len(segmented.sentences),
            categories=len(doc.categories),
        )
        return PageResult(
            content=segmented.get_html(),
            revision=page.revision,
            categories=categories,
            segments=len(segmented.sentences),
        )

    async def fetch_target_title(
        self, source_title: str, mt_client: MTClient
    ) -> TitleAdaptation | None:
        """
        为源页面标题找到目标语言中的标题。

        源页面没有知识库条目时返回 None。有条目时优先使用条目在目标语言的标签；
        没有标签则用机器翻译，翻译失败时退回源标题。
        """
        if not self.target_lang:
            raise AdaptationFailure("标题适配需要目标语言。")

        info = await self.request_manager.title_info_request(
            source_title, self.source_lang
        )
        qid = (info or {}).get("pageprops", {}).get("wikibase_item")
        if not qid:
            self.logger.debug("页面没有知识库条目。", title=source_title)
            return None

        target_title = await self.request_manager.wikidata_request(
            qid, self.target_lang
        )
        if not target_title and source_title:
            try:
                translated = await mt_client.translate(
                    self.source_lang, self.target_lang, source_title, ContentType.TEXT
                )
            except CxHubError as e:
                self.logger.warning(
                    "标题机器翻译失败，沿用源标题。",
                    title=source_title,
                    provider=mt_client.name,
                    error=str(e),
                )
            else:
                target_title = translated.strip() or None

        return TitleAdaptation(
            source_language=self.source_lang,
            target_language=self.target_lang,
            source_title=source_title,
            target_title=target_title,
        )

    async def close(self) -> None:
        await self.api_client.close()
