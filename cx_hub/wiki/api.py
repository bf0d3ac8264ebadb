# cx_hub/wiki/api.py
"""
维基内容 API、Action API 与知识库（Wikidata）API 的异步客户端。

`MWApiClient` 只负责传输：拼接地址、发送请求、把网络错误与非 2xx 状态统一转换为
`ApiRequestError`。`ApiRequestManager` 在其上提供页面信息、知识库标签与跨语言链接
查询，并用 `LookupCache` 缓存结果。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from cx_hub.cache import LookupCache
from cx_hub.config import CxHubConfig, WikiConfig
from cx_hub.exceptions import ApiRequestError
from cx_hub.utils import get_prop

logger = structlog.get_logger(__name__)

# 语言代码与维基百科子域名不一致的情况
SITE_CODE_MAP = {
    "be-tarask": "be-x-old",
    "gsw": "als",
    "lzh": "zh-classical",
    "nan": "zh-min-nan",
    "nb": "no",
    "rup": "roa-rup",
    "sgs": "bat-smg",
    "vro": "fiu-vro",
    "yue": "zh-yue",
}


def get_domain(language: str, template: str = WikiConfig().domain_template) -> str:
    return template.format(code=SITE_CODE_MAP.get(language, language))


class MWApiClient:
    """与维基站点通信的薄传输层。"""

    def __init__(
        self,
        wiki_config: WikiConfig | None = None,
        *,
        timeout: float = 30.0,
        proxy: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.wiki_config = wiki_config or WikiConfig()
        self._timeout = timeout
        self._proxy = proxy
        self._client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_config(
        cls, config: CxHubConfig, http_client: httpx.AsyncClient | None = None
    ) -> "MWApiClient":
        return cls(
            config.wiki,
            timeout=config.http_timeout,
            proxy=config.proxy,
            http_client=http_client,
        )

    def get_domain(self, language: str) -> str:
        return get_domain(language, self.wiki_config.domain_template)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                proxy=self._proxy,
                headers={"User-Agent": self.wiki_config.user_agent},
                follow_redirects=True,
            )
        return self._client

    async def _get(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._get_client().get(
                url,
                params=dict(params) if params else None,
                headers=dict(headers or {}),
            )
        except httpx.HTTPError as e:
            raise ApiRequestError(
                f"请求 {url} 失败: {e.__class__.__name__}: {e}"
            ) from e
        if not response.is_success:
            raise ApiRequestError(f"请求 {url} 失败", status=response.status_code)
        return response

    async def rest_api_get(
        self, domain: str, path: str, headers: Mapping[str, str] | None = None
    ) -> httpx.Response:
        base = self.wiki_config.rest_api_template.format(domain=domain)
        logger.debug("请求内容 API。", domain=domain, path=path)
        return await self._get(base + path, headers=headers)

    async def _get_json(self, url: str, params: Mapping[str, Any]) -> Any:
        response = await self._get(url, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise ApiRequestError(f"{url} 返回了无效的 JSON") from e

    async def action_api_get(self, domain: str, params: Mapping[str, Any]) -> Any:
        url = self.wiki_config.action_api_template.format(domain=domain)
        return await self._get_json(
            url, {"format": "json", "formatversion": "2", **params}
        )

    async def wikidata_api_get(self, params: Mapping[str, Any]) -> Any:
        return await self._get_json(
            self.wiki_config.wikidata_api, {"format": "json", **params}
        )

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


class ApiRequestManager:
    """知识库与跨语言查询的入口，结果按请求参数缓存。"""

    def __init__(self, client: MWApiClient, cache: LookupCache | None = None):
        self.client = client
        self.cache = cache or LookupCache()

    async def title_info_request(
        self, title: str, language: str
    ) -> dict[str, Any] | None:
        """返回页面信息（含 `pageprops.wikibase_item`），页面不存在时返回 None。"""

        async def load() -> dict[str, Any] | None:
            body = await self.client.action_api_get(
                self.client.get_domain(language),
                {
                    "action": "query",
                    "prop": "info|pageprops",
                    "titles": title,
                    "redirects": "1",
                },
            )
            page = get_prop(["query", "pages", 0], body)
            if not page or page.get("missing") or page.get("invalid"):
                return None
            return page

        key = LookupCache.make_key("titleinfo", title=title, language=language)
        return await self.cache.get_or_load(key, load)

    async def wikidata_request(self, qid: str, language: str) -> str | None:
        """返回知识库条目在目标语言下的标签。"""

        async def load() -> str | None:
            body = await self.client.wikidata_api_get(
                {
                    "action": "wbgetentities",
                    "ids": qid,
                    "props": "labels",
                    "languages": language,
                }
            )
            return get_prop(["entities", qid, "labels", language, "value"], body)

        key = LookupCache.make_key("wikidata", qid=qid, language=language)
        return await self.cache.get_or_load(key, load)

    async def title_pair_request(
        self, title: str, source_language: str, target_language: str
    ) -> str | None:
        """通过跨语言链接查找 `title` 在目标语言维基中的对应页面标题。"""

        async def load() -> str | None:
            body = await self.client.action_api_get(
                self.client.get_domain(source_language),
                {
                    "action": "query",
                    "prop": "langlinks",
                    "lllang": target_language,
                    "titles": title,
                    "redirects": "1",
                },
            )
            return get_prop(["query", "pages", 0, "langlinks", 0, "title"], body)

        key = LookupCache.make_key(
            "titlepair", title=title, source=source_language, target=target_language
        )
        return await self.cache.get_or_load(key, load)
