# tests/integration/test_page_loader.py
"""
页面加载流程的端到端测试：内容 API、Action API 与知识库均由 httpx.MockTransport 模拟。
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from cx_hub.adaptation import Adapter, CategoryAdaptation
from cx_hub.config import CxHubConfig, PageLoaderConfig, RemovableSections
from cx_hub.exceptions import AdaptationFailure, ApiRequestError, InvalidResponse
from cx_hub.lineardoc import CategoryTag, tokenize
from cx_hub.mt.debug import DebugClient
from cx_hub.wiki.api import MWApiClient
from cx_hub.wiki.page_loader import ACCEPT_HEADER, PageLoader

PAGE_HTML = (
    "<!DOCTYPE html>\n<html><head><title>Oxygen</title></head><body>"
    '<div class="hatnote">For other uses, see O.</div>'
    "<p>Oxygen is a chemical element. It has the symbol O.</p>\n"
    "<p>It is a highly reactive nonmetal.</p>"
    '<link rel="mw:PageProp/Category" href="./Category:Chemical_elements#Oxygen"/>'
    '<link rel="mw:PageProp/Category" href="./Category:Oxidizing_agents"/>'
    "</body></html>"
)
ETAG = 'W/"1012345678/c4e494da-ee8f-11e4-83a1-8b80de1cde5f"'

LANGLINKS = {
    "Category:Chemical elements": "Kategorie:Chemisches Element",
    "Category:Oxidizing agents": None,
}


def _langlinks_response(request: httpx.Request) -> httpx.Response:
    title = request.url.params["titles"]
    target = LANGLINKS.get(title)
    page: dict[str, Any] = {"title": title}
    if target:
        page["langlinks"] = [{"lang": request.url.params["lllang"], "title": target}]
    return httpx.Response(200, json={"query": {"pages": [page]}})


class WikiBackend:
    """一个极简的维基后端模拟，按路径与参数分派。"""

    def __init__(
        self,
        *,
        etag: str | None = ETAG,
        page_status: int = 200,
        wikibase_item: str | None = "Q629",
        label: str | None = None,
        langlinks: Callable[[httpx.Request], httpx.Response] = _langlinks_response,
    ):
        self.etag = etag
        self.page_status = page_status
        self.wikibase_item = wikibase_item
        self.label = label
        self.langlinks = langlinks
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if "/api/rest_v1/page/html/" in request.url.path:
            headers = {"etag": self.etag} if self.etag else {}
            return httpx.Response(self.page_status, text=PAGE_HTML, headers=headers)
        if request.url.host == "www.wikidata.org":
            labels = {"de": {"value": self.label}} if self.label else {}
            qid = request.url.params["ids"]
            return httpx.Response(200, json={"entities": {qid: {"labels": labels}}})
        if request.url.params.get("prop") == "langlinks":
            return self.langlinks(request)
        if request.url.params.get("prop") == "info|pageprops":
            page: dict[str, Any] = {"title": request.url.params["titles"]}
            if self.wikibase_item:
                page["pageprops"] = {"wikibase_item": self.wikibase_item}
            return httpx.Response(200, json={"query": {"pages": [page]}})
        return httpx.Response(404)


@pytest.fixture
def page_loader_config() -> PageLoaderConfig:
    return PageLoaderConfig(removable_sections=RemovableSections(classes=("hatnote",)))


def _loader(
    config: CxHubConfig,
    backend: WikiBackend,
    http_client_factory,
    page_loader_config: PageLoaderConfig,
    target_lang: str | None = "de",
) -> PageLoader:
    api_client = MWApiClient(config.wiki, http_client=http_client_factory(backend))
    return PageLoader(
        config,
        "en",
        target_lang,
        api_client=api_client,
        page_loader_config=page_loader_config,
    )


@pytest.mark.asyncio
async def test_get_page_end_to_end(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    backend = WikiBackend()
    loader = _loader(test_config, backend, http_client_factory, page_loader_config)

    result = await loader.get_page("Oxygen", 1012345678)

    page_request = backend.requests[0]
    assert page_request.url.host == "en.wikipedia.org"
    assert page_request.url.path == "/api/rest_v1/page/html/Oxygen/1012345678"
    assert page_request.headers["Accept"] == ACCEPT_HEADER

    assert result.revision == "1012345678"
    assert result.segments == 3
    assert "hatnote" not in result.content
    assert '<span class="cx-segment" data-segmentid="0">' in result.content
    assert list(result.categories or {}) == [
        "Category:Chemical elements",
        "Category:Oxidizing agents",
    ]
    assert result.categories["Category:Chemical elements"] == CategoryAdaptation(
        source_name="Category:Chemical elements",
        target_name="Kategorie:Chemisches Element",
        adapted=True,
    )
    assert result.categories["Category:Oxidizing agents"].adapted is False


@pytest.mark.asyncio
async def test_title_is_url_encoded(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    backend = WikiBackend()
    loader = _loader(test_config, backend, http_client_factory, page_loader_config, None)

    await loader.fetch("AC/DC (band)")

    assert backend.requests[0].url.raw_path.decode().endswith(
        "/page/html/AC%2FDC%20%28band%29"
    )


@pytest.mark.asyncio
async def test_get_page_without_target_language_skips_categories(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    backend = WikiBackend()
    loader = _loader(test_config, backend, http_client_factory, page_loader_config, None)

    result = await loader.get_page("Oxygen", wrap_sections=True)

    assert result.categories is None
    assert 'id="cxSourceSection0"' in result.content
    assert len(backend.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("etag", [None, "garbage etag"])
async def test_bad_etag_aborts_the_request(
    etag: str | None,
    test_config: CxHubConfig,
    http_client_factory,
    page_loader_config: PageLoaderConfig,
) -> None:
    loader = _loader(
        test_config, WikiBackend(etag=etag), http_client_factory, page_loader_config
    )
    with pytest.raises(InvalidResponse):
        await loader.get_page("Oxygen")


@pytest.mark.asyncio
async def test_missing_page_aborts_the_request(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    loader = _loader(
        test_config, WikiBackend(page_status=404), http_client_factory, page_loader_config
    )
    with pytest.raises(ApiRequestError) as exc_info:
        await loader.get_page("Nope")
    assert exc_info.value.status == 404


@pytest.mark.asyncio
async def test_category_failure_fails_the_whole_page(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    def flaky_langlinks(request: httpx.Request) -> httpx.Response:
        if request.url.params["titles"] == "Category:Oxidizing agents":
            return httpx.Response(500)
        return _langlinks_response(request)

    loader = _loader(
        test_config,
        WikiBackend(langlinks=flaky_langlinks),
        http_client_factory,
        page_loader_config,
    )
    with pytest.raises(AdaptationFailure) as exc_info:
        await loader.get_page("Oxygen")

    assert list(exc_info.value.failures) == ["Category:Oxidizing agents"]
    assert isinstance(exc_info.value.failures["Category:Oxidizing agents"], ApiRequestError)


def _category_tags(count: int) -> list[CategoryTag]:
    tags = []
    for i in range(count):
        (item,) = list(
            tokenize(f'<link rel="mw:PageProp/Category" href="./Category:C{i}">')
        )
        tag = CategoryTag.from_item(item)
        assert tag is not None
        tags.append(tag)
    return tags


class SlowApi:
    """每次查询都会等待一段时间的知识库模拟。"""

    def __init__(self, delays: dict[str, float]):
        self.delays = delays

    async def title_pair_request(self, title: str, source: str, target: str) -> str:
        await asyncio.sleep(self.delays[title])
        return title.replace("Category:", "Kategorie:")


@pytest.mark.asyncio
async def test_categories_are_adapted_concurrently_and_kept_in_order(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    tags = _category_tags(5)
    delays = {tag.name: 0.05 * (5 - i) for i, tag in enumerate(tags)}
    loader = _loader(
        test_config, WikiBackend(), http_client_factory, page_loader_config
    )
    adapter = Adapter("en", "de", SlowApi(delays))  # type: ignore[arg-type]

    started = time.perf_counter()
    result = await loader.adapt_categories(tags, adapter)
    elapsed = time.perf_counter() - started

    # 总耗时接近最慢的一次，而不是所有耗时之和（0.75s）
    assert elapsed < 0.5
    assert list(result) == [tag.name for tag in tags]
    assert result["Category:C0"].target_name == "Kategorie:C0"


@pytest.mark.asyncio
async def test_empty_category_list(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    loader = _loader(test_config, WikiBackend(), http_client_factory, page_loader_config)
    adapter = Adapter("en", "de", SlowApi({}))  # type: ignore[arg-type]
    assert await loader.adapt_categories([], adapter) == {}


# --- 标题适配 ---


@pytest.mark.asyncio
async def test_title_without_wikibase_item_returns_none(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    loader = _loader(
        test_config, WikiBackend(wikibase_item=None), http_client_factory, page_loader_config
    )
    assert await loader.fetch_target_title("Oxygen", DebugClient()) is None


@pytest.mark.asyncio
async def test_title_uses_knowledge_base_label_verbatim(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    loader = _loader(
        test_config, WikiBackend(label="Sauerstoff"), http_client_factory, page_loader_config
    )
    mt_client = DebugClient(DebugClient.default_config(options={"mode": "FAIL"}))

    adaptation = await loader.fetch_target_title("Oxygen", mt_client)

    assert adaptation is not None
    assert adaptation.target_title == "Sauerstoff"
    assert adaptation.source_language == "en"
    assert adaptation.target_language == "de"


@pytest.mark.asyncio
async def test_title_falls_back_to_machine_translation(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    loader = _loader(test_config, WikiBackend(), http_client_factory, page_loader_config)
    mt_client = DebugClient(
        DebugClient.default_config(options={"translation_map": {"Oxygen": "Sauerstoff"}})
    )
    adaptation = await loader.fetch_target_title("Oxygen", mt_client)
    assert adaptation is not None
    assert adaptation.target_title == "Sauerstoff"


@pytest.mark.asyncio
async def test_title_machine_translation_failure_keeps_source_title(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    loader = _loader(test_config, WikiBackend(), http_client_factory, page_loader_config)
    mt_client = DebugClient(DebugClient.default_config(options={"mode": "FAIL"}))

    adaptation = await loader.fetch_target_title("Oxygen", mt_client)

    assert adaptation is not None
    assert adaptation.target_title == "Oxygen"


@pytest.mark.asyncio
async def test_title_lookups_are_cached(
    test_config: CxHubConfig, http_client_factory, page_loader_config: PageLoaderConfig
) -> None:
    backend = WikiBackend(label="Sauerstoff")
    loader = _loader(test_config, backend, http_client_factory, page_loader_config)

    await loader.fetch_target_title("Oxygen", DebugClient())
    await loader.fetch_target_title("Oxygen", DebugClient())

    assert len(backend.requests) == 2
    assert [r.url.host for r in backend.requests] == [
        "en.wikipedia.org",
        "www.wikidata.org",
    ]
