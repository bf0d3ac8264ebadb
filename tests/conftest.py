# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

import os
from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from pytest_mock import MockerFixture
from rich.console import Console

from cx_hub.config import CxHubConfig
from cx_hub.metrics import MetricsRegistry

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """每个测试独立的指标注册表，避免全局计数互相干扰。"""
    return MetricsRegistry()


@pytest.fixture
def test_config(monkeypatch: pytest.MonkeyPatch) -> CxHubConfig:
    """不受外部环境变量与 .env 影响的配置。"""
    for key in list(os.environ):
        if key.startswith("CX_"):
            monkeypatch.delenv(key, raising=False)
    return CxHubConfig(_env_file=None)


@pytest.fixture
def forbidden_transport() -> httpx.MockTransport:
    """任何请求都会导致测试失败的传输层，用于断言“未发起网络调用”。"""

    def handler(request: httpx.Request) -> httpx.Response:
        pytest.fail(f"不应发起网络请求: {request.method} {request.url}")

    return httpx.MockTransport(handler)


@pytest_asyncio.fixture
async def http_client_factory() -> AsyncGenerator[Callable[[Handler], httpx.AsyncClient], None]:
    """按给定的处理函数创建走 MockTransport 的客户端，测试结束后统一关闭。"""
    clients: list[httpx.AsyncClient] = []

    def factory(handler: Handler) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.aclose()
