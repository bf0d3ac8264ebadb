# tests/unit/cli/test_cli_commands.py
"""针对 cx-hub CLI 命令的单元测试，使用 Typer 的 CliRunner 调用。"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_mock import MockerFixture
from typer.testing import CliRunner

import cx_hub
from cx_hub.adaptation import CategoryAdaptation, TitleAdaptation
from cx_hub.cli import app
from cx_hub.exceptions import ApiRequestError
from cx_hub.wiki.page_loader import PageResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CX_LOGGING__LEVEL", "WARNING")
    monkeypatch.delenv("CX_PROVIDER_CONFIGS", raising=False)
    monkeypatch.delenv("CX_DEFAULT_PROVIDER", raising=False)


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert cx_hub.__version__ in result.stdout


def test_providers_lists_every_provider() -> None:
    result = runner.invoke(app, ["providers"])
    assert result.exit_code == 0
    for name in ("apertium", "baidu", "debug", "google", "yandex", "youdao"):
        assert name in result.stdout


def test_translate_with_debug_provider() -> None:
    result = runner.invoke(app, ["translate", "Hello", "-s", "en", "-t", "de"])
    assert result.exit_code == 0
    assert "[de] Hello" in result.stdout


def test_translate_html() -> None:
    result = runner.invoke(
        app, ["translate", "<b>Hello</b>", "-s", "en", "-t", "fr", "--html"]
    )
    assert result.exit_code == 0
    assert "[fr] <b>Hello</b>" in result.stdout


def test_translate_provider_failure_exits_with_1() -> None:
    env = {"CX_PROVIDER_CONFIGS": json.dumps({"debug": {"options": {"mode": "FAIL"}}})}
    result = runner.invoke(app, ["translate", "Hello", "-s", "en", "-t", "de"], env=env)
    assert result.exit_code == 1
    assert "翻译失败" in result.stdout


def test_translate_missing_credentials_exits_with_1() -> None:
    result = runner.invoke(
        app, ["translate", "Hello", "-s", "en", "-t", "de", "-p", "google"]
    )
    assert result.exit_code == 1
    assert "misconfigured" in result.stdout


def test_translate_rejects_invalid_language() -> None:
    result = runner.invoke(app, ["translate", "Hello", "-s", "german", "-t", "de"])
    assert result.exit_code == 1
    assert "语言代码错误" in result.stdout


def test_translate_unknown_provider() -> None:
    result = runner.invoke(
        app, ["translate", "Hello", "-s", "en", "-t", "de", "-p", "nope"]
    )
    assert result.exit_code == 1


def _mock_loader(mocker: MockerFixture) -> MagicMock:
    loader = MagicMock()
    loader.close = AsyncMock()
    mocker.patch("cx_hub.cli.page.PageLoader", return_value=loader)
    return loader


def test_page_command(mocker: MockerFixture) -> None:
    loader = _mock_loader(mocker)
    loader.get_page = AsyncMock(
        return_value=PageResult(
            content='<p><span class="cx-segment" data-segmentid="0">Hi.</span></p>',
            revision="123",
            categories={
                "Category:X": CategoryAdaptation(
                    source_name="Category:X", target_name="Kategorie:X", adapted=True
                )
            },
            segments=1,
        )
    )

    result = runner.invoke(
        app, ["page", "Oxygen", "-s", "en", "-t", "de", "-r", "123", "--content"]
    )

    assert result.exit_code == 0
    assert "123" in result.stdout
    assert "Kategorie:X" in result.stdout
    assert 'data-segmentid="0"' in result.stdout
    loader.get_page.assert_awaited_once_with("Oxygen", "123", False)
    loader.close.assert_awaited_once()


def test_page_command_failure(mocker: MockerFixture) -> None:
    loader = _mock_loader(mocker)
    loader.get_page = AsyncMock(side_effect=ApiRequestError("boom", status=404))

    result = runner.invoke(app, ["page", "Missing", "-s", "en"])

    assert result.exit_code == 1
    assert "页面加载失败" in result.stdout
    loader.close.assert_awaited_once()


def test_title_command(mocker: MockerFixture) -> None:
    loader = _mock_loader(mocker)
    loader.fetch_target_title = AsyncMock(
        return_value=TitleAdaptation(
            source_language="en",
            target_language="de",
            source_title="Oxygen",
            target_title="Sauerstoff",
        )
    )
    result = runner.invoke(app, ["title", "Oxygen", "-s", "en", "-t", "de"])
    assert result.exit_code == 0
    assert "Sauerstoff" in result.stdout


def test_title_command_without_item(mocker: MockerFixture) -> None:
    loader = _mock_loader(mocker)
    loader.fetch_target_title = AsyncMock(return_value=None)
    result = runner.invoke(app, ["title", "Oxygen", "-s", "en", "-t", "de"])
    assert result.exit_code == 0
    assert "没有对应的知识库条目" in result.stdout


def test_invalid_config_fails_at_startup() -> None:
    result = runner.invoke(app, ["providers"], env={"CX_LOGGING__FORMAT": "xml"})
    assert result.exit_code == 1
    assert "配置无效" in result.stdout


def test_unknown_log_level_fails_at_startup() -> None:
    result = runner.invoke(app, ["providers"], env={"CX_LOGGING__LEVEL": "LOUD"})
    assert result.exit_code == 1
    assert "无法初始化日志" in result.stdout
