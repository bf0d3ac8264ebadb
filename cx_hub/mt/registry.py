# cx_hub/mt/registry.py
"""本模块负责发现 `cx_hub.mt` 包下的所有提供方，并按提供方标识创建实例。"""

import importlib
import pkgutil
from typing import Any

import httpx
import structlog

from cx_hub.config import CxHubConfig
from cx_hub.exceptions import ConfigurationError, ProviderNotFoundError
from cx_hub.metrics import MetricsRegistry
from cx_hub.mt.base import MTClient, ProviderConfig

log = structlog.get_logger(__name__)
PROVIDER_REGISTRY: dict[str, type[MTClient]] = {}

_NON_PROVIDER_MODULES = {"base", "registry", "reduced_html"}


def discover_providers() -> dict[str, type[MTClient]]:
    """
    动态发现 `cx_hub.mt` 包下的所有提供方并按 `NAME` 注册。

    幂等：只在首次调用时执行发现操作。
    """
    if PROVIDER_REGISTRY:
        return PROVIDER_REGISTRY

    import cx_hub.mt

    for module_info in pkgutil.iter_modules(cx_hub.mt.__path__):
        module_name = module_info.name
        if module_name in _NON_PROVIDER_MODULES or module_name.startswith("_"):
            continue
        module = importlib.import_module(f"cx_hub.mt.{module_name}")
        for attr in vars(module).values():
            if (
                isinstance(attr, type)
                and issubclass(attr, MTClient)
                and attr is not MTClient
                and getattr(attr, "NAME", None)
            ):
                PROVIDER_REGISTRY[attr.NAME] = attr

    log.debug("提供方发现完成。", providers=sorted(PROVIDER_REGISTRY))
    return PROVIDER_REGISTRY


def get_provider_class(name: str) -> type[MTClient]:
    registry = discover_providers()
    try:
        return registry[name]
    except KeyError:
        raise ProviderNotFoundError(
            f"未知的翻译提供方 '{name}'。可用: {sorted(registry)}"
        ) from None


def build_provider_config(
    provider_cls: type[MTClient],
    settings: dict[str, Any] | None,
    *,
    timeout: float | None = None,
    proxy: str | None = None,
) -> ProviderConfig:
    """
    把配置文件/环境变量中的原始字典转换为 `ProviderConfig`。

    识别的键：`api`、`content_limit`、`language_code_map`、`options`；
    其余非空的字符串键都视为凭据。
    """
    raw = dict(settings or {})
    overrides: dict[str, Any] = {
        "api_endpoint": raw.pop("api", None),
        "content_limit": raw.pop("content_limit", None),
        "language_code_map": raw.pop("language_code_map", None),
        "options": raw.pop("options", None),
        "timeout": raw.pop("timeout", timeout),
        "proxy": raw.pop("proxy", proxy),
    }
    overrides["credentials"] = {
        key: str(value) for key, value in raw.items() if value is not None
    }
    try:
        return provider_cls.default_config(**overrides)
    except ValueError as e:
        raise ConfigurationError(f"提供方 '{provider_cls.NAME}' 的配置无效: {e}") from e


def create_mt_client(
    name: str,
    config: CxHubConfig | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    metrics: MetricsRegistry | None = None,
) -> MTClient:
    """按提供方标识创建 MTClient；配置取自 `config.provider_configs[name]`。"""
    provider_cls = get_provider_class(name)
    settings = config.provider_configs.get(name) if config else None
    provider_config = build_provider_config(
        provider_cls,
        settings,
        timeout=config.http_timeout if config else None,
        proxy=config.proxy if config else None,
    )
    return provider_cls(provider_config, http_client=http_client, metrics=metrics)
