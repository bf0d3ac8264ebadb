# cx_hub/mt/__init__.py
"""机器翻译提供方抽象层：统一契约、默认 HTML 策略与各提供方适配器。"""

from cx_hub.mt.base import (
    ContentType,
    MTClient,
    ProviderConfig,
    TranslationRequest,
    TranslationResult,
)
from cx_hub.mt.registry import (
    PROVIDER_REGISTRY,
    create_mt_client,
    discover_providers,
    get_provider_class,
)

__all__ = [
    "ContentType",
    "MTClient",
    "ProviderConfig",
    "TranslationRequest",
    "TranslationResult",
    "PROVIDER_REGISTRY",
    "create_mt_client",
    "discover_providers",
    "get_provider_class",
]
