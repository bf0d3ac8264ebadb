# cx_hub/mt/base.py
"""
本模块定义了所有机器翻译提供方（provider）必须继承的抽象基类 `MTClient`。

每个提供方以类属性声明自己的能力与静态数据：
- `SUPPORTS_HTML`：是否能原生翻译带标记的 HTML；为 False 时走默认的“精简 HTML”策略。
- `REQUIRES_AUTHORIZATION`：是否需要逐请求签名/凭据。
- `REQUIRED_CREDENTIALS`：调用前必须存在的凭据字段。
- `LANGUAGE_CODE_MAP`：内部 BCP 47 代码到提供方代码的映射，未收录的代码原样透传。
- `ERROR_CODES`：后端错误码到可读描述的有限映射。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, NoReturn

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from cx_hub.exceptions import (
    ContentTooLarge,
    ProviderError,
    ProviderMisconfigured,
)
from cx_hub.metrics import MetricsRegistry, charcount_metric
from cx_hub.metrics import metrics as default_metrics
from cx_hub.mt.reduced_html import translate_reduced_html

logger = structlog.get_logger(__name__)


class ContentType(str, Enum):
    HTML = "html"
    TEXT = "text"


class ProviderConfig(BaseModel):
    """单个提供方的静态配置，加载后不可变，可在并发请求间安全共享。"""

    model_config = ConfigDict(frozen=True)

    api_endpoint: str | None = None
    credentials: Mapping[str, SecretStr] = Field(default_factory=dict)
    content_limit: int = Field(gt=0)
    language_code_map: Mapping[str, str] = Field(default_factory=dict)
    options: Mapping[str, Any] = Field(default_factory=dict)
    timeout: float = Field(default=30.0, gt=0)
    proxy: str | None = None

    @field_validator("language_code_map", "options", "credentials", mode="after")
    @classmethod
    def _freeze_mapping(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))


class TranslationRequest(BaseModel):
    source_lang: str
    target_lang: str
    content: str
    content_type: ContentType = ContentType.HTML


class TranslationResult(BaseModel):
    translated_content: str
    provider: str


class MTClient(ABC):
    """机器翻译提供方的统一异步契约。实例除配置外无状态，可跨请求复用。"""

    NAME: str
    DEFAULT_ENDPOINT: str | None = None
    CONTENT_LIMIT: int = 10000
    LANGUAGE_CODE_MAP: Mapping[str, str] = MappingProxyType({})
    ERROR_CODES: Mapping[str, str] = MappingProxyType({})
    REQUIRED_CREDENTIALS: tuple[str, ...] = ()
    REQUIRES_AUTHORIZATION: bool = False
    SUPPORTS_HTML: bool = False

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        metrics: MetricsRegistry | None = None,
    ):
        self.config = config or self.default_config()
        self.metrics = metrics or default_metrics
        self._client = http_client
        self._owns_client = http_client is None

    @classmethod
    def default_config(cls, **overrides: Any) -> ProviderConfig:
        """用类上声明的默认值构建配置，`overrides` 中的字段优先。"""
        language_code_map = {
            **cls.LANGUAGE_CODE_MAP,
            **(overrides.pop("language_code_map", None) or {}),
        }
        values: dict[str, Any] = {
            "api_endpoint": cls.DEFAULT_ENDPOINT,
            "content_limit": cls.CONTENT_LIMIT,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["language_code_map"] = language_code_map
        return ProviderConfig(**values)

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def content_limit(self) -> int:
        return self.config.content_limit

    def requires_authorization(self) -> bool:
        return self.REQUIRES_AUTHORIZATION

    def map_language(self, code: str) -> str:
        return self.config.language_code_map.get(code, code)

    def error_description(self, code: str | int) -> str:
        key = str(code)
        if key in self.ERROR_CODES:
            return self.ERROR_CODES[key]
        return f"Unknown error: {key}"

    def credential(self, key: str) -> str | None:
        secret = self.config.credentials.get(key)
        if secret is None:
            return None
        value = secret.get_secret_value()
        return value or None

    # ------------------------------------------------------------------
    # 前置校验
    # ------------------------------------------------------------------

    def _check_credentials(self) -> None:
        missing = [k for k in self.REQUIRED_CREDENTIALS if not self.credential(k)]
        if missing:
            raise ProviderMisconfigured(self.name, missing)

    def _check_length(self, content: str) -> None:
        if len(content) > self.content_limit:
            raise ContentTooLarge(len(content), self.content_limit, provider=self.name)

    # ------------------------------------------------------------------
    # 公共入口
    # ------------------------------------------------------------------

    async def translate(
        self,
        source_lang: str,
        target_lang: str,
        content: str,
        content_type: ContentType | str = ContentType.HTML,
    ) -> str:
        if ContentType(content_type) is ContentType.TEXT:
            return await self.translate_text(source_lang, target_lang, content)
        return await self.translate_html(source_lang, target_lang, content)

    async def translate_request(self, request: TranslationRequest) -> TranslationResult:
        translated = await self.translate(
            request.source_lang,
            request.target_lang,
            request.content,
            request.content_type,
        )
        return TranslationResult(translated_content=translated, provider=self.name)

    async def translate_html(self, source_lang: str, target_lang: str, html: str) -> str:
        """
        翻译 HTML。

        声明了 `SUPPORTS_HTML` 的提供方直接把标记交给后端；其余提供方使用
        `reduced_html` 策略：把标签替换为占位符，经 `translate_text` 翻译后再还原。
        """
        self._check_credentials()
        self._check_length(html)

        if not self.SUPPORTS_HTML:
            return await translate_reduced_html(self, source_lang, target_lang, html)

        translated = await self._execute_html(
            self.map_language(source_lang), self.map_language(target_lang), html
        )
        self._record_usage(len(html))
        return translated

    async def translate_text(self, source_lang: str, target_lang: str, text: str) -> str:
        self._check_credentials()
        self._check_length(text)
        translated = await self._execute_text(
            self.map_language(source_lang), self.map_language(target_lang), text
        )
        self._record_usage(len(text))
        return translated

    # ------------------------------------------------------------------
    # 子类实现
    # ------------------------------------------------------------------

    @abstractmethod
    async def _execute_text(self, source_lang: str, target_lang: str, text: str) -> str:
        """[子类实现] 发送纯文本翻译请求。语言代码已完成映射。"""
        ...

    async def _execute_html(self, source_lang: str, target_lang: str, html: str) -> str:
        """[子类实现] 原生 HTML 翻译，仅在 `SUPPORTS_HTML = True` 时调用。"""
        raise NotImplementedError(f"{self.name} 未实现原生 HTML 翻译。")

    # ------------------------------------------------------------------
    # 传输辅助
    # ------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                proxy=self.config.proxy,
            )
        return self._client

    @property
    def endpoint(self) -> str:
        if not self.config.api_endpoint:
            raise ProviderMisconfigured(self.name, ["api_endpoint"])
        return self.config.api_endpoint

    async def _post_form(
        self,
        data: Mapping[str, Any],
        *,
        url: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[int, Any]:
        """以表单方式 POST，返回 (状态码, 解析后的 JSON)。传输层错误统一转换为 ProviderError。"""
        target = url or self.endpoint
        try:
            response = await self._get_client().post(
                target, data=dict(data), headers=dict(headers or {})
            )
        except httpx.TimeoutException as e:
            raise ProviderError(
                "timeout", "Request timed out", provider=self.name, detail=str(e)
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                "transport",
                "Backend unreachable",
                provider=self.name,
                detail=f"{e.__class__.__name__}: {e}",
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                response.status_code,
                self.error_description(response.status_code),
                provider=self.name,
                detail="response body is not valid JSON",
            ) from e
        return response.status_code, body

    def _raise_backend_error(
        self, code: str | int, detail: str | None = None
    ) -> NoReturn:
        error = ProviderError(
            code, self.error_description(code), provider=self.name, detail=detail
        )
        logger.warning(
            "翻译提供方返回错误。",
            provider=self.name,
            code=error.code,
            description=error.message,
            detail=detail,
        )
        raise error

    def _record_usage(self, length: int) -> None:
        try:
            self.metrics.increment(charcount_metric(self.name), length)
        except Exception:
            logger.warning("记录字符数指标失败，已忽略。", provider=self.name, exc_info=True)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MTClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
