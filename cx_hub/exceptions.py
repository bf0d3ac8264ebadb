# cx_hub/exceptions.py
"""
本模块定义了 cx-hub 项目中所有自定义的、语义化的异常类型。

翻译提供方（provider）的传输层异常（httpx 等）绝不会直接泄漏给调用者，
而是统一包装为这里定义的类型，方便上层根据错误类型决定是否换用其他提供方。
"""

from __future__ import annotations

from collections.abc import Mapping


class CxHubError(Exception):
    """
    所有 cx-hub 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """


class ConfigurationError(CxHubError):
    """表示在加载、解析或验证配置时发生的错误。"""


class ProviderNotFoundError(CxHubError, KeyError):
    """
    表示尝试访问一个未注册的机器翻译提供方。
    继承自 KeyError 是为了保持与字典查找行为的一致性。
    """


class ProviderMisconfigured(CxHubError):
    """提供方缺少必需的凭据。仅对本次调用是致命的，不影响进程。"""

    def __init__(self, provider: str, missing: list[str] | None = None) -> None:
        self.provider = provider
        self.missing = list(missing or [])
        detail = f" (missing: {', '.join(self.missing)})" if self.missing else ""
        super().__init__(f"{provider} service is misconfigured{detail}")


class ContentTooLarge(CxHubError):
    """输入内容超过了提供方的字符上限。调用者需要拆分内容或换用其他提供方。"""

    def __init__(self, length: int, limit: int, provider: str | None = None) -> None:
        self.length = length
        self.limit = limit
        self.provider = provider
        super().__init__(
            f"Source content too long: {length} ({limit} is the character limit)"
        )


class ProviderError(CxHubError):
    """
    表示翻译后端返回了失败响应。

    `code` 保留后端的原始错误码，`message` 是解析后的可读描述。
    超时与网络错误同样以本类型上报（code 分别为 "timeout" 与 "transport"）。
    """

    def __init__(
        self,
        code: str | int,
        message: str,
        provider: str | None = None,
        detail: str | None = None,
    ):
        self.code = str(code)
        self.message = message
        self.provider = provider
        self.detail = detail
        prefix = f"{provider}: " if provider else ""
        suffix = f" ({detail})" if detail and detail != message else ""
        super().__init__(f"{prefix}[{self.code}] {message}{suffix}")


class InvalidResponse(CxHubError):
    """表示内容 API 返回了无法解析的响应，例如格式错误的 ETag 头。"""


class ApiRequestError(InvalidResponse):
    """表示对维基内容 API 或知识库 API 的请求失败（网络错误或非 2xx 状态）。"""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message if status is None else f"{message} (HTTP {status})")


class AdaptationFailure(CxHubError):
    """
    表示一个或多个分类（或标题）的适配无法完成。

    `failures` 按源顺序记录每个失败元素的名称与原因。
    """

    def __init__(
        self, message: str, failures: Mapping[str, BaseException] | None = None
    ) -> None:
        self.failures = dict(failures or {})
        super().__init__(message)
