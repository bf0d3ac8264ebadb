# cx_hub/mt/debug.py
"""提供一个用于开发和测试的调试提供方，不发起任何网络请求。"""

import asyncio
from types import MappingProxyType
from typing import Any

from cx_hub.mt.base import MTClient


class DebugClient(MTClient):
    """
    一个简单的调试提供方实现。

    通过 `options` 控制行为：
    - `mode`：`SUCCESS`（默认，译文为 `[目标语言] 原文`）、`UPPERCASE` 或 `FAIL`；
    - `fail_on_text`：遇到该文本时模拟后端失败；
    - `translation_map`：固定的原文→译文映射，优先于 mode；
    - `delay`：每次调用前等待的秒数，用于并发测试。
    """

    NAME = "debug"
    CONTENT_LIMIT = 10000
    ERROR_CODES = MappingProxyType({"500": "Debug provider is in FAIL mode"})

    def _option(self, key: str, default: Any = None) -> Any:
        return self.config.options.get(key, default)

    async def _execute_text(self, source_lang: str, target_lang: str, text: str) -> str:
        delay = float(self._option("delay", 0) or 0)
        if delay:
            await asyncio.sleep(delay)

        if self._option("mode", "SUCCESS") == "FAIL" or (
            self._option("fail_on_text") and text == self._option("fail_on_text")
        ):
            self._raise_backend_error(500, detail=f"{source_lang} > {target_lang}")

        translation_map = self._option("translation_map") or {}
        if text in translation_map:
            return str(translation_map[text])
        if self._option("mode") == "UPPERCASE":
            return text.upper()
        return f"[{target_lang}] {text}"
