# cx_hub/mt/yandex.py
"""Yandex.Translate (v1.5) 提供方。"""

from types import MappingProxyType

from cx_hub.mt.base import MTClient
from cx_hub.utils import get_prop


class YandexClient(MTClient):
    NAME = "yandex"
    DEFAULT_ENDPOINT = "https://translate.yandex.net/api/v1.5/tr.json/translate"
    CONTENT_LIMIT = 10000
    LANGUAGE_CODE_MAP = MappingProxyType(
        {
            "be-tarask": "be",
            "nb": "no",
            "simple": "en",
        }
    )
    ERROR_CODES = MappingProxyType(
        {
            "401": "Invalid API key",
            "402": "Blocked API key",
            "404": "Exceeded the daily limit on the amount of translated text",
            "413": "Exceeded the maximum text size",
            "422": "The text cannot be translated",
            "501": "The specified translation direction is not supported",
        }
    )
    REQUIRED_CREDENTIALS = ("key",)
    REQUIRES_AUTHORIZATION = True
    SUPPORTS_HTML = True

    async def _call(
        self, source_lang: str, target_lang: str, content: str, fmt: str
    ) -> str:
        status, body = await self._post_form(
            {
                "key": self.credential("key"),
                "lang": f"{source_lang}-{target_lang}",
                "format": fmt,
                "text": content,
            }
        )
        code = get_prop(["code"], body) or status
        if status != 200 or str(code) != "200":
            self._raise_backend_error(code, detail=get_prop(["message"], body))

        texts = get_prop(["text"], body)
        if not isinstance(texts, list) or not texts:
            self._raise_backend_error(status, detail="response has no text")
        return "".join(str(t) for t in texts)

    async def _execute_text(self, source_lang: str, target_lang: str, text: str) -> str:
        return await self._call(source_lang, target_lang, text, "plain")

    async def _execute_html(self, source_lang: str, target_lang: str, html: str) -> str:
        return await self._call(source_lang, target_lang, html, "html")
