# cx_hub/mt/apertium.py
"""Apertium APY 提供方：自托管的规则型翻译服务，无需凭据。"""

from types import MappingProxyType

from cx_hub.mt.base import MTClient
from cx_hub.utils import get_prop

# APY 使用 ISO 639-3 代码
APERTIUM_LANGUAGE_CODE_MAP = MappingProxyType(
    {
        "an": "arg",
        "ast": "ast",
        "ca": "cat",
        "cy": "cym",
        "da": "dan",
        "en": "eng",
        "eo": "epo",
        "es": "spa",
        "eu": "eus",
        "fr": "fra",
        "gl": "glg",
        "is": "isl",
        "it": "ita",
        "kk": "kaz",
        "mk": "mkd",
        "nb": "nob",
        "nn": "nno",
        "oc": "oci",
        "pt": "por",
        "ro": "ron",
        "sv": "swe",
        "tt": "tat",
    }
)


class ApertiumClient(MTClient):
    NAME = "apertium"
    DEFAULT_ENDPOINT = "https://apertium.wmcloud.org/translate"
    CONTENT_LIMIT = 10000
    LANGUAGE_CODE_MAP = APERTIUM_LANGUAGE_CODE_MAP
    ERROR_CODES = MappingProxyType(
        {
            "400": "Bad request, the language pair may not be installed",
            "408": "Translation timed out on the Apertium server",
            "500": "Apertium internal server error",
            "503": "Apertium server is overloaded",
        }
    )

    async def _execute_text(self, source_lang: str, target_lang: str, text: str) -> str:
        status, body = await self._post_form(
            {
                "markUnknown": "no",
                "langpair": f"{source_lang}|{target_lang}",
                "format": "txt",
                "q": text,
            }
        )
        response_status = get_prop(["responseStatus"], body)
        if status != 200 or (response_status is not None and response_status != 200):
            code = get_prop(["code"], body) or response_status or status
            self._raise_backend_error(
                code,
                detail=get_prop(["explanation"], body) or get_prop(["message"], body),
            )

        translated = get_prop(["responseData", "translatedText"], body)
        if translated is None:
            self._raise_backend_error(status, detail="response has no translatedText")
        return str(translated)
