# cx_hub/mt/youdao.py
"""有道智云文本翻译提供方（v3 签名）。"""

import hashlib
import time
import uuid
from types import MappingProxyType

from cx_hub.mt.base import MTClient
from cx_hub.utils import get_prop


def truncate_input(query: str) -> str:
    """签名所用的 input：超过 20 个字符时取前 10 个 + 长度 + 后 10 个。"""
    if len(query) <= 20:
        return query
    return f"{query[:10]}{len(query)}{query[-10:]}"


def sign_request(app_key: str, query: str, salt: str, curtime: str, secret: str) -> str:
    payload = f"{app_key}{truncate_input(query)}{salt}{curtime}{secret}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class YoudaoClient(MTClient):
    NAME = "youdao"
    DEFAULT_ENDPOINT = "https://openapi.youdao.com/api"
    CONTENT_LIMIT = 5000
    LANGUAGE_CODE_MAP = MappingProxyType(
        {
            "zh": "zh-CHS",
            "zh-hans": "zh-CHS",
            "zh-hant": "zh-CHT",
            "yue": "zh-CHT",
        }
    )
    ERROR_CODES = MappingProxyType(
        {
            "101": "Lack of required parameters",
            "102": "Does not support the language",
            "103": "The translated text is too long",
            "104": "The type of API does not support",
            "105": "Do not support the type of signature",
            "106": "The types of response does not support",
            "107": "Does not support transmission encryption type",
            "108": "AppKey is invalid",
            "109": "Batchlog format is not correct",
            "110": "Without a valid instance of related services",
            "111": "The developer account is invalid",
            "201": "Decryption failure, probably for DES, BASE64, URLDecode error",
            "202": "Signature verification failed",
            "203": "Access IP address is not in the accessible IP list",
            "301": "Dictionary query failure",
            "302": "Translate the query fails",
            "303": "Server-side other anomalies",
            "401": "Account has been overdue bills",
        }
    )
    REQUIRED_CREDENTIALS = ("app_key", "app_secret")
    REQUIRES_AUTHORIZATION = True

    async def _execute_text(self, source_lang: str, target_lang: str, text: str) -> str:
        app_key = self.credential("app_key")
        secret = self.credential("app_secret")
        assert app_key is not None and secret is not None
        salt = str(uuid.uuid4())
        curtime = str(int(time.time()))

        status, body = await self._post_form(
            {
                "q": text,
                "from": source_lang,
                "to": target_lang,
                "appKey": app_key,
                "salt": salt,
                "sign": sign_request(app_key, text, salt, curtime, secret),
                "signType": "v3",
                "curtime": curtime,
            }
        )
        error_code = str(get_prop(["errorCode"], body) or status)
        if status != 200 or error_code != "0":
            self._raise_backend_error(error_code)

        translations = get_prop(["translation"], body)
        if not isinstance(translations, list) or not translations:
            self._raise_backend_error(status, detail="response has no translation")
        return "\n".join(str(t) for t in translations)
