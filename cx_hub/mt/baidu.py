# cx_hub/mt/baidu.py
"""百度翻译开放平台提供方。"""

import hashlib
import secrets
from types import MappingProxyType

from cx_hub.mt.base import MTClient
from cx_hub.utils import get_prop

BAIDU_LANGUAGE_CODE_MAP = MappingProxyType(
    {
        "ja": "jp",
        "yue": "zh-TW",
        "ko": "kor",
        "fr": "fra",
        "es": "spa",
        "ar": "ara",
        "vi": "vie",
    }
)


def sign_request(appid: str, query: str, salt: str, key: str) -> str:
    """百度要求的签名：MD5(appid + q + salt + 密钥)，小写十六进制。"""
    return hashlib.md5(f"{appid}{query}{salt}{key}".encode("utf-8")).hexdigest()


class BaiduClient(MTClient):
    """
    百度翻译不能在保留标注映射的前提下翻译 HTML，
    因此使用基类的精简 HTML 策略，只实现纯文本翻译。
    """

    NAME = "baidu"
    DEFAULT_ENDPOINT = "https://fanyi-api.baidu.com/api/trans/vip/translate"
    CONTENT_LIMIT = 5000
    LANGUAGE_CODE_MAP = BAIDU_LANGUAGE_CODE_MAP
    ERROR_CODES = MappingProxyType(
        {
            "52001": "Request timed out",
            "52002": "System error",
            "52003": "Unauthorized user",
            "54000": "Required parameter is empty",
            "54001": "Signature error",
            "54003": "Access frequency limited",
            "54004": "Insufficient account balance",
            "54005": "Long query requests are too frequent",
            "58000": "Client IP address is not allowed",
            "58001": "Translation direction is not supported",
            "58002": "Service is currently closed",
            "90107": "Authentication failed",
        }
    )
    REQUIRED_CREDENTIALS = ("appid", "key")
    REQUIRES_AUTHORIZATION = True

    @staticmethod
    def make_salt() -> str:
        return str(secrets.randbelow(10**10))

    async def _execute_text(self, source_lang: str, target_lang: str, text: str) -> str:
        appid = self.credential("appid")
        key = self.credential("key")
        assert appid is not None and key is not None
        salt = self.make_salt()

        status, body = await self._post_form(
            {
                "q": text,
                "from": source_lang,
                "to": target_lang,
                "appid": appid,
                "salt": salt,
                "sign": sign_request(appid, text, salt, key),
            }
        )
        error_code = get_prop(["error_code"], body)
        if status != 200 or (error_code and str(error_code) != "52000"):
            self._raise_backend_error(
                error_code or status, detail=get_prop(["error_msg"], body)
            )

        results = get_prop(["trans_result"], body)
        if not isinstance(results, list) or not results:
            self._raise_backend_error(status, detail="response has no trans_result")
        # 多行输入会按行返回多个结果
        return "\n".join(str(item.get("dst", "")) for item in results)
