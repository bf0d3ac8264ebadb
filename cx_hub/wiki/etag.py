# cx_hub/wiki/etag.py
"""解析内容 API 返回的 ETag 头，从中取得页面修订号。"""

import re

from pydantic import BaseModel

from cx_hub.exceptions import InvalidResponse

# 例：W/"123456/c4e494da-ee8f-11e4-83a1-8b80de1cde5f"
ETAG_PATTERN = re.compile(r'^(W/)?"?([^"/\s]+)(?:/([^"/\s]+))?"?$')


class ETagInfo(BaseModel):
    weak: bool
    revision: str
    transaction_id: str | None = None


def parse_etag(etag: str | None) -> ETagInfo:
    if not etag:
        raise InvalidResponse("内容 API 响应缺少 ETag 头。")
    match = ETAG_PATTERN.match(etag.strip())
    if match is None:
        raise InvalidResponse(f"无法解析的 ETag: {etag!r}")
    return ETagInfo(
        weak=match.group(1) is not None,
        revision=match.group(2),
        transaction_id=match.group(3),
    )
