# cx_hub/wiki/__init__.py
"""维基站点访问：内容 API、知识库查询与页面加载。"""

from cx_hub.wiki.api import ApiRequestManager, MWApiClient, get_domain
from cx_hub.wiki.etag import ETagInfo, parse_etag
from cx_hub.wiki.page_loader import PageLoader, PageResult

__all__ = [
    "ApiRequestManager",
    "ETagInfo",
    "MWApiClient",
    "PageLoader",
    "PageResult",
    "get_domain",
    "parse_etag",
]
