"""cx-hub: 一个面向维基内容翻译的网关核心。

提供统一的机器翻译提供方抽象，以及页面加载、切分与分类适配流程。
"""

__version__ = "1.0.0"

from .config import CxHubConfig
from .exceptions import CxHubError
from .mt import ContentType, MTClient, create_mt_client
from .wiki import PageLoader, PageResult

__all__ = [
    "__version__",
    "ContentType",
    "CxHubConfig",
    "CxHubError",
    "MTClient",
    "PageLoader",
    "PageResult",
    "create_mt_client",
]
