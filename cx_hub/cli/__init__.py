# cx_hub/cli/__init__.py
"""cx-hub CLI 模块入口。"""

from cx_hub.cli.main import app

__all__ = ["app"]
