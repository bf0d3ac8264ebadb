# cx_hub/cli/state.py
"""定义 CLI 应用的共享状态对象。"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cx_hub.config import CxHubConfig


class State:
    """通过 Typer 上下文在命令之间传递配置。"""

    def __init__(self, config: "CxHubConfig") -> None:
        self.config = config
