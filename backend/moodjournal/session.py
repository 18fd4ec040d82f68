from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionContext:
    """当前调用者（显式传入每个核心操作，不使用进程级的“当前用户”全局变量）。"""

    user_id: str
    username: str = ""
