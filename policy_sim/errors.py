# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Iterable


class PolicySimError(Exception):
    """模拟核心的错误基类。"""


class UnknownEnvironment(PolicySimError, KeyError):
    """请求的环境 id 不在目录中（调用方 bug）。"""

    def __init__(self, env_id: str, known: Iterable[str] = ()):
        self.env_id = env_id
        self.known = tuple(known)
        super().__init__(f"未知环境 {env_id!r}，可选：{', '.join(self.known)}")

    def __str__(self) -> str:
        # KeyError 默认会给消息加引号
        return str(self.args[0])


class InvalidPolicyPayload(PolicySimError, ValueError):
    """策略数据无法解析或字段不合法；之前加载的策略保持不变。"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"无效的策略文件：{reason}")


class NotInitialized(PolicySimError, RuntimeError):
    """没有存活的智能体时请求单步。"""

    def __init__(self, msg: str = "模拟尚未初始化（没有智能体）。"):
        super().__init__(msg)
