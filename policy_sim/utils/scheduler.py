# -*- coding: utf-8 -*-
# 路径：policy_sim/utils/scheduler.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class ScheduledTask:
    """
    一个可取消的延迟任务句柄。
    核心不自带时钟：由驱动方在 tick(now) 时调用 fire_if_due(now)。
    """
    name: str
    due_at: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        """返回是否真的取消了一个尚未执行的任务。"""
        if not self.pending:
            return False
        self.cancelled = True
        return True

    def fire_if_due(self, now: float) -> bool:
        if not self.pending or now < self.due_at:
            return False
        self.fired = True
        self.callback()
        return True


class TaskSlot:
    """最多持有一个未完成任务；schedule 会先取消旧任务。"""

    def __init__(self) -> None:
        self._task: Optional[ScheduledTask] = None

    @property
    def task(self) -> Optional[ScheduledTask]:
        return self._task if self._task is not None and self._task.pending else None

    @property
    def pending(self) -> bool:
        return self.task is not None

    def schedule(self, name: str, due_at: float, callback: Callable[[], None]) -> ScheduledTask:
        self.cancel()
        self._task = ScheduledTask(name=name, due_at=due_at, callback=callback)
        return self._task

    def cancel(self) -> bool:
        task, self._task = self._task, None
        return task.cancel() if task is not None else False

    def fire_if_due(self, now: float) -> bool:
        task = self.task
        if task is None or now < task.due_at:
            return False
        self._task = None
        return task.fire_if_due(now)
