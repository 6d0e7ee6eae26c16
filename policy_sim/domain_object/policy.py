# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

QVector = Tuple[float, ...]

# 仅此类型按 argmax 使用；其他标签视为“无可用策略”
Q_TABLE = "q_table"


@dataclass(frozen=True)
class Policy:
    """
    外部提供的表格型策略（动作价值表）。
    values[state_index] 为该状态下各动作的价值向量；缺失项记为 None。
    不可变，加载/清除时整体替换。
    """
    type: str
    values: Tuple[Optional[QVector], ...]

    @property
    def is_tabular(self) -> bool:
        return self.type == Q_TABLE

    def q_values(self, state_index: int) -> Optional[QVector]:
        if state_index < 0 or state_index >= len(self.values):
            return None
        return self.values[state_index]
