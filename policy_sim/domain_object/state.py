# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .transition import Coord, Reward


@dataclass
class AgentState:
    id: int
    position: Coord
    trajectory: List[Coord] = field(default_factory=list)


@dataclass
class RunMetrics:
    episode: int = 1
    step: int = 0
    total_reward: float = 0.0


@dataclass
class RunHistory:
    # 整个 run 内的逐步奖励（不随 episode 重置）
    reward_history: List[Reward] = field(default_factory=list)
    # 仅成功（到达目标）的 episode 追加一项
    steps_per_episode: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class Snapshot:
    """每个 tick 暴露给展示层（渲染/图表）的只读状态。"""
    episode: int
    step: int
    total_reward: float
    is_running: bool
    environment_id: str
    policy_loaded: bool
    agent_positions: Tuple[Coord, ...]
    trajectory: Tuple[Coord, ...]
    per_cell_best_action: Dict[Coord, int]
    interval_ms: float
    restart_pending: bool
    show_best_actions: bool = True
    show_trajectory: bool = True


@dataclass(frozen=True)
class StepOutcome:
    """一次 simulation_step 的结果；terminated 为 None 表示 episode 仍在进行。"""
    action: int
    position: Coord
    reward: Reward
    is_obstacle: bool
    goal_reached: bool
    step: int
    terminated: Optional[str] = None
