# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Dict, List, Tuple, Union

from .domain_object import Action, Coord, Environment, Reward, StepResult

REWARD_STEP: Reward = -0.01      # 生存成本
REWARD_OBSTACLE: Reward = -1.0
REWARD_GOAL: Reward = 10.0


class GridWorld:
    """
    环境的确定性转移函数（纯函数，无内部状态）。

    约定：
      - 命中边界：逐轴截断到 [0, size-1]，不环绕、不终止。
      - 撞障碍：原地不动，reward=-1，且不判定 goal（碰撞优先）。
      - 其他：移动到候选格；候选格为 goal 时 reward=+10，否则 -0.01。
    """

    def __init__(self, env: Environment):
        self.env = env
        self.w, self.h = env.size.x, env.size.y

    # -----------------------------
    # 公共接口
    # -----------------------------
    def step(self, pos: Coord, action: Union[Action, int]) -> StepResult:
        candidate = self._move(pos, Action(action))

        if candidate in self.env.obstacles:
            # 碰撞短路：不移动，也不判定 goal
            return StepResult(next_pos=pos, is_obstacle=True, goal_reached=False, reward=REWARD_OBSTACLE)

        goal_reached = candidate in self.env.goals
        reward = REWARD_GOAL if goal_reached else REWARD_STEP
        return StepResult(next_pos=candidate, is_obstacle=False, goal_reached=goal_reached, reward=reward)

    def outcomes(self, pos: Coord) -> Dict[Action, StepResult]:
        """某格上全部动作的结果，便于展示/调试。"""
        return {a: self.step(pos, a) for a in Action.all()}

    def neighbours(self, pos: Coord) -> List[Tuple[Action, Coord]]:
        """不撞障碍且确实发生移动的邻格。"""
        result = []
        for a, res in self.outcomes(pos).items():
            if not res.is_obstacle and res.next_pos != pos:
                result.append((a, res.next_pos))
        return result

    # -----------------------------
    # 内部
    # -----------------------------
    def _move(self, pos: Coord, a: Action) -> Coord:
        x, y = pos
        dx, dy = a.delta
        nx = max(0, min(self.w - 1, x + dx))
        ny = max(0, min(self.h - 1, y + dy))
        return nx, ny


def step(env: Environment, pos: Coord, action: Union[Action, int]) -> StepResult:
    return GridWorld(env).step(pos, action)
