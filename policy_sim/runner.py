# -*- coding: utf-8 -*-
# 路径：policy_sim/runner.py
from __future__ import annotations

from typing import List, Optional

from policy_sim.domain_object import StepOutcome
from policy_sim.engine.episode_controller import EpisodeController
from policy_sim.utils.render import render_snapshot
from policy_sim.utils.timing import record_time_decorator


@record_time_decorator("headless run")
def run_headless(
    ctrl: EpisodeController,
    ticks: int,
    *,
    start_ms: float = 0.0,
    render_every: Optional[int] = None,
) -> List[StepOutcome]:
    """
    用模拟时钟驱动 controller：每个 tick 前进 interval_ms（按当前速度）。
    返回实际发生的每一步。
    """
    now = float(start_ms)
    outcomes: List[StepOutcome] = []
    for t in range(ticks):
        outcome = ctrl.tick(now)
        if outcome is not None:
            outcomes.append(outcome)
        if render_every and t % render_every == 0:
            render_snapshot(ctrl.env, ctrl.snapshot())
        now += ctrl.interval_ms
    return outcomes
