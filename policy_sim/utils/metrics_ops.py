# -*- coding: utf-8 -*-
# 路径：policy_sim/utils/metrics_ops.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from policy_sim.domain_object import RunHistory


# ---- 基于 RunHistory 的派生视图（按需计算，无缓存） -------------------------------
def cumulative_reward(reward_history: Sequence[float]) -> np.ndarray:
    """cum[i] = Σ reward_history[0..i]"""
    return np.cumsum(np.asarray(reward_history, dtype=float))


def average_episode_length(steps_per_episode: Sequence[int]) -> float:
    """成功 episode 的平均步数；没有成功 episode 时为 0.0。"""
    if len(steps_per_episode) == 0:
        return 0.0
    return float(np.mean(steps_per_episode))


def final_score(reward_history: Sequence[float]) -> float:
    if len(reward_history) == 0:
        return 0.0
    return float(cumulative_reward(reward_history)[-1])


def moving_average(x: Sequence[float], window: int = 50) -> np.ndarray:
    if len(x) == 0:
        return np.array([])
    w = min(window, len(x))
    return np.convolve(np.asarray(x, dtype=float), np.ones(w) / w, mode="valid")


@dataclass(frozen=True)
class ReportCard:
    games_won: int
    average_steps: float
    total_score: float
    cumulative_reward: List[float]
    steps_per_game: List[int]

    @property
    def average_steps_label(self) -> str:
        return f"{self.average_steps:.1f}"

    @property
    def total_score_label(self) -> str:
        return f"{self.total_score:.2f}"


def report_card(history: RunHistory) -> ReportCard:
    cum = cumulative_reward(history.reward_history)
    return ReportCard(
        games_won=len(history.steps_per_episode),
        average_steps=average_episode_length(history.steps_per_episode),
        total_score=float(cum[-1]) if len(cum) else 0.0,
        cumulative_reward=[float(v) for v in cum],
        steps_per_game=list(history.steps_per_episode),
    )
