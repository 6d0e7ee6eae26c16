from __future__ import annotations

import logging
from typing import Dict, List

from ..domain_object import Action, Coord, Environment, Snapshot
from .logger_manager import LOGGER_NAME
from .metrics_ops import ReportCard

ARROWS = {Action.UP.value: "↑", Action.DOWN.value: "↓", Action.LEFT.value: "←", Action.RIGHT.value: "→"}
AGENT_LABELS = "ABCDEFGH"


def _get_logger():
    return logging.getLogger(LOGGER_NAME)


def snapshot_lines(env: Environment, snap: Snapshot) -> List[str]:
    """
    按行 (y) 输出网格：
      X 障碍，G 目标，A/B.. 智能体，* 轨迹，箭头为贪心动作，· 空格。
    优先级：智能体 > 障碍/目标 > 轨迹 > 箭头。
    """
    agents: Dict[Coord, str] = {
        pos: AGENT_LABELS[i % len(AGENT_LABELS)] for i, pos in reversed(list(enumerate(snap.agent_positions)))
    }
    trail = set(snap.trajectory) if snap.show_trajectory else set()
    best = snap.per_cell_best_action if snap.show_best_actions else {}

    lines = []
    for y in range(env.size.y):
        row = []
        for x in range(env.size.x):
            cell = (x, y)
            if cell in agents:
                row.append(agents[cell])
            elif cell in env.obstacles:
                row.append("X")
            elif cell in env.goals:
                row.append("G")
            elif cell in trail:
                row.append("*")
            elif cell in best:
                row.append(ARROWS[best[cell]])
            else:
                row.append("·")
        lines.append(" ".join(row))
    return lines


def render_snapshot(env: Environment, snap: Snapshot) -> None:
    status = "running" if snap.is_running else ("restarting" if snap.restart_pending else "paused")
    _get_logger().info(
        "\n[%s] Ep: %d  Step: %d  Reward: %.2f  (%s, policy=%s)",
        env.name, snap.episode, snap.step, snap.total_reward, status, "yes" if snap.policy_loaded else "no",
    )
    for line in snapshot_lines(env, snap):
        _get_logger().info(line)


def render_report_card(report: ReportCard) -> None:
    _get_logger().info("\n[Agent's Report Card]")
    _get_logger().info("Games Won    : %d", report.games_won)
    _get_logger().info("Average Steps: %s", report.average_steps_label)
    _get_logger().info("Total Score  : %s", report.total_score_label)
    if report.steps_per_game:
        _get_logger().info("Steps/Game   : %s", " ".join(str(s) for s in report.steps_per_game))
