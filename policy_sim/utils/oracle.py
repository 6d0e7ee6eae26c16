# -*- coding: utf-8 -*-
# 路径：policy_sim/utils/oracle.py
from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional

from policy_sim.domain_object import Action, Coord, Environment, Policy, Q_TABLE
from policy_sim.grid_world import GridWorld


def goal_distances(env: Environment) -> Dict[Coord, int]:
    """从所有 goal 反向 BFS，得到每个可达格到最近 goal 的步数。"""
    world = GridWorld(env)
    # 确定性转移，建反向邻接
    parents: Dict[Coord, List[Coord]] = {}
    for cell in env.cells():
        if cell in env.obstacles or cell in env.goals:
            continue
        for _, nxt in world.neighbours(cell):
            parents.setdefault(nxt, []).append(cell)

    dist: Dict[Coord, int] = {g: 0 for g in env.goals}
    queue = deque(env.goals)
    while queue:
        cur = queue.popleft()
        for prev in parents.get(cur, []):
            if prev not in dist:
                dist[prev] = dist[cur] + 1
                queue.append(prev)
    return dist


def shortest_path_policy(env: Environment, gamma: float = 0.9) -> Policy:
    """
    Q(s,a) = r(s,a,s') + γ * V(s')，V(s) = -d(s)（goal 处吸收，V=0）。
    不可达格与障碍/目标格记为缺失。
    """
    world = GridWorld(env)
    dist = goal_distances(env)
    values: List[Optional[tuple]] = []
    for cell in env.cells():
        if cell in env.obstacles or cell in env.goals or cell not in dist:
            values.append(None)
            continue
        q_s = []
        for a in Action.all():
            res = world.step(cell, a)
            v_next = 0.0 if res.goal_reached else -float(dist.get(res.next_pos, env.size.n_cells))
            q_s.append(res.reward + gamma * v_next)
        values.append(tuple(q_s))
    return Policy(type=Q_TABLE, values=tuple(values))
