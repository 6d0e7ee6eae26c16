# -*- coding: utf-8 -*-
# 路径：policy_sim/env_catalog.py
from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Tuple

from .domain_object import Environment
from .errors import UnknownEnvironment

DEFAULT_ENVIRONMENT = "gridworld"

# 进程级只读目录；坐标为 (x, y)
_ENVIRONMENTS = {
    env.id: env
    for env in (
        Environment.build(
            "gridworld",
            "Grid World",
            (4, 4),
            obstacles=[(1, 1), (2, 2)],
            goals=[(3, 3)],
            start=(0, 0),
        ),
        Environment.build(
            "maze",
            "Maze Environment",
            (6, 6),
            obstacles=[(1, 0), (1, 1), (1, 2), (3, 3), (3, 4), (4, 4)],
            goals=[(5, 5)],
            start=(0, 0),
        ),
        Environment.build(
            "multiagent",
            "Multi-Agent Arena",
            (8, 8),
            obstacles=[(2, 2), (3, 3), (4, 4), (5, 5)],
            goals=[(0, 7), (7, 0)],
            start=[(0, 0), (7, 7)],
        ),
    )
}

ENVIRONMENTS: Mapping[str, Environment] = MappingProxyType(_ENVIRONMENTS)


def get_environment(env_id: str) -> Environment:
    try:
        return ENVIRONMENTS[env_id]
    except KeyError:
        raise UnknownEnvironment(env_id, ENVIRONMENTS.keys()) from None


def list_environments() -> List[Tuple[str, str]]:
    """按目录顺序返回 (id, name)。"""
    return [(env.id, env.name) for env in ENVIRONMENTS.values()]
