# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Sequence, Tuple, Union

from .transition import Coord

StartSpec = Union[Coord, Sequence[Coord]]


@dataclass(frozen=True)
class GridSize:
    x: int
    y: int

    @property
    def n_cells(self) -> int:
        return self.x * self.y


@dataclass(frozen=True)
class Environment:
    """
    一个静态的环境定义（网格世界 / 迷宫 / 多智能体竞技场）。

    约定：
      - 坐标为 (x, y)，x ∈ [0, size.x)，y ∈ [0, size.y)。
      - obstacles 与 goals 不相交。
      - starts 至少一个；starts[0] 为主智能体（由策略驱动）。
    """
    id: str
    name: str
    size: GridSize
    obstacles: FrozenSet[Coord]
    goals: FrozenSet[Coord]
    starts: Tuple[Coord, ...]

    def __post_init__(self) -> None:
        if self.size.x <= 0 or self.size.y <= 0:
            raise ValueError(f"[{self.id}] 网格尺寸必须为正：{self.size}")
        if not self.starts:
            raise ValueError(f"[{self.id}] 至少需要一个起点。")
        overlap = self.obstacles & self.goals
        if overlap:
            raise ValueError(f"[{self.id}] obstacles 与 goals 重叠：{sorted(overlap)}")
        for cell in (*self.obstacles, *self.goals, *self.starts):
            if not self.in_bounds(cell):
                raise ValueError(f"[{self.id}] 坐标越界：{cell}，size={self.size}")

    @classmethod
    def build(
        cls,
        env_id: str,
        name: str,
        size: Tuple[int, int],
        *,
        obstacles: Iterable[Coord] = (),
        goals: Iterable[Coord] = (),
        start: StartSpec = (0, 0),
    ) -> "Environment":
        """start 既可以是单个 (x, y)，也可以是多个起点的有序列表。"""
        if len(start) > 0 and isinstance(start[0], (tuple, list)):
            starts = tuple((int(x), int(y)) for x, y in start)
        else:
            starts = ((int(start[0]), int(start[1])),)
        return cls(
            id=env_id,
            name=name,
            size=GridSize(int(size[0]), int(size[1])),
            obstacles=frozenset((int(x), int(y)) for x, y in obstacles),
            goals=frozenset((int(x), int(y)) for x, y in goals),
            starts=starts,
        )

    @property
    def start(self) -> Coord:
        return self.starts[0]

    def in_bounds(self, cell: Coord) -> bool:
        x, y = cell
        return 0 <= x < self.size.x and 0 <= y < self.size.y

    def state_index(self, cell: Coord) -> int:
        x, y = cell
        return y * self.size.x + x

    def cells(self) -> Iterable[Coord]:
        for y in range(self.size.y):
            for x in range(self.size.x):
                yield x, y
