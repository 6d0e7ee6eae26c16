from dataclasses import dataclass
from typing import Tuple

Reward = float
Coord = Tuple[int, int]  # (x, y)


@dataclass(frozen=True)
class StepResult:
    next_pos: Coord
    is_obstacle: bool
    goal_reached: bool
    reward: Reward
