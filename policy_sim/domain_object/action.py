from enum import Enum
from typing import List, Tuple


class Action(Enum):
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @staticmethod
    def all() -> List["Action"]:
        return [Action.UP, Action.DOWN, Action.LEFT, Action.RIGHT]

    @property
    def delta(self) -> Tuple[int, int]:
        """(dx, dy)：x 为列方向，y 为行方向（向下为正）。"""
        return _DELTAS[self]


_DELTAS = {
    Action.UP: (0, -1),
    Action.DOWN: (0, +1),
    Action.LEFT: (-1, 0),
    Action.RIGHT: (+1, 0),
}

ACTION_COUNT = len(_DELTAS)
