# -*- coding: utf-8 -*-
"""测试共用的策略数据与脚本化随机源。"""

# gridworld: (0,0) -> 右 x3 -> 下 x3 -> (3,3)，共 6 步，绕开 (1,1) 与 (2,2)
RIGHT, DOWN = [0.0, 0.0, 0.0, 1.0], [0.0, 1.0, 0.0, 0.0]
ROUTE_VALUES = [None] * 16
for _idx, _q in {0: RIGHT, 1: RIGHT, 2: RIGHT, 3: DOWN, 7: DOWN, 11: DOWN}.items():
    ROUTE_VALUES[_idx] = _q
ROUTE_POLICY = {"type": "q_table", "values": ROUTE_VALUES}
ROUTE_LENGTH = 6

# 每格都选 UP：从 (0,0) 起永远撞上边界，原地不动
ALWAYS_UP_POLICY = {"type": "q_table", "values": [[1.0, 0.0, 0.0, 0.0]] * 16}


class ScriptedRng:
    """按固定顺序循环给出“随机”动作，替代 np.random.Generator.integers。"""

    def __init__(self, actions):
        self.actions = list(actions)
        self.calls = 0

    def integers(self, high):
        a = self.actions[self.calls % len(self.actions)]
        self.calls += 1
        assert 0 <= a < high
        return a
