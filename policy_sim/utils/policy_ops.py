# -*- coding: utf-8 -*-
from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np

from policy_sim.domain_object import ACTION_COUNT, Coord, Environment, Policy, QVector
from policy_sim.errors import InvalidPolicyPayload


# ---- 解析策略文件 -------------------------------------------------------------
def parse_policy(raw: Union[str, bytes, bytearray, Mapping[str, Any]]) -> Policy:
    """
    解析 {"type": ..., "values": [...]} 形式的策略数据。
    仅校验 type 为非空字符串、values 为列表；逐状态向量不做形状/范围校验，
    无法解释为数值向量的项记为缺失（运行时回退为随机动作）。
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidPolicyPayload(f"无法解码：{e}") from e
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as e:
            raise InvalidPolicyPayload(f"JSON 解析失败：{e}") from e
    else:
        data = raw

    if not isinstance(data, Mapping):
        raise InvalidPolicyPayload("顶层必须是对象")
    tag = data.get("type")
    if not isinstance(tag, str) or not tag:
        raise InvalidPolicyPayload("缺少非空的 type 字段")
    values = data.get("values")
    if not isinstance(values, (list, tuple, np.ndarray)):
        raise InvalidPolicyPayload("values 必须是列表")

    return Policy(type=tag, values=tuple(_as_q_vector(v) for v in values))


def _as_q_vector(entry: Any) -> Optional[QVector]:
    if not isinstance(entry, (list, tuple, np.ndarray)) or len(entry) == 0:
        return None
    try:
        q = np.asarray(entry, dtype=float)
    except (TypeError, ValueError, OverflowError):
        return None
    if q.ndim != 1 or np.isnan(q).any():
        return None
    return tuple(float(v) for v in q)


# ---- 动作选择 -----------------------------------------------------------------
def greedy_action(q_s: Sequence[float]) -> int:
    """取最大值的最小下标（从左到右打破并列）。"""
    q = np.asarray(q_s, dtype=float)
    max_q = np.max(q)
    return int(np.flatnonzero(q == max_q)[0])


def choose_action(
    policy: Optional[Policy],
    state_index: int,
    rng: np.random.Generator,
    action_count: int = ACTION_COUNT,
) -> int:
    """
    π(s)：
      - 无策略 / 非表格类型 -> 均匀随机
      - 该状态无数据或越界 -> 均匀随机
      - 否则在前 action_count 项上贪心（并列取最小下标），短向量同样适用
    """
    if policy is None or not policy.is_tabular:
        return int(rng.integers(action_count))
    q_s = policy.q_values(state_index)
    if not q_s:
        return int(rng.integers(action_count))
    return greedy_action(q_s[:action_count])


def best_action_overlay(
    policy: Optional[Policy],
    env: Environment,
    action_count: int = ACTION_COUNT,
) -> Dict[Coord, int]:
    """每个有数据的格子上的贪心动作，供展示层画箭头；仅 q_table 类型生成。"""
    if policy is None or not policy.is_tabular:
        return {}
    overlay: Dict[Coord, int] = {}
    for cell in env.cells():
        q_s = policy.q_values(env.state_index(cell))
        if not q_s:
            continue
        overlay[cell] = greedy_action(q_s[:action_count])
    return overlay


def policy_to_payload(policy: Policy) -> Dict[str, Any]:
    """导出为可 JSON 序列化的字典（缺失项写为 null）。"""
    return {
        "type": policy.type,
        "values": [list(v) if v is not None else None for v in policy.values],
    }
