# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from policy_sim.domain_object import StepOutcome
from policy_sim.engine.episode_controller import EpisodeController
from policy_sim.errors import NotInitialized
from policy_sim.utils.logger_manager import LOGGER_NAME


def _get_logger():
    return logging.getLogger(LOGGER_NAME)


class Command(Enum):
    PLAY = "play"
    PAUSE = "pause"
    STEP = "step"
    HARD_RESET = "hard_reset"
    CLEAR_POLICY = "clear_policy"
    SELECT_ENVIRONMENT = "select_environment"
    SET_SPEED = "set_speed"
    LOAD_POLICY = "load_policy"


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    message: str = ""
    outcome: Optional[StepOutcome] = None


def dispatch(ctrl: EpisodeController, command: Command | str, arg: Any = None) -> CommandResult:
    """
    把控制面板的意图转发给 controller。
    可恢复错误（策略无效、未初始化、速度越界）转成失败结果；UnknownEnvironment 直接抛出。
    """
    cmd = Command(command)
    try:
        if cmd is Command.PLAY:
            ok = ctrl.play()
            return CommandResult(ok, "" if ok else "需要已加载的策略，且当前未运行")
        if cmd is Command.PAUSE:
            ok = ctrl.pause()
            return CommandResult(ok, "" if ok else "当前未在运行")
        if cmd is Command.STEP:
            outcome = ctrl.manual_step()
            if outcome is None:
                return CommandResult(False, "仅在暂停时允许单步")
            return CommandResult(True, outcome=outcome)
        if cmd is Command.HARD_RESET:
            ctrl.hard_reset()
            return CommandResult(True)
        if cmd is Command.CLEAR_POLICY:
            ctrl.clear_policy()
            return CommandResult(True)
        if cmd is Command.SELECT_ENVIRONMENT:
            ctrl.select_environment(str(arg))
            return CommandResult(True)
        if cmd is Command.SET_SPEED:
            interval = ctrl.set_speed(float(arg))
            return CommandResult(True, f"interval_ms={interval:.1f}")
        if cmd is Command.LOAD_POLICY:
            policy = ctrl.load_policy(arg)
            return CommandResult(True, f"loaded {policy.type} ({len(policy.values)} states)")
    except (ValueError, NotInitialized) as e:
        # InvalidPolicyPayload 也是 ValueError；速度越界同理
        _get_logger().warning("%s failed: %s", cmd.value, e)
        return CommandResult(False, str(e))
    raise AssertionError(f"unhandled command {cmd}")
