# -*- coding: utf-8 -*-
# 路径：policy_sim/engine/episode_controller.py
from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np

from policy_sim.domain_object import (
    AgentState,
    Coord,
    Environment,
    Policy,
    RunHistory,
    RunMetrics,
    Snapshot,
    StepOutcome,
)
from policy_sim.env_catalog import DEFAULT_ENVIRONMENT, get_environment
from policy_sim.errors import NotInitialized
from policy_sim.grid_world import GridWorld
from policy_sim.utils.logger_manager import LoggerManager
from policy_sim.utils.metrics_ops import ReportCard, average_episode_length, report_card
from policy_sim.utils.policy_ops import best_action_overlay, choose_action, parse_policy
from policy_sim.utils.scheduler import TaskSlot

TERMINATED_GOAL = "goal"
TERMINATED_TIMEOUT = "timeout"


@dataclass
class SimConfig:
    seed: int = 42
    max_steps_per_episode: int = 100   # 含端点：step >= 上限即超时
    restart_delay_ms: float = 500.0    # episode 结束到自动重开的延迟
    speed: float = 1.0                 # interval_ms = 1000 / speed
    min_speed: float = 0.5
    max_speed: float = 20.0
    log_dir: str = "logs/sim"
    use_tensorboard: bool = False
    show_best_actions: bool = True
    show_trajectory: bool = True


class Phase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    TERMINATING = "terminating"   # 已结束，等待延迟重开


class EpisodeController:
    """
    单个模拟 run 的显式上下文：环境、策略引用、智能体、逐步指标与整 run 历史。

    不自带时钟：外部驱动按自己的节奏调用 tick(now)，核心只暴露 interval_ms。
    唯一的异步元素是 episode 结束后的延迟重开，它是 TaskSlot 中的一个可取消任务；
    任何重置路径（hard_reset / 切换环境 / 加载或清除策略）都会先取消它。
    """
    def __init__(
        self,
        env_id: str = DEFAULT_ENVIRONMENT,
        cfg: Optional[SimConfig] = None,
        logger: Optional[LoggerManager] = None,
    ) -> None:
        self.cfg = cfg or SimConfig()
        self._check_speed(self.cfg.speed)
        self.speed = float(self.cfg.speed)
        self.rng = np.random.default_rng(self.cfg.seed)
        self.env: Environment = get_environment(env_id)
        self.logger = logger or LoggerManager(self.cfg.log_dir, self.cfg.use_tensorboard)

        self.world = GridWorld(self.env)
        self.policy: Optional[Policy] = None

        self.agents: List[AgentState] = []
        self.metrics = RunMetrics()
        self.history = RunHistory()
        self.best_actions: Dict[Coord, int] = {}
        self.phase = Phase.IDLE

        self._restart = TaskSlot()
        self._now = 0.0
        self._last_step_at: Optional[float] = None
        self._episode_idx = 0   # tensorboard 的全局 episode 计数

        self.logger.log(f"EpisodeController initialized. env={self.env.id} seed={self.cfg.seed}")
        self.hard_reset()

    # ---------- 只读视图 ----------
    @property
    def is_running(self) -> bool:
        return self.phase is Phase.RUNNING

    @property
    def restart_pending(self) -> bool:
        return self._restart.pending

    @property
    def interval_ms(self) -> float:
        return 1000.0 / self.speed

    @property
    def primary(self) -> Optional[AgentState]:
        return self.agents[0] if self.agents else None

    def snapshot(self) -> Snapshot:
        primary = self.primary
        return Snapshot(
            episode=self.metrics.episode,
            step=self.metrics.step,
            total_reward=self.metrics.total_reward,
            is_running=self.is_running,
            environment_id=self.env.id,
            policy_loaded=self.policy is not None,
            agent_positions=tuple(a.position for a in self.agents),
            trajectory=tuple(primary.trajectory) if primary else (),
            per_cell_best_action=dict(self.best_actions),
            interval_ms=self.interval_ms,
            restart_pending=self.restart_pending,
            show_best_actions=self.cfg.show_best_actions,
            show_trajectory=self.cfg.show_trajectory,
        )

    def report_card(self) -> ReportCard:
        return report_card(self.history)

    # =========================================================
    #                     episode 生命周期
    # =========================================================
    def initialize_simulation(self, env_id: Optional[str] = None) -> None:
        """在起点重建智能体，重置本 episode 指标（episode 编号不变），不动整 run 历史。"""
        if env_id is not None and env_id != self.env.id:
            self._set_environment(env_id)

        self._restart.cancel()
        self.phase = Phase.IDLE
        self._last_step_at = None

        self.agents = [
            AgentState(id=i, position=start, trajectory=[start] if i == 0 else [])
            for i, start in enumerate(self.env.starts)
        ]
        self.metrics = RunMetrics(episode=self.metrics.episode)
        self.best_actions = best_action_overlay(self.policy, self.env)

    def simulation_step(self) -> StepOutcome:
        primary = self.primary
        if primary is None:
            raise NotInitialized()

        # 整步只读取一次策略引用：要么完整旧策略，要么完整新策略
        policy = self.policy
        pos = primary.position
        state_index = self.env.state_index(pos)
        action = choose_action(policy, state_index, self.rng)
        res = self.world.step(pos, action)

        primary.position = res.next_pos
        if not res.is_obstacle:
            # 碰撞时轨迹保持不变
            primary.trajectory.append(res.next_pos)

        self.history.reward_history.append(res.reward)
        self.metrics.step += 1
        self.metrics.total_reward += res.reward
        self.logger.debug(
            f"[EP {self.metrics.episode}] t={self.metrics.step} s={pos} a={action} "
            f"s'={res.next_pos} r={res.reward}"
        )

        terminated = None
        if res.goal_reached:
            self.history.steps_per_episode.append(self.metrics.step)
            terminated = TERMINATED_GOAL
        elif self.metrics.step >= self.cfg.max_steps_per_episode:
            terminated = TERMINATED_TIMEOUT

        if terminated is not None:
            self._end_episode(terminated)

        return StepOutcome(
            action=action,
            position=res.next_pos,
            reward=res.reward,
            is_obstacle=res.is_obstacle,
            goal_reached=res.goal_reached,
            step=self.metrics.step,
            terminated=terminated,
        )

    def tick(self, now: float) -> Optional[StepOutcome]:
        """
        由外部循环按任意频率调用：
          1) 到期则执行挂起的 episode 重开；
          2) 运行中且距上一步已满 interval_ms，则前进一步。
        """
        self._now = float(now)
        self._restart.fire_if_due(self._now)

        if not self.is_running:
            return None
        if self._last_step_at is not None and self._now - self._last_step_at < self.interval_ms:
            return None
        self._last_step_at = self._now
        return self.simulation_step()

    def _end_episode(self, cause: str) -> None:
        self.phase = Phase.TERMINATING
        ep = self.metrics.episode
        success = cause == TERMINATED_GOAL

        self.logger.log(
            f"[EP {ep}] ended by {cause}: len={self.metrics.step} return={self.metrics.total_reward:.3f}"
        )
        self.logger.add_scalar("episode/return", self.metrics.total_reward, self._episode_idx)
        self.logger.add_scalar("episode/length", self.metrics.step, self._episode_idx)
        self.logger.add_scalar("episode/success", float(success), self._episode_idx)
        if success:
            self.logger.add_scalar(
                "run/average_episode_length",
                average_episode_length(self.history.steps_per_episode),
                self._episode_idx,
            )
        self._episode_idx += 1

        self._restart.schedule(
            "episode_restart",
            self._now + self.cfg.restart_delay_ms,
            functools.partial(self._restart_episode, success),
        )

    def _restart_episode(self, success: bool) -> None:
        self.metrics.episode += 1
        self.initialize_simulation()
        # 仅“成功 + 已加载策略”时自动继续，否则保持暂停
        if success and self.policy is not None:
            self.phase = Phase.RUNNING
        self.logger.log(f"[EP {self.metrics.episode}] restarted, running={self.is_running}")

    # =========================================================
    #                     控制命令
    # =========================================================
    def play(self) -> bool:
        if self.policy is None:
            self.logger.warning("play ignored: no policy loaded.")
            return False
        if self.is_running or self.restart_pending:
            return False
        self.phase = Phase.RUNNING
        return True

    def pause(self) -> bool:
        if not self.is_running:
            return False
        self.phase = Phase.IDLE
        return True

    def manual_step(self) -> Optional[StepOutcome]:
        """手动单步：仅在暂停且没有挂起重开时允许；无策略时走随机动作。"""
        if self.is_running or self.restart_pending:
            self.logger.warning("manual step ignored: simulation is running or restarting.")
            return None
        return self.simulation_step()

    def hard_reset(self) -> None:
        """整 run 重置：丢弃策略，episode=1，清空成功步数与整 run 奖励历史。"""
        self._restart.cancel()
        self.policy = None
        self.history = RunHistory()
        self.metrics = RunMetrics(episode=1)
        self.initialize_simulation()
        self.logger.log(f"Hard reset on env={self.env.id}.")

    def clear_policy(self) -> None:
        self._restart.cancel()
        self.policy = None
        self.initialize_simulation()
        self.logger.log("Policy cleared.")

    def load_policy(self, raw: Union[str, bytes, Mapping[str, Any]]) -> Policy:
        """解析失败抛出 InvalidPolicyPayload，且原策略保持不变。"""
        try:
            policy = parse_policy(raw)
        except ValueError as e:
            self.logger.warning(f"Policy rejected: {e}")
            raise
        if not policy.is_tabular:
            self.logger.warning(f"Policy type {policy.type!r} is not tabular; actions fall back to random.")

        self._restart.cancel()
        self.policy = policy
        self.initialize_simulation()
        self.logger.log(
            f"Policy loaded: type={policy.type} states={len(policy.values)} "
            f"overlay_cells={len(self.best_actions)}"
        )
        return policy

    def select_environment(self, env_id: str) -> None:
        self._set_environment(env_id)
        self.hard_reset()

    def set_speed(self, multiplier: float) -> float:
        self._check_speed(multiplier)
        self.speed = float(multiplier)
        return self.interval_ms

    def close(self) -> None:
        self._restart.cancel()
        self.logger.close()

    # ---------- 内部 ----------
    def _set_environment(self, env_id: str) -> None:
        env = get_environment(env_id)   # 未知 id 直接抛出，状态不变
        self._restart.cancel()
        self.env = env
        self.world = GridWorld(env)
        self.logger.log(f"Environment selected: {env.id} ({env.name})")

    def _check_speed(self, multiplier: float) -> None:
        if not self.cfg.min_speed <= multiplier <= self.cfg.max_speed:
            raise ValueError(
                f"speed 必须在 [{self.cfg.min_speed}, {self.cfg.max_speed}] 内，得到 {multiplier}"
            )
