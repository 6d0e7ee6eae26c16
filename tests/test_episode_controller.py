# -*- coding: utf-8 -*-
import json

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from policy_sim.engine.episode_controller import (
    TERMINATED_GOAL,
    TERMINATED_TIMEOUT,
    EpisodeController,
    Phase,
    SimConfig,
)
from policy_sim.errors import InvalidPolicyPayload, NotInitialized, UnknownEnvironment

from helpers import ALWAYS_UP_POLICY, ROUTE_LENGTH, ROUTE_POLICY, ScriptedRng


def _run_route_to_goal(ctrl):
    ctrl.load_policy(ROUTE_POLICY)
    assert ctrl.play()
    outcomes = [ctrl.tick(1000.0 * t) for t in range(ROUTE_LENGTH)]
    assert outcomes[-1].terminated == TERMINATED_GOAL
    return outcomes


# ---------- 初始化 ----------
def test_initial_state(ctrl):
    snap = ctrl.snapshot()
    assert snap.episode == 1
    assert snap.step == 0
    assert snap.total_reward == 0.0
    assert not snap.is_running
    assert snap.environment_id == "gridworld"
    assert not snap.policy_loaded
    assert snap.agent_positions == ((0, 0),)
    assert snap.trajectory == ((0, 0),)
    assert snap.per_cell_best_action == {}
    assert snap.interval_ms == pytest.approx(1000.0)
    assert ctrl.phase is Phase.IDLE


def test_unknown_environment_on_construction(sim_cfg):
    with pytest.raises(UnknownEnvironment):
        EpisodeController("warehouse", sim_cfg)


def test_invalid_speed_in_config(make_controller):
    with pytest.raises(ValueError):
        make_controller(speed=0.0)


# ---------- Scenario A：无策略，100 步超时 ----------
def test_random_walk_times_out_without_success(ctrl):
    # 下 -> 右(撞 (1,1)) -> 上，循环；永远到不了 (3,3)
    ctrl.rng = ScriptedRng([1, 3, 0])
    outcomes = [ctrl.simulation_step() for _ in range(100)]

    assert ctrl.history.steps_per_episode == []
    assert len(ctrl.history.reward_history) == 100
    assert set(ctrl.history.reward_history) <= {-0.01, -1.0}
    assert [o.terminated for o in outcomes[:-1]] == [None] * 99
    assert outcomes[-1].terminated == TERMINATED_TIMEOUT
    assert ctrl.phase is Phase.TERMINATING
    assert ctrl.restart_pending


def test_collision_leaves_trajectory_unchanged(ctrl):
    ctrl.rng = ScriptedRng([1, 3])
    first = ctrl.simulation_step()
    assert first.position == (0, 1)
    second = ctrl.simulation_step()
    assert second.is_obstacle and second.reward == -1.0
    assert ctrl.primary.position == (0, 1)
    assert ctrl.primary.trajectory == [(0, 0), (0, 1)]
    assert ctrl.metrics.total_reward == pytest.approx(-1.01)


# ---------- Scenario B：确定性路线到达目标 ----------
def test_policy_routes_agent_to_goal(ctrl):
    outcomes = _run_route_to_goal(ctrl)

    history = ctrl.history
    assert history.steps_per_episode == [ROUTE_LENGTH]
    assert history.reward_history[ROUTE_LENGTH - 1] == 10.0
    assert history.reward_history[: ROUTE_LENGTH - 1] == [-0.01] * (ROUTE_LENGTH - 1)
    assert [o.position for o in outcomes] == [(1, 0), (2, 0), (3, 0), (3, 1), (3, 2), (3, 3)]
    assert ctrl.primary.trajectory == [(0, 0), (1, 0), (2, 0), (3, 0), (3, 1), (3, 2), (3, 3)]
    assert ctrl.metrics.total_reward == pytest.approx(9.95)
    assert not ctrl.is_running
    assert ctrl.restart_pending


def test_success_with_policy_restarts_and_resumes(ctrl):
    _run_route_to_goal(ctrl)

    # 最后一步在 t=5000，重开在 5500 到期
    assert ctrl.tick(5400.0) is None
    assert ctrl.snapshot().episode == 1

    out = ctrl.tick(5500.0)
    snap = ctrl.snapshot()
    assert snap.episode == 2
    assert snap.is_running
    assert out is not None and out.step == 1 and out.position == (1, 0)
    # 奖励历史跨 episode 累积
    assert len(ctrl.history.reward_history) == ROUTE_LENGTH + 1
    assert ctrl.history.steps_per_episode == [ROUTE_LENGTH]


def test_timeout_restarts_paused_even_with_policy(ctrl):
    ctrl.load_policy(ALWAYS_UP_POLICY)
    assert ctrl.play()
    for t in range(100):
        ctrl.tick(1000.0 * t)
    assert ctrl.phase is Phase.TERMINATING
    assert ctrl.history.steps_per_episode == []

    ctrl.tick(100_000.0)
    assert ctrl.snapshot().episode == 2
    assert not ctrl.is_running
    assert ctrl.primary.position == (0, 0)
    assert ctrl.metrics.step == 0


def test_step_cap_is_inclusive(ctrl):
    ctrl.load_policy(ALWAYS_UP_POLICY)
    for _ in range(99):
        assert ctrl.manual_step().terminated is None
    last = ctrl.manual_step()
    assert last.terminated == TERMINATED_TIMEOUT
    assert ctrl.metrics.step == 100


def test_configurable_step_cap(make_controller):
    ctrl = make_controller(max_steps_per_episode=5)
    ctrl.load_policy(ALWAYS_UP_POLICY)
    outcomes = [ctrl.manual_step() for _ in range(5)]
    assert outcomes[-1].terminated == TERMINATED_TIMEOUT
    assert ctrl.manual_step() is None


# ---------- Scenario C：无效策略被拒绝 ----------
def test_empty_type_is_rejected_and_previous_policy_kept(ctrl):
    ctrl.load_policy(ROUTE_POLICY)
    before = ctrl.policy
    ctrl.manual_step()

    with pytest.raises(InvalidPolicyPayload):
        ctrl.load_policy(json.dumps({"type": "", "values": [[0, 0, 0, 1]]}))

    assert ctrl.policy is before
    # 拒绝时不重置模拟
    assert ctrl.primary.position == (1, 0)
    assert ctrl.metrics.step == 1


def test_rejected_payload_without_prior_policy(ctrl):
    with pytest.raises(InvalidPolicyPayload):
        ctrl.load_policy("not json at all")
    assert ctrl.policy is None
    assert not ctrl.snapshot().policy_loaded


def test_load_policy_reinitializes_episode(ctrl):
    ctrl.rng = ScriptedRng([1])
    ctrl.manual_step()
    ctrl.load_policy(ROUTE_POLICY)
    snap = ctrl.snapshot()
    assert snap.step == 0
    assert snap.agent_positions == ((0, 0),)
    assert snap.trajectory == ((0, 0),)
    assert snap.episode == 1
    assert snap.policy_loaded
    assert snap.per_cell_best_action[(3, 0)] == 1
    # 整 run 奖励历史不清空
    assert ctrl.history.reward_history == [-0.01]


def test_non_tabular_policy_is_accepted_but_acts_randomly(ctrl):
    ctrl.load_policy({"type": "dqn", "values": [[0, 0, 0, 1]] * 16})
    assert ctrl.snapshot().policy_loaded
    assert ctrl.snapshot().per_cell_best_action == {}
    ctrl.rng = ScriptedRng([1])
    assert ctrl.manual_step().action == 1


# ---------- 重置语义 ----------
def test_hard_reset_is_a_full_run_reset(ctrl):
    _run_route_to_goal(ctrl)
    ctrl.tick(5500.0)
    assert ctrl.snapshot().episode == 2

    ctrl.hard_reset()
    snap = ctrl.snapshot()
    assert snap.episode == 1
    assert ctrl.history.steps_per_episode == []
    assert ctrl.history.reward_history == []
    assert not snap.policy_loaded
    assert not snap.is_running
    assert snap.step == 0


def test_clear_policy_keeps_episode_and_history(ctrl):
    _run_route_to_goal(ctrl)
    ctrl.tick(5500.0)
    rewards = list(ctrl.history.reward_history)

    ctrl.clear_policy()
    snap = ctrl.snapshot()
    assert snap.episode == 2
    assert ctrl.history.steps_per_episode == [ROUTE_LENGTH]
    assert ctrl.history.reward_history == rewards
    assert not snap.policy_loaded
    assert not snap.is_running
    assert snap.step == 0
    assert snap.per_cell_best_action == {}


@pytest.mark.parametrize(
    "action",
    [
        lambda c: c.hard_reset(),
        lambda c: c.clear_policy(),
        lambda c: c.load_policy(ROUTE_POLICY),
        lambda c: c.select_environment("maze"),
    ],
    ids=["hard_reset", "clear_policy", "load_policy", "select_environment"],
)
def test_any_reset_cancels_pending_restart(ctrl, action):
    _run_route_to_goal(ctrl)
    assert ctrl.restart_pending

    action(ctrl)
    assert not ctrl.restart_pending

    assert ctrl.tick(10_000.0) is None
    assert ctrl.snapshot().episode == 1
    assert not ctrl.is_running


# ---------- 控制命令 ----------
def test_play_requires_policy(ctrl):
    assert not ctrl.play()
    assert not ctrl.is_running
    ctrl.load_policy(ROUTE_POLICY)
    assert ctrl.play()
    assert not ctrl.play()


def test_pause_stops_ticking(ctrl):
    ctrl.load_policy(ROUTE_POLICY)
    assert not ctrl.pause()
    ctrl.play()
    assert ctrl.tick(0.0) is not None
    assert ctrl.pause()
    assert ctrl.tick(5000.0) is None
    assert ctrl.metrics.step == 1


def test_manual_step_only_while_paused(ctrl):
    # 无策略也允许手动单步
    assert ctrl.manual_step() is not None
    ctrl.load_policy(ROUTE_POLICY)
    ctrl.play()
    assert ctrl.manual_step() is None


def test_manual_step_refused_while_restart_pending(ctrl):
    _run_route_to_goal(ctrl)
    assert ctrl.manual_step() is None
    assert not ctrl.play()


def test_tick_honours_interval(ctrl):
    ctrl.load_policy(ALWAYS_UP_POLICY)
    assert ctrl.set_speed(2.0) == pytest.approx(500.0)
    ctrl.play()
    assert ctrl.tick(0.0) is not None
    assert ctrl.tick(499.0) is None
    assert ctrl.tick(500.0) is not None
    assert ctrl.metrics.step == 2


@pytest.mark.parametrize("speed", [0.0, 0.25, 20.5, -1.0])
def test_speed_out_of_range(ctrl, speed):
    with pytest.raises(ValueError):
        ctrl.set_speed(speed)
    assert ctrl.interval_ms == pytest.approx(1000.0)


def test_speed_bounds_inclusive(ctrl):
    assert ctrl.set_speed(20.0) == pytest.approx(50.0)
    assert ctrl.set_speed(0.5) == pytest.approx(2000.0)


def test_select_environment_hard_resets(ctrl):
    ctrl.load_policy(ROUTE_POLICY)
    ctrl.manual_step()
    ctrl.select_environment("maze")
    snap = ctrl.snapshot()
    assert snap.environment_id == "maze"
    assert not snap.policy_loaded
    assert snap.episode == 1
    assert ctrl.history.reward_history == []


def test_select_unknown_environment_leaves_state(ctrl):
    ctrl.load_policy(ROUTE_POLICY)
    with pytest.raises(UnknownEnvironment):
        ctrl.select_environment("nope")
    assert ctrl.env.id == "gridworld"
    assert ctrl.snapshot().policy_loaded


def test_step_without_agent_raises_not_initialized(ctrl):
    ctrl.agents.clear()
    with pytest.raises(NotInitialized):
        ctrl.simulation_step()
    ctrl.initialize_simulation()
    assert ctrl.simulation_step().step == 1


# ---------- 多智能体 ----------
def test_only_primary_agent_moves(make_controller):
    ctrl = make_controller("multiagent")
    assert ctrl.snapshot().agent_positions == ((0, 0), (7, 7))
    ctrl.rng = ScriptedRng([3, 1])
    for _ in range(4):
        ctrl.manual_step()
    snap = ctrl.snapshot()
    # 右、下、右、下(撞 (2,2))
    assert snap.agent_positions == ((2, 1), (7, 7))
    assert ctrl.agents[1].trajectory == []


# ---------- 日志 / tensorboard ----------
def test_tensorboard_scalars_written(tmp_path):
    log_dir = tmp_path / "tb"
    ctrl = EpisodeController("gridworld", SimConfig(log_dir=str(log_dir), use_tensorboard=True))
    _run_route_to_goal(ctrl)
    ctrl.close()
    assert list(log_dir.glob("events.out.tfevents.*"))
    assert (log_dir / "run.log").exists()


# ---------- 性质：成功步数记录 ----------
@settings(max_examples=15, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(seed=st.integers(0, 10_000))
def test_steps_per_episode_only_grows_on_success(tmp_path_factory, seed):
    log_dir = tmp_path_factory.mktemp("prop")
    ctrl = EpisodeController("gridworld", SimConfig(seed=seed, log_dir=str(log_dir), use_tensorboard=False))
    try:
        now, goals, steps = 0.0, [], 0
        for _ in range(400):
            if ctrl.restart_pending:
                now += ctrl.cfg.restart_delay_ms
                ctrl.tick(now)
                continue
            out = ctrl.manual_step()
            steps += 1
            assert out.reward in (-0.01, -1.0, 10.0)
            if out.terminated == TERMINATED_GOAL:
                goals.append(out.step)
            elif out.terminated == TERMINATED_TIMEOUT:
                assert out.step == 100
        assert ctrl.history.steps_per_episode == goals
        assert len(ctrl.history.reward_history) == steps
    finally:
        ctrl.close()
