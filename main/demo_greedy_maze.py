# -*- coding: utf-8 -*-
from policy_sim.engine.episode_controller import EpisodeController, SimConfig
from policy_sim.env_catalog import get_environment
from policy_sim.runner import run_headless
from policy_sim.utils.oracle import shortest_path_policy
from policy_sim.utils.policy_ops import policy_to_payload
from policy_sim.utils.render import render_snapshot, render_report_card

if __name__ == "__main__":
    env = get_environment("maze")
    ctrl = EpisodeController(env.id, SimConfig(speed=4.0, log_dir="logs/demo_maze", use_tensorboard=True))

    # 成功后自动重开并继续运行
    ctrl.load_policy(policy_to_payload(shortest_path_policy(env)))
    ctrl.play()
    run_headless(ctrl, 200, render_every=25)

    render_snapshot(env, ctrl.snapshot())
    render_report_card(ctrl.report_card())
    ctrl.close()
