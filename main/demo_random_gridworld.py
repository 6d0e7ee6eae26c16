# -*- coding: utf-8 -*-
from policy_sim.engine.episode_controller import EpisodeController, SimConfig
from policy_sim.utils.render import render_snapshot, render_report_card

if __name__ == "__main__":
    # 4x4 网格；goal 在 (3,3)，obstacles 在 {(1,1),(2,2)}；没有策略 -> 随机动作
    ctrl = EpisodeController("gridworld", SimConfig(seed=7, log_dir="logs/demo_random"))

    # 无策略时 play 被拒绝，只能手动单步，直到到达目标或超时
    while True:
        out = ctrl.manual_step()
        if out is None or out.terminated:
            break

    render_snapshot(ctrl.env, ctrl.snapshot())
    render_report_card(ctrl.report_card())
    ctrl.close()
