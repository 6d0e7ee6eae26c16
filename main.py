# -*- coding: utf-8 -*-
import argparse
import sys

from policy_sim.engine.episode_controller import EpisodeController, SimConfig
from policy_sim.env_catalog import DEFAULT_ENVIRONMENT, list_environments
from policy_sim.errors import InvalidPolicyPayload
from policy_sim.runner import run_headless
from policy_sim.utils.render import render_report_card, render_snapshot
from policy_sim.utils.timing import out_profile


def _speed(text: str) -> float:
    cfg = SimConfig()
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"不是数字：{text!r}") from None
    if not cfg.min_speed <= value <= cfg.max_speed:
        raise argparse.ArgumentTypeError(f"speed 必须在 [{cfg.min_speed}, {cfg.max_speed}] 内")
    return value


def build_parser() -> argparse.ArgumentParser:
    env_ids = [env_id for env_id, _ in list_environments()]
    p = argparse.ArgumentParser(description="回放表格型策略（或随机行为）并查看表现。")
    p.add_argument("--env", default=DEFAULT_ENVIRONMENT, choices=env_ids)
    p.add_argument("--policy", help="策略 JSON 文件：{\"type\": \"q_table\", \"values\": [...]}")
    p.add_argument("--ticks", type=int, default=300)
    p.add_argument("--speed", type=_speed, default=1.0)
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--log-dir", default="logs/sim")
    p.add_argument("--tensorboard", action="store_true")
    p.add_argument("--render", type=int, default=0, help="每 N 个 tick 打印一次网格（0 表示不打印）")
    p.add_argument("--profile-dir", help="写出耗时统计的目录")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    cfg = SimConfig(
        seed=args.seed,
        speed=args.speed,
        log_dir=args.log_dir,
        use_tensorboard=args.tensorboard,
    )
    ctrl = EpisodeController(args.env, cfg)
    try:
        if args.policy:
            try:
                with open(args.policy, "rb") as f:
                    ctrl.load_policy(f.read())
            except (OSError, InvalidPolicyPayload) as e:
                ctrl.logger.error(str(e))
                return 2
            ctrl.play()
        else:
            # 无策略时不能 play，只能逐步随机行走
            for _ in range(cfg.max_steps_per_episode):
                if ctrl.manual_step() is None:
                    break

        run_headless(ctrl, args.ticks, render_every=args.render or None)
        render_snapshot(ctrl.env, ctrl.snapshot())
        render_report_card(ctrl.report_card())
        if args.profile_dir:
            out_profile(args.profile_dir)
    finally:
        ctrl.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
