# -*- coding: utf-8 -*-
import json
import sys

from policy_sim.env_catalog import get_environment, list_environments
from policy_sim.utils.oracle import shortest_path_policy
from policy_sim.utils.policy_ops import policy_to_payload

# 用法：python main/export_oracle_policy.py maze maze_policy.json
if __name__ == "__main__":
    if len(sys.argv) != 3:
        ids = ", ".join(env_id for env_id, _ in list_environments())
        sys.exit(f"usage: export_oracle_policy.py <env: {ids}> <out.json>")

    env = get_environment(sys.argv[1])
    with open(sys.argv[2], "w", encoding="utf-8") as f:
        json.dump(policy_to_payload(shortest_path_policy(env)), f, indent=2)
    print(f"wrote {env.size.n_cells} states for {env.id} -> {sys.argv[2]}")
