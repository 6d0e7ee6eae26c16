# -*- coding: utf-8 -*-
import dataclasses

import pytest

from policy_sim.engine.episode_controller import EpisodeController, SimConfig
from policy_sim.env_catalog import get_environment


@pytest.fixture
def gridworld():
    return get_environment("gridworld")


@pytest.fixture
def sim_cfg(tmp_path):
    return SimConfig(log_dir=str(tmp_path / "logs"), use_tensorboard=False)


@pytest.fixture
def make_controller(sim_cfg):
    created = []

    def _make(env_id="gridworld", **overrides):
        ctrl = EpisodeController(env_id, dataclasses.replace(sim_cfg, **overrides))
        created.append(ctrl)
        return ctrl

    yield _make
    for ctrl in created:
        ctrl.close()


@pytest.fixture
def ctrl(make_controller):
    return make_controller()
