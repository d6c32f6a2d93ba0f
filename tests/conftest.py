"""Shared fixtures. pygame runs headless; nothing here opens a window."""

import os

os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')
os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')

import pytest

from cradle_config import CradleConfig
from physics_world import PhysicsWorld
from simulation_session import SimulationSession

VIEWPORT = (1200, 700)


@pytest.fixture
def sim_config():
    """Mirror of the 'simulation' section of config.json."""
    return {
        'timestep': 1.0 / 60.0,
        'gravity': 980.0,
        'substeps': 8,
        'solver_iterations': 20,
        'position_iterations': 4,
        'contact_tolerance': 1e-3,
        'contact_gap_size': 0.5,
        'restitution_threshold': 1.0,
    }


@pytest.fixture
def world(sim_config):
    return PhysicsWorld(sim_config)


@pytest.fixture
def make_session(world, sim_config):
    def _make(**config_kwargs):
        return SimulationSession.create(world, CradleConfig(**config_kwargs), VIEWPORT, sim_config)
    return _make
