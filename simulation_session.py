# simulation_session.py

"""
Simulation Session

Owns everything that belongs to one cradle epoch: the configuration, its
layout, the engine objects built from it and the drag controller bound to
them. Reconfiguration never edits a session in place. `rebuild` tears the old
epoch down and returns a new session, which also invalidates any drag still
holding on to the old bobs.
"""

import logging
from collections import namedtuple

from cradle_config import CradleConfig, apply_command
from cradle_layout import build_layout
from drag_controller import DragController
from physics_binding import materialize
from physics_world import PhysicsWorld

logger = logging.getLogger("cradle_sim")

# Session-level commands (configuration commands live in cradle_config)
ResetCradle = namedtuple('ResetCradle', [])
ResizeViewport = namedtuple('ResizeViewport', ['width', 'height'])

# Everything the renderer needs to draw one bob and its string
RenderItem = namedtuple('RenderItem', ['anchor', 'position', 'radius', 'color', 'is_dragged'])

DEFAULT_GAP_SIZE = 0.5


def contact_gap_size(world: PhysicsWorld, settings: dict) -> float:
    """
    The resting gap between bobs when the contact gap is enabled.
    A gap within the world's contact tolerance would still be solved as
    touching, so it is widened to twice the tolerance.
    """
    gap = float(settings.get('contact_gap_size', DEFAULT_GAP_SIZE))
    if gap <= world.contact_tolerance:
        widened = 2 * world.contact_tolerance
        logger.warning(f"Contact gap {gap} does not exceed contact tolerance {world.contact_tolerance}; using {widened}.")
        return widened
    return gap


class SimulationSession:
    """
    Data Contract:
    - world (PhysicsWorld): Shared for the lifetime of the application.
    - config (CradleConfig), viewport (tuple of width, height).
    - settings (dict): The 'simulation' section of config.json.
    - layout (Layout), handle (WorldHandle), drag (DragController).
    - epoch (int): Incremented by every rebuild.
    """
    def __init__(self, world: PhysicsWorld, config: CradleConfig, viewport: tuple, settings: dict,
                 layout, handle, epoch: int):
        self.world = world
        self.config = config
        self.viewport = viewport
        self.settings = settings
        self.layout = layout
        self.handle = handle
        self.epoch = epoch
        self.drag = DragController(handle)

    @classmethod
    def create(cls, world: PhysicsWorld, config: CradleConfig, viewport: tuple, settings: dict = None,
               epoch: int = 0) -> "SimulationSession":
        """Builds the layout for `config` and materializes it in `world`."""
        settings = settings or {}
        layout = build_layout(config, viewport[0], gap_size=contact_gap_size(world, settings))
        handle = materialize(world, layout, epoch)
        logger.info(f"Epoch {epoch}: session ready with {config} in viewport {viewport[0]}x{viewport[1]}.")
        return cls(world, config, viewport, settings, layout, handle, epoch)

    # --- Transitions ---

    def apply(self, command) -> "SimulationSession":
        """Applies a configuration or session command. Always returns a new session."""
        if isinstance(command, ResetCradle):
            return rebuild(self, self.config)
        if isinstance(command, ResizeViewport):
            return rebuild(self, self.config, viewport=(command.width, command.height))
        return rebuild(self, apply_command(self.config, command))

    # --- Pointer input ---

    def pointer_down(self, x: float, y: float) -> bool:
        return self.drag.pointer_down(x, y)

    def pointer_move(self, x: float, y: float):
        self.drag.pointer_move(x, y)

    def pointer_up(self):
        self.drag.pointer_up()

    # --- Frame ---

    def tick(self):
        """Advances the engine by exactly one fixed timestep."""
        self.world.step()

    def positions(self) -> list:
        return [self.handle.position_of(i) for i in range(len(self.handle))]

    def render_items(self) -> list:
        items = []
        for i, bob in enumerate(self.layout.bobs):
            items.append(RenderItem(
                anchor=bob.anchor,
                position=self.handle.position_of(i),
                radius=bob.radius,
                color=bob.color,
                is_dragged=self.drag.dragged_index == i,
            ))
        return items

    def beam_segment(self) -> tuple:
        return self.layout.beam_start, self.layout.beam_end


def rebuild(session: SimulationSession, new_config: CradleConfig, viewport: tuple = None) -> SimulationSession:
    """
    Replaces a session by one built from `new_config`.

    Data Contract:
    - Inputs: the current session, the configuration to build, optionally a
      new viewport size.
    - Outputs: A new session with epoch + 1 and an idle drag controller.
    - Side Effects: Removes the old session's bodies and strings from the
      world. The old session's drag controller becomes stale and ignores
      further input.
    """
    session.drag.cancel()
    session.handle.destroy()
    return SimulationSession.create(
        session.world,
        new_config,
        viewport or session.viewport,
        session.settings,
        epoch=session.epoch + 1,
    )
