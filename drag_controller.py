# drag_controller.py

"""
Drag Controller

Lets the user grab one bob, swing it around its anchor and let go.

States: Idle (dragged_index is None) and Dragging(dragged_index).

While dragging, the bob is kinematic and is placed directly on the circle of
its string length around the anchor, so the string never stretches. On
release the bob becomes dynamic again with zero velocity and falls from the
release angle under gravity and string tension alone.
"""

import math
import logging

import constants
from physics_binding import WorldHandle

logger = logging.getLogger("cradle_sim")


class DragController:
    """
    Pointer-driven state machine for manually displacing one bob.

    Data Contract:
    - Inputs: handle (WorldHandle) - the bobs of the current epoch.
    - Side Effects: Switches the dragged body between kinematic and dynamic
      mode and sets its position and velocity in the world.
    - Invariants:
        - At most one bob is dragged at a time.
        - While dragging, distance(bob, anchor) == string_length.
        - A destroyed handle is never dereferenced; the controller falls back
          to Idle instead.
    """
    def __init__(self, handle: WorldHandle, grab_factor: float = constants.GRAB_RADIUS_FACTOR):
        self.handle = handle
        self.grab_factor = grab_factor
        self.dragged_index = None

    @property
    def is_dragging(self) -> bool:
        return self.dragged_index is not None

    def _discard_if_stale(self) -> bool:
        """Drops a drag whose bob vanished in a rebuild. Returns True if stale."""
        if self.handle.is_alive:
            return False
        if self.dragged_index is not None:
            logger.debug(f"Discarding drag of bob {self.dragged_index} from destroyed epoch {self.handle.epoch}.")
        self.dragged_index = None
        return True

    def bob_at(self, x: float, y: float):
        """Index of the first bob whose grab circle contains (x, y), else None."""
        for i in range(len(self.handle)):
            bx, by = self.handle.position_of(i)
            if math.hypot(x - bx, y - by) < self.handle.radius_of(i) * self.grab_factor:
                return i
        return None

    def pointer_down(self, x: float, y: float) -> bool:
        """
        Idle -> Dragging when the pointer lands on a bob.
        Returns True if a drag started.
        """
        if self._discard_if_stale() or self.is_dragging:
            return False

        index = self.bob_at(x, y)
        if index is None:
            return False

        body = self.handle.body_of(index)
        self.handle.world.set_kinematic(body, True)
        self.handle.world.set_velocity(body, (0.0, 0.0))
        self.dragged_index = index
        logger.debug(f"Grabbed bob {index} at ({x:.1f}, {y:.1f}).")
        return True

    def pointer_move(self, x: float, y: float):
        """Places the dragged bob at the pointer's angle around its anchor."""
        if self._discard_if_stale() or not self.is_dragging:
            return

        index = self.dragged_index
        body = self.handle.body_of(index)
        ax, ay = self.handle.anchor_of(index)
        length = self.handle.layout.string_length

        dx = x - ax
        dy = y - ay
        if dx == 0 and dy == 0:
            # Pointer on the anchor: the angle is undefined, keep the current one.
            bx, by = self.handle.position_of(index)
            dx, dy = bx - ax, by - ay
            if dx == 0 and dy == 0:
                dx, dy = 0.0, 1.0
        angle = math.atan2(dy, dx)

        new_position = (ax + math.cos(angle) * length, ay + math.sin(angle) * length)
        self.handle.world.set_position(body, new_position)

    def pointer_up(self):
        """
        Dragging -> Idle. The bob returns to the dynamics engine with zero
        velocity. Also used when the pointer leaves the window.
        """
        if self._discard_if_stale() or not self.is_dragging:
            return

        index = self.dragged_index
        body = self.handle.body_of(index)
        self.handle.world.set_kinematic(body, False)
        self.handle.world.set_velocity(body, (0.0, 0.0))
        self.dragged_index = None
        logger.debug(f"Released bob {index} at {self.handle.position_of(index)}.")

    def cancel(self):
        """Forgets any drag without touching the world."""
        self.dragged_index = None
