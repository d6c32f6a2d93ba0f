# physics_binding.py

"""
Physics Binding

Creates the engine bodies and strings for a Layout and tears them down again.
A WorldHandle only ever removes what it created itself, so persistent objects
living in the same world are left alone.
"""

import logging

import constants
from cradle_layout import Layout
from physics_world import BodyParams, PhysicsWorld

logger = logging.getLogger("cradle_sim")


def bob_body_params(bob) -> BodyParams:
    """Engine parameters for a bob; the engine mass is derived from target_mass."""
    return BodyParams(
        mass=bob.target_mass,
        restitution=constants.BOB_RESTITUTION,
        friction=constants.BOB_FRICTION,
        air_drag=constants.BOB_AIR_DRAG,
    )


class WorldHandle:
    """
    The engine objects materialized for one layout.

    Data Contract:
    - world (PhysicsWorld): The shared simulation world.
    - layout (Layout): The layout the objects were built from.
    - epoch (int): Number of the rebuild that produced this handle.
    - body_refs, constraint_refs (list of int): One body and one string per bob,
      in bob order.
    - Invariants: Once destroyed, a handle never touches the world again and
      is_alive stays False.
    """
    def __init__(self, world: PhysicsWorld, layout: Layout, epoch: int, body_refs: list, constraint_refs: list):
        self.world = world
        self.layout = layout
        self.epoch = epoch
        self.body_refs = body_refs
        self.constraint_refs = constraint_refs
        self._alive = True

    @property
    def is_alive(self) -> bool:
        return self._alive

    def __len__(self):
        return len(self.body_refs)

    def body_of(self, bob_index: int) -> int:
        return self.body_refs[bob_index]

    def position_of(self, bob_index: int) -> tuple:
        """Live position of a bob, as of the last engine step."""
        return self.world.position_of(self.body_refs[bob_index])

    def velocity_of(self, bob_index: int) -> tuple:
        return self.world.velocity_of(self.body_refs[bob_index])

    def anchor_of(self, bob_index: int) -> tuple:
        return self.layout.bobs[bob_index].anchor

    def radius_of(self, bob_index: int) -> float:
        return self.layout.bobs[bob_index].radius

    def destroy(self):
        """Removes this handle's bodies and strings. Safe to call repeatedly."""
        if not self._alive:
            return
        for constraint_ref in self.constraint_refs:
            if self.world.has_constraint(constraint_ref):
                self.world.remove_constraint(constraint_ref)
        for body_ref in self.body_refs:
            if self.world.has_body(body_ref):
                self.world.remove_body(body_ref)
        self._alive = False
        logger.debug(f"Epoch {self.epoch}: destroyed {len(self.body_refs)} bobs.")


def materialize(world: PhysicsWorld, layout: Layout, epoch: int = 0) -> WorldHandle:
    """
    Adds one body per bob at its rest position and one inextensible string
    from the bob's centre to its anchor.

    Data Contract:
    - Inputs: world (PhysicsWorld), layout (Layout), epoch (int).
    - Outputs: WorldHandle owning the created objects.
    - Side Effects: Mutates the shared world.
    """
    body_refs = []
    constraint_refs = []
    for bob in layout.bobs:
        body_ref = world.create_body(bob.rest_position, bob.radius, bob_body_params(bob))
        constraint_ref = world.create_constraint(
            bob.anchor, body_ref, layout.string_length, constants.STRING_STIFFNESS
        )
        body_refs.append(body_ref)
        constraint_refs.append(constraint_ref)

    logger.info(f"Epoch {epoch}: materialized {len(body_refs)} bobs.")
    return WorldHandle(world, layout, epoch, body_refs, constraint_refs)


def destroy(handle: WorldHandle):
    handle.destroy()
