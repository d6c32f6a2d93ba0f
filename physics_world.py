# physics_world.py

import math
import logging
from collections import namedtuple

import numba
import numpy as np

logger = logging.getLogger("cradle_sim")

# Physical parameters of a body. Bodies never rotate (infinite rotational inertia).
BodyParams = namedtuple('BodyParams', ['mass', 'restitution', 'friction', 'air_drag'], defaults=(1.0, 0.0, 0.0))

# --- JIT-Compiled Physics Functions ---
# These functions are compiled to machine code by Numba. They are kept outside
# the PhysicsWorld class and operate only on NumPy arrays and scalars, as
# required by Numba's nopython mode. An inverse mass of zero marks a body the
# engine must not move (kinematic).

@numba.jit(nopython=True)
def _integrate_jit(positions, velocities, inverse_masses, air_drags, gravity, h):
    """
    Semi-implicit Euler step for every dynamic body.
    v += g * h, then v is damped by air drag, then p += v * h.
    """
    for i in range(positions.shape[0]):
        if inverse_masses[i] == 0.0:
            continue
        velocities[i, 1] += gravity * h

        damping = 1.0 - air_drags[i] * h
        if damping < 0.0:
            damping = 0.0
        velocities[i, 0] *= damping
        velocities[i, 1] *= damping

        positions[i, 0] += velocities[i, 0] * h
        positions[i, 1] += velocities[i, 1] * h


@numba.jit(nopython=True)
def _project_constraints_jit(positions, velocities, inverse_masses, anchors, bodies, lengths, stiffness, fix_velocities):
    """
    Moves each constrained body back onto the circle of its string length
    around the anchor. When fix_velocities is set, the radial velocity
    component is removed as well, so the string neither stretches nor shrinks.
    """
    for c in range(bodies.shape[0]):
        b = bodies[c]
        if inverse_masses[b] == 0.0:
            continue
        dx = positions[b, 0] - anchors[c, 0]
        dy = positions[b, 1] - anchors[c, 1]
        dist = math.sqrt(dx * dx + dy * dy)
        if dist == 0.0:
            continue
        nx = dx / dist
        ny = dy / dist

        correction = (dist - lengths[c]) * stiffness[c]
        positions[b, 0] -= nx * correction
        positions[b, 1] -= ny * correction

        if fix_velocities:
            vn = velocities[b, 0] * nx + velocities[b, 1] * ny
            velocities[b, 0] -= vn * nx * stiffness[c]
            velocities[b, 1] -= vn * ny * stiffness[c]


@numba.jit(nopython=True)
def _find_contacts_jit(positions, radii, inverse_masses, tolerance, contact_pairs):
    """
    Broad- and narrow-phase in one O(n^2) pass; cradles hold at most a few
    dozen bodies. Two circles are in contact when their surfaces are at most
    `tolerance` apart. Pairs are written into contact_pairs in index order.
    Returns the number of contacts found.
    """
    count = 0
    n = positions.shape[0]
    for i in range(n):
        for j in range(i + 1, n):
            if inverse_masses[i] == 0.0 and inverse_masses[j] == 0.0:
                continue
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            reach = radii[i] + radii[j] + tolerance
            if dx * dx + dy * dy <= reach * reach:
                contact_pairs[count, 0] = i
                contact_pairs[count, 1] = j
                count += 1
    return count


@numba.jit(nopython=True)
def _solve_velocities_jit(positions, velocities, inverse_masses, restitutions, frictions,
                          contact_pairs, contact_count, restitution_threshold,
                          anchors, bodies, stiffness, iterations):
    """
    Sequential-impulse (projected Gauss-Seidel) solve of all contacts and
    strings at once.

    Restitution targets are taken from the relative normal velocity before
    the solve. Contacts that are merely touching (not approaching) get a
    target of zero, so a touching chain receiving one impact is solved as a
    single cluster, exactly like a rigid block.
    """
    normals = np.zeros((contact_count, 2))
    targets = np.zeros(contact_count)
    mus = np.zeros(contact_count)
    normal_impulses = np.zeros(contact_count)
    tangent_impulses = np.zeros(contact_count)

    for c in range(contact_count):
        i = contact_pairs[c, 0]
        j = contact_pairs[c, 1]
        dx = positions[j, 0] - positions[i, 0]
        dy = positions[j, 1] - positions[i, 1]
        dist = math.sqrt(dx * dx + dy * dy)
        if dist > 0.0:
            nx = dx / dist
            ny = dy / dist
        else:
            nx = 1.0
            ny = 0.0
        normals[c, 0] = nx
        normals[c, 1] = ny

        vn = (velocities[j, 0] - velocities[i, 0]) * nx + (velocities[j, 1] - velocities[i, 1]) * ny
        if vn < -restitution_threshold:
            targets[c] = -max(restitutions[i], restitutions[j]) * vn
        mus[c] = min(frictions[i], frictions[j])

    for _ in range(iterations):
        for c in range(contact_count):
            i = contact_pairs[c, 0]
            j = contact_pairs[c, 1]
            k = inverse_masses[i] + inverse_masses[j]
            if k == 0.0:
                continue
            nx = normals[c, 0]
            ny = normals[c, 1]

            # 1. Normal impulse, accumulated and clamped to push only
            vn = (velocities[j, 0] - velocities[i, 0]) * nx + (velocities[j, 1] - velocities[i, 1]) * ny
            new_impulse = max(normal_impulses[c] + (targets[c] - vn) / k, 0.0)
            delta = new_impulse - normal_impulses[c]
            normal_impulses[c] = new_impulse
            velocities[i, 0] -= delta * nx * inverse_masses[i]
            velocities[i, 1] -= delta * ny * inverse_masses[i]
            velocities[j, 0] += delta * nx * inverse_masses[j]
            velocities[j, 1] += delta * ny * inverse_masses[j]

            # 2. Coulomb friction along the tangent
            if mus[c] > 0.0:
                tx = -ny
                ty = nx
                vt = (velocities[j, 0] - velocities[i, 0]) * tx + (velocities[j, 1] - velocities[i, 1]) * ty
                limit = mus[c] * normal_impulses[c]
                new_tangent = min(max(tangent_impulses[c] - vt / k, -limit), limit)
                delta = new_tangent - tangent_impulses[c]
                tangent_impulses[c] = new_tangent
                velocities[i, 0] -= delta * tx * inverse_masses[i]
                velocities[i, 1] -= delta * ty * inverse_masses[i]
                velocities[j, 0] += delta * tx * inverse_masses[j]
                velocities[j, 1] += delta * ty * inverse_masses[j]

        # 3. Strings: no velocity along the string direction
        for c in range(bodies.shape[0]):
            b = bodies[c]
            if inverse_masses[b] == 0.0:
                continue
            dx = positions[b, 0] - anchors[c, 0]
            dy = positions[b, 1] - anchors[c, 1]
            dist = math.sqrt(dx * dx + dy * dy)
            if dist == 0.0:
                continue
            nx = dx / dist
            ny = dy / dist
            vn = velocities[b, 0] * nx + velocities[b, 1] * ny
            velocities[b, 0] -= vn * nx * stiffness[c]
            velocities[b, 1] -= vn * ny * stiffness[c]


@numba.jit(nopython=True)
def _correct_positions_jit(positions, inverse_masses, radii, contact_pairs, contact_count,
                           anchors, bodies, lengths, stiffness, iterations):
    """
    Resolves overlap of the detected contacts, mass-weighted, interleaved with
    string projection. Velocities are not touched. Only pairs found by the
    contact pass are corrected, so a bob pushed into a neighbour that was not
    touching at detection time is handled on the next substep, as a fresh
    collision.
    """
    for _ in range(iterations):
        for c in range(contact_count):
            i = contact_pairs[c, 0]
            j = contact_pairs[c, 1]
            k = inverse_masses[i] + inverse_masses[j]
            if k == 0.0:
                continue
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            dist = math.sqrt(dx * dx + dy * dy)
            overlap = radii[i] + radii[j] - dist
            if overlap <= 0.0:
                continue
            if dist > 0.0:
                nx = dx / dist
                ny = dy / dist
            else:
                nx = 1.0
                ny = 0.0
            share_i = overlap * inverse_masses[i] / k
            share_j = overlap * inverse_masses[j] / k
            positions[i, 0] -= nx * share_i
            positions[i, 1] -= ny * share_i
            positions[j, 0] += nx * share_j
            positions[j, 1] += ny * share_j

        for c in range(bodies.shape[0]):
            b = bodies[c]
            if inverse_masses[b] == 0.0:
                continue
            dx = positions[b, 0] - anchors[c, 0]
            dy = positions[b, 1] - anchors[c, 1]
            dist = math.sqrt(dx * dx + dy * dy)
            if dist == 0.0:
                continue
            correction = (dist - lengths[c]) * stiffness[c]
            positions[b, 0] -= dx / dist * correction
            positions[b, 1] -= dy / dist * correction


class PhysicsWorld:
    """
    A small 2D rigid-circle engine with distance constraints, storing body
    state as NumPy arrays (Structure of Arrays).

    Screen coordinates are used throughout: +y points down, so gravity is
    positive.

    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file. Missing
          keys fall back to defaults.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: Owns every body and constraint of the simulation.
    - Invariants: All per-body arrays have length num_bodies and all
      per-constraint arrays have length num_constraints. Every constraint
      references a live body.
    """
    def __init__(self, config: dict = None):
        config = config or {}
        self.timestep = config.get('timestep', 1.0 / 60.0)
        self.gravity = config.get('gravity', 980.0)
        self.substeps = max(1, int(config.get('substeps', 8)))
        self.solver_iterations = max(1, int(config.get('solver_iterations', 20)))
        self.position_iterations = max(1, int(config.get('position_iterations', 4)))
        self.contact_tolerance = config.get('contact_tolerance', 1e-3)
        self.restitution_threshold = config.get('restitution_threshold', 1.0)

        self.time = 0.0
        self.tick = 0
        self._next_id = 1

        # --- Body state (Structure of Arrays) ---
        self.body_ids = np.zeros(0, dtype=np.int64)
        self.positions = np.zeros((0, 2), dtype=float)
        self.velocities = np.zeros((0, 2), dtype=float)
        self.masses = np.zeros(0, dtype=float)
        self.inverse_masses = np.zeros(0, dtype=float)
        self.radii = np.zeros(0, dtype=float)
        self.restitutions = np.zeros(0, dtype=float)
        self.frictions = np.zeros(0, dtype=float)
        self.air_drags = np.zeros(0, dtype=float)
        self.kinematic = np.zeros(0, dtype=bool)
        self.persistent = np.zeros(0, dtype=bool)
        self._body_index = {}

        # --- Constraint state ---
        self.constraint_ids = np.zeros(0, dtype=np.int64)
        self.constraint_body_ids = np.zeros(0, dtype=np.int64)
        self.constraint_bodies = np.zeros(0, dtype=np.int64)
        self.constraint_anchors = np.zeros((0, 2), dtype=float)
        self.constraint_lengths = np.zeros(0, dtype=float)
        self.constraint_stiffness = np.zeros(0, dtype=float)
        self.constraint_persistent = np.zeros(0, dtype=bool)

        # Scratch buffer for the contact pass, grown on demand
        self._contact_pairs = np.zeros((1, 2), dtype=np.int64)

        logger.info(
            f"PhysicsWorld created: dt={self.timestep:.5f}s, gravity={self.gravity}, "
            f"substeps={self.substeps}, solver_iterations={self.solver_iterations}, "
            f"contact_tolerance={self.contact_tolerance}"
        )

    @property
    def num_bodies(self) -> int:
        return self.body_ids.shape[0]

    @property
    def num_constraints(self) -> int:
        return self.constraint_ids.shape[0]

    # --- Bodies ---

    def create_body(self, position, radius: float, params: BodyParams, persistent: bool = False) -> int:
        """
        Adds a dynamic circular body and returns its reference.

        - Inputs:
            - position (sequence of 2 floats): Centre of the body.
            - radius (float): Must be positive.
            - params (BodyParams): mass (> 0), restitution, friction, air drag.
            - persistent (bool): Survives clear(keep_persistent=True).
        - Raises: ValueError for a non-positive radius or mass.
        """
        if radius <= 0:
            raise ValueError(f"Body radius must be positive, got {radius}")
        if params.mass <= 0:
            raise ValueError(f"Body mass must be positive, got {params.mass}")

        body_id = self._next_id
        self._next_id += 1

        self.body_ids = np.append(self.body_ids, body_id)
        self.positions = np.vstack([self.positions, np.asarray(position, dtype=float).reshape(1, 2)])
        self.velocities = np.vstack([self.velocities, np.zeros((1, 2))])
        self.masses = np.append(self.masses, float(params.mass))
        self.inverse_masses = np.append(self.inverse_masses, 1.0 / params.mass)
        self.radii = np.append(self.radii, float(radius))
        self.restitutions = np.append(self.restitutions, float(params.restitution))
        self.frictions = np.append(self.frictions, float(params.friction))
        self.air_drags = np.append(self.air_drags, float(params.air_drag))
        self.kinematic = np.append(self.kinematic, False)
        self.persistent = np.append(self.persistent, bool(persistent))
        self._body_index[body_id] = self.num_bodies - 1

        logger.debug(f"Body {body_id} created at {self.positions[-1]} (r={radius}, m={params.mass}).")
        return body_id

    def has_body(self, body_ref: int) -> bool:
        return body_ref in self._body_index

    def _index(self, body_ref: int) -> int:
        try:
            return self._body_index[body_ref]
        except KeyError:
            raise KeyError(f"Unknown body reference {body_ref}") from None

    def remove_body(self, body_ref: int):
        """Removes a body together with every constraint attached to it."""
        index = self._index(body_ref)
        attached = self.constraint_body_ids == body_ref
        if attached.any():
            logger.debug(f"Removing {int(attached.sum())} constraint(s) attached to body {body_ref}.")
            self._keep_constraints(~attached)
        mask = np.ones(self.num_bodies, dtype=bool)
        mask[index] = False
        self._keep_bodies(mask)

    def _keep_bodies(self, survival_mask: np.ndarray):
        self.body_ids = self.body_ids[survival_mask]
        self.positions = self.positions[survival_mask]
        self.velocities = self.velocities[survival_mask]
        self.masses = self.masses[survival_mask]
        self.inverse_masses = self.inverse_masses[survival_mask]
        self.radii = self.radii[survival_mask]
        self.restitutions = self.restitutions[survival_mask]
        self.frictions = self.frictions[survival_mask]
        self.air_drags = self.air_drags[survival_mask]
        self.kinematic = self.kinematic[survival_mask]
        self.persistent = self.persistent[survival_mask]
        self._body_index = {int(body_id): i for i, body_id in enumerate(self.body_ids)}
        self._sync_constraint_bodies()

    def set_kinematic(self, body_ref: int, kinematic: bool):
        """
        A kinematic body is not integrated and acts as infinitely heavy in
        contacts. Entering kinematic mode clears the velocity.
        """
        index = self._index(body_ref)
        self.kinematic[index] = bool(kinematic)
        if kinematic:
            self.velocities[index] = 0.0

    def is_kinematic(self, body_ref: int) -> bool:
        return bool(self.kinematic[self._index(body_ref)])

    def set_position(self, body_ref: int, position):
        self.positions[self._index(body_ref)] = np.asarray(position, dtype=float)

    def set_velocity(self, body_ref: int, velocity):
        self.velocities[self._index(body_ref)] = np.asarray(velocity, dtype=float)

    def position_of(self, body_ref: int) -> tuple:
        x, y = self.positions[self._index(body_ref)]
        return (float(x), float(y))

    def velocity_of(self, body_ref: int) -> tuple:
        vx, vy = self.velocities[self._index(body_ref)]
        return (float(vx), float(vy))

    def radius_of(self, body_ref: int) -> float:
        return float(self.radii[self._index(body_ref)])

    def mass_of(self, body_ref: int) -> float:
        return float(self.masses[self._index(body_ref)])

    # --- Constraints ---

    def create_constraint(self, anchor, body_ref: int, length: float, stiffness: float = 1.0,
                          persistent: bool = False) -> int:
        """
        Links a body's centre to a fixed anchor point at a fixed distance.
        Stiffness 1.0 is an inextensible string; lower values let it give.
        """
        self._index(body_ref)
        if length < 0:
            raise ValueError(f"Constraint length must not be negative, got {length}")
        if not 0.0 < stiffness <= 1.0:
            raise ValueError(f"Constraint stiffness must be in (0, 1], got {stiffness}")

        constraint_id = self._next_id
        self._next_id += 1

        self.constraint_ids = np.append(self.constraint_ids, constraint_id)
        self.constraint_body_ids = np.append(self.constraint_body_ids, body_ref)
        self.constraint_anchors = np.vstack([self.constraint_anchors, np.asarray(anchor, dtype=float).reshape(1, 2)])
        self.constraint_lengths = np.append(self.constraint_lengths, float(length))
        self.constraint_stiffness = np.append(self.constraint_stiffness, float(stiffness))
        self.constraint_persistent = np.append(self.constraint_persistent, bool(persistent))
        self._sync_constraint_bodies()
        return constraint_id

    def has_constraint(self, constraint_ref: int) -> bool:
        return bool((self.constraint_ids == constraint_ref).any())

    def remove_constraint(self, constraint_ref: int):
        matches = self.constraint_ids == constraint_ref
        if not matches.any():
            raise KeyError(f"Unknown constraint reference {constraint_ref}")
        self._keep_constraints(~matches)

    def constraint_anchor(self, constraint_ref: int) -> tuple:
        matches = np.nonzero(self.constraint_ids == constraint_ref)[0]
        if matches.size == 0:
            raise KeyError(f"Unknown constraint reference {constraint_ref}")
        x, y = self.constraint_anchors[matches[0]]
        return (float(x), float(y))

    def constraint_length(self, constraint_ref: int) -> float:
        matches = np.nonzero(self.constraint_ids == constraint_ref)[0]
        if matches.size == 0:
            raise KeyError(f"Unknown constraint reference {constraint_ref}")
        return float(self.constraint_lengths[matches[0]])

    def _keep_constraints(self, survival_mask: np.ndarray):
        self.constraint_ids = self.constraint_ids[survival_mask]
        self.constraint_body_ids = self.constraint_body_ids[survival_mask]
        self.constraint_anchors = self.constraint_anchors[survival_mask]
        self.constraint_lengths = self.constraint_lengths[survival_mask]
        self.constraint_stiffness = self.constraint_stiffness[survival_mask]
        self.constraint_persistent = self.constraint_persistent[survival_mask]
        self._sync_constraint_bodies()

    def _sync_constraint_bodies(self):
        """Resolves constraint body references to current array indices."""
        self.constraint_bodies = np.array(
            [self._body_index[int(body_id)] for body_id in self.constraint_body_ids],
            dtype=np.int64
        )

    # --- World ---

    def clear(self, keep_persistent: bool = True):
        """
        Removes bodies and constraints. With keep_persistent, objects created
        with persistent=True stay, together with the constraints they need.
        """
        old_bodies, old_constraints = self.num_bodies, self.num_constraints
        if keep_persistent:
            keep_bodies = self.persistent.copy()
            keep_constraints = self.constraint_persistent & np.isin(self.constraint_body_ids, self.body_ids[keep_bodies])
        else:
            keep_bodies = np.zeros(self.num_bodies, dtype=bool)
            keep_constraints = np.zeros(self.num_constraints, dtype=bool)

        self._keep_constraints(keep_constraints)
        self._keep_bodies(keep_bodies)
        logger.info(
            f"World cleared: removed {old_bodies - self.num_bodies} bodies and "
            f"{old_constraints - self.num_constraints} constraints."
        )

    def effective_inverse_masses(self) -> np.ndarray:
        """Inverse masses with kinematic bodies treated as immovable."""
        return np.where(self.kinematic, 0.0, self.inverse_masses)

    def step(self):
        """
        Advances the world by one timestep, split into `substeps` substeps.

        Per substep:
        1. Integrate gravity and air drag, then positions (dynamic bodies only).
        2. Project strings back to their length and strip radial velocity.
        3. Detect contacts.
        4. Solve contact and string velocities together.
        5. Push apart overlapping contacts and re-project strings.
        """
        if self.num_bodies == 0:
            self.time += self.timestep
            self.tick += 1
            return

        h = self.timestep / self.substeps
        inverse_masses = self.effective_inverse_masses()

        max_pairs = max(1, self.num_bodies * (self.num_bodies - 1) // 2)
        if self._contact_pairs.shape[0] < max_pairs:
            self._contact_pairs = np.zeros((max_pairs, 2), dtype=np.int64)

        for _ in range(self.substeps):
            _integrate_jit(self.positions, self.velocities, inverse_masses, self.air_drags, self.gravity, h)

            _project_constraints_jit(
                self.positions, self.velocities, inverse_masses,
                self.constraint_anchors, self.constraint_bodies,
                self.constraint_lengths, self.constraint_stiffness, True
            )

            contact_count = _find_contacts_jit(
                self.positions, self.radii, inverse_masses,
                self.contact_tolerance, self._contact_pairs
            )

            _solve_velocities_jit(
                self.positions, self.velocities, inverse_masses,
                self.restitutions, self.frictions,
                self._contact_pairs, contact_count, self.restitution_threshold,
                self.constraint_anchors, self.constraint_bodies, self.constraint_stiffness,
                self.solver_iterations
            )

            _correct_positions_jit(
                self.positions, inverse_masses, self.radii,
                self._contact_pairs, contact_count,
                self.constraint_anchors, self.constraint_bodies,
                self.constraint_lengths, self.constraint_stiffness,
                self.position_iterations
            )

        self.time += self.timestep
        self.tick += 1

    # --- Diagnostics ---

    def get_total_kinetic_energy(self) -> float:
        """
        KE = sum(0.5 * m * v^2) over dynamic bodies.
        """
        dynamic = ~self.kinematic
        vel_sq = np.sum(self.velocities[dynamic] ** 2, axis=1)
        return float(np.sum(0.5 * self.masses[dynamic] * vel_sq))

    def get_total_potential_energy(self) -> float:
        """
        Gravitational potential energy relative to y = 0. With +y pointing
        down, PE = -m * g * y.
        """
        dynamic = ~self.kinematic
        return float(np.sum(-self.masses[dynamic] * self.gravity * self.positions[dynamic, 1]))

    def get_total_momentum(self) -> np.ndarray:
        dynamic = ~self.kinematic
        return np.sum(self.masses[dynamic][:, np.newaxis] * self.velocities[dynamic], axis=0)
