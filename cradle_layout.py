# cradle_layout.py

"""
Cradle Layout Builder

Turns a CradleConfig into the ordered list of bobs (mass, radius, color,
anchor, rest position) that the physics binding materializes. Nothing here
touches the simulation world; the same inputs always give the same layout.

Spacing uses the base radius, not the per-bob radius, so in individual mass
mode heavy bobs overlap their neighbours at rest. The engine separates them.
"""

import math
import logging

import pygame

import constants
from cradle_config import CradleConfig

logger = logging.getLogger("cradle_sim")


class Bob:
    """
    Specification of a single pendulum bob.

    Data Contract:
    - index (int): Position in the row, 0-based, left to right.
    - mass_ratio (float): 1.0 in uniform mode, else the per-bob override.
    - target_mass (float): Authoritative engine mass, mass_ratio * MASS_SCALE.
    - radius (float): Base radius scaled by sqrt(mass_ratio) in individual mode
      (drawn area is proportional to mass).
    - anchor (tuple): Fixed pivot point (x, pivot_y).
    - rest_position (tuple): (x, pivot_y + string_length).
    - color (tuple): RGB triple.
    """
    __slots__ = ('index', 'mass_ratio', 'target_mass', 'radius', 'anchor', 'rest_position', 'color')

    def __init__(self, index: int, mass_ratio: float, radius: float, anchor: tuple,
                 rest_position: tuple, color: tuple):
        self.index = index
        self.mass_ratio = mass_ratio
        self.target_mass = mass_ratio * constants.MASS_SCALE
        self.radius = radius
        self.anchor = anchor
        self.rest_position = rest_position
        self.color = color

    def __repr__(self):
        return (f"Bob(index={self.index}, mass_ratio={self.mass_ratio}, radius={self.radius:.2f}, "
                f"rest_position=({self.rest_position[0]:.2f}, {self.rest_position[1]:.2f}))")


class Layout:
    """
    The ordered bobs of one cradle plus the shared geometry they hang from.

    Data Contract:
    - bobs (list of Bob): Ordered left to right.
    - pivot_y (float), string_length (float): Shared by every bob.
    - spacing (float): Centre-to-centre distance between resting neighbours.
    - viewport_width (float): The width the row was centred in.
    - beam_start, beam_end (tuple): Endpoints of the pivot beam.
    """
    def __init__(self, bobs: list, pivot_y: float, string_length: float, spacing: float,
                 viewport_width: float, beam_half_span: float):
        self.bobs = bobs
        self.pivot_y = pivot_y
        self.string_length = string_length
        self.spacing = spacing
        self.viewport_width = viewport_width
        center_x = viewport_width / 2
        self.beam_start = (center_x - beam_half_span, pivot_y)
        self.beam_end = (center_x + beam_half_span, pivot_y)

    def __len__(self):
        return len(self.bobs)

    def __iter__(self):
        return iter(self.bobs)

    def __getitem__(self, index):
        return self.bobs[index]


def bob_color(index: int, uniform: bool) -> tuple:
    """
    Deterministic display color of bob `index`.
    Uniform mode uses the accent color; individual mode rotates the hue by
    HUE_STEP degrees per index at fixed saturation and value.
    """
    if uniform:
        return constants.ACCENT_BLUE

    color = pygame.Color(0, 0, 0)
    hue = (index * constants.HUE_STEP) % 360
    color.hsva = (hue, constants.INDIVIDUAL_SATURATION, constants.INDIVIDUAL_VALUE, 100)
    return (color.r, color.g, color.b)


def bob_radius(mass_ratio: float, base_radius: float, uniform: bool) -> float:
    if uniform:
        return base_radius
    return base_radius * math.sqrt(mass_ratio)


def build_layout(config: CradleConfig, viewport_width: float,
                 base_radius: float = constants.BOB_RADIUS,
                 string_length: float = constants.STRING_LENGTH,
                 pivot_y: float = constants.PIVOT_Y,
                 gap_size: float = 0.5) -> Layout:
    """
    Computes the resting layout of the cradle.

    Data Contract:
    - Inputs:
        - config (CradleConfig): Bob count, contact gap flag and mass settings.
        - viewport_width (float): Width the row is centred in.
        - base_radius, string_length, pivot_y (float): Cradle geometry.
        - gap_size (float): Separation used when config.contact_gap is set.
          Must exceed the engine's contact tolerance to keep bobs from being
          solved as one cluster.
    - Outputs: Layout with exactly max(config.bob_count, MIN_BOBS) bobs.
    - Side Effects: None.
    - Invariants: x positions are symmetric about viewport_width / 2.
    """
    bob_count = max(constants.MIN_BOBS, config.bob_count)
    uniform = config.is_uniform

    # Touching bobs (gap 0) are solved as a single rigid cluster by the contact
    # solver, so momentum does not travel along the row one ball at a time.
    gap = gap_size if config.contact_gap else 0.0
    spacing = 2 * base_radius + gap

    # Centre the row in the viewport
    total_span = spacing * (bob_count - 1)
    start_x = viewport_width / 2 - total_span / 2
    rest_y = pivot_y + string_length

    bobs = []
    for i in range(bob_count):
        x = start_x + i * spacing
        mass_ratio = config.mass_ratio(i)
        bobs.append(Bob(
            index=i,
            mass_ratio=mass_ratio,
            radius=bob_radius(mass_ratio, base_radius, uniform),
            anchor=(x, pivot_y),
            rest_position=(x, rest_y),
            color=bob_color(i, uniform),
        ))

    beam_half_span = (2 * base_radius + constants.BEAM_PADDING) * bob_count / 2
    layout = Layout(bobs, pivot_y, string_length, spacing, viewport_width, beam_half_span)
    logger.debug(f"Layout built: {bob_count} bobs, spacing={spacing}, start_x={start_x:.2f}")
    return layout
