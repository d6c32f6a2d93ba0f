"""Drawing onto an off-screen surface."""

import pygame
import pytest

import constants
from cradle_config import CradleConfig
from cradle_layout import build_layout
from cradle_renderer import draw_cradle
from simulation_session import RenderItem

SIZE = (1200, 700)


@pytest.fixture
def surface():
    return pygame.Surface(SIZE)


def items_for(layout, dragged=None):
    return [RenderItem(bob.anchor, bob.rest_position, bob.radius, bob.color, bob.index == dragged)
            for bob in layout]


def color_at(surface, point):
    return tuple(surface.get_at((int(point[0]), int(point[1]))))[:3]


def below_centre(bob):
    x, y = bob.rest_position
    return x, y + bob.radius * 0.8


def test_background_is_cleared(surface):
    surface.fill((0, 0, 0))
    layout = build_layout(CradleConfig(bob_count=3), SIZE[0])
    draw_cradle(surface, items_for(layout), (layout.beam_start, layout.beam_end))
    assert color_at(surface, (2, 2)) == constants.BACKGROUND_COLOR
    assert color_at(surface, (SIZE[0] - 3, SIZE[1] - 3)) == constants.BACKGROUND_COLOR


def test_bobs_and_beam_are_drawn_in_their_colors(surface):
    config = CradleConfig(bob_count=4, mass_mode=constants.MASS_MODE_INDIVIDUAL,
                          mass_overrides=[1.0, 2.0, 0.5, 3.0], contact_gap=True)
    layout = build_layout(config, SIZE[0])
    draw_cradle(surface, items_for(layout), (layout.beam_start, layout.beam_end))

    assert color_at(surface, (SIZE[0] / 2, constants.PIVOT_Y)) == constants.BEAM_COLOR
    for bob in layout:
        assert color_at(surface, below_centre(bob)) == tuple(bob.color)[:3]


def test_dragged_bob_is_highlighted(surface):
    layout = build_layout(CradleConfig(bob_count=3, contact_gap=True), SIZE[0])
    draw_cradle(surface, items_for(layout, dragged=1), (layout.beam_start, layout.beam_end))

    assert color_at(surface, below_centre(layout[0])) == constants.ACCENT_BLUE
    assert color_at(surface, below_centre(layout[1])) == constants.DRAG_HIGHLIGHT
    assert color_at(surface, below_centre(layout[2])) == constants.ACCENT_BLUE


def test_string_is_drawn_between_anchor_and_bob(surface):
    layout = build_layout(CradleConfig(bob_count=2, contact_gap=True), SIZE[0])
    draw_cradle(surface, items_for(layout), (layout.beam_start, layout.beam_end))
    ax, ay = layout[0].anchor
    assert color_at(surface, (ax, ay + constants.STRING_LENGTH / 2)) == constants.STRING_COLOR
