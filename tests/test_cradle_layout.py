"""Layout builder: centring, spacing, radius and color rules."""

import math

import pytest

import constants
from cradle_config import CradleConfig
from cradle_layout import bob_color, build_layout

VIEWPORT_WIDTH = 1200
GAP = 0.5


@pytest.mark.parametrize("bob_count", range(constants.MIN_BOBS, constants.MAX_BOBS + 1))
@pytest.mark.parametrize("contact_gap", [False, True])
def test_row_is_centred(bob_count, contact_gap):
    layout = build_layout(CradleConfig(bob_count=bob_count, contact_gap=contact_gap), VIEWPORT_WIDTH, gap_size=GAP)

    xs = [bob.rest_position[0] for bob in layout]
    assert len(xs) == bob_count
    center = VIEWPORT_WIDTH / 2
    for left, right in zip(xs, reversed(xs)):
        assert (left + right) / 2 == pytest.approx(center, abs=1e-9)


def test_spacing_without_gap_is_one_diameter():
    layout = build_layout(CradleConfig(bob_count=5, contact_gap=False), VIEWPORT_WIDTH, gap_size=GAP)
    xs = [bob.rest_position[0] for bob in layout]
    for a, b in zip(xs, xs[1:]):
        assert b - a == 2 * constants.BOB_RADIUS


def test_spacing_with_gap_adds_gap_constant():
    layout = build_layout(CradleConfig(bob_count=5, contact_gap=True), VIEWPORT_WIDTH, gap_size=GAP)
    xs = [bob.rest_position[0] for bob in layout]
    for a, b in zip(xs, xs[1:]):
        assert b - a == pytest.approx(2 * constants.BOB_RADIUS + GAP)
    assert layout.spacing > 2 * constants.BOB_RADIUS


def test_bobs_hang_one_string_length_below_their_anchor():
    layout = build_layout(CradleConfig(bob_count=4), VIEWPORT_WIDTH)
    for bob in layout:
        ax, ay = bob.anchor
        x, y = bob.rest_position
        assert ax == x
        assert ay == constants.PIVOT_Y
        assert y - ay == constants.STRING_LENGTH


def test_uniform_mode_shares_radius_color_and_mass():
    config = CradleConfig(bob_count=6, mass_overrides=[0.5, 3.0, 2.0, 1.0, 1.5, 2.5])
    layout = build_layout(config, VIEWPORT_WIDTH)

    assert {bob.radius for bob in layout} == {constants.BOB_RADIUS}
    assert {bob.color for bob in layout} == {constants.ACCENT_BLUE}
    assert {bob.target_mass for bob in layout} == {constants.BASE_MASS * constants.MASS_SCALE}


def test_individual_mode_radius_grows_with_mass():
    overrides = [0.5, 3.0, 1.0, 2.0, 1.5]
    config = CradleConfig(bob_count=5, mass_mode=constants.MASS_MODE_INDIVIDUAL, mass_overrides=overrides)
    layout = build_layout(config, VIEWPORT_WIDTH)

    by_mass = sorted(layout, key=lambda bob: bob.mass_ratio)
    radii = [bob.radius for bob in by_mass]
    assert radii == sorted(radii)
    assert len(set(radii)) == len(radii)

    for bob, ratio in zip(layout, overrides):
        assert bob.mass_ratio == ratio
        assert bob.target_mass == pytest.approx(ratio * constants.MASS_SCALE)
        assert bob.radius == pytest.approx(constants.BOB_RADIUS * math.sqrt(ratio))


def test_individual_mode_ignores_surplus_overrides():
    config = CradleConfig(bob_count=3, mass_mode=constants.MASS_MODE_INDIVIDUAL,
                          mass_overrides=[1.0, 1.0, 1.0, 3.0, 3.0])
    layout = build_layout(config, VIEWPORT_WIDTH)
    assert len(layout) == 3
    assert [bob.mass_ratio for bob in layout] == [1.0, 1.0, 1.0]


def test_individual_colors_rotate_hue_per_index():
    colors = [bob_color(i, uniform=False) for i in range(9)]
    assert len(set(colors)) == 9
    # 9 * 40 degrees wraps around to the first hue
    assert bob_color(9, uniform=False) == colors[0]
    assert bob_color(3, uniform=False) == bob_color(3, uniform=False)
    assert all(0 <= channel <= 255 for color in colors for channel in color)


def test_first_individual_color_is_muted_red():
    r, g, b = bob_color(0, uniform=False)
    # hue 0, saturation 60 %, value 90 %
    assert r == pytest.approx(230, abs=1)
    assert g == pytest.approx(92, abs=1)
    assert b == pytest.approx(92, abs=1)


def test_layout_is_deterministic():
    config = CradleConfig(bob_count=5, mass_mode=constants.MASS_MODE_INDIVIDUAL,
                          mass_overrides=[1.2, 0.8, 2.4, 1.0, 3.0])
    first = build_layout(config, VIEWPORT_WIDTH)
    second = build_layout(config, VIEWPORT_WIDTH)
    assert [(b.rest_position, b.radius, b.color) for b in first] == \
           [(b.rest_position, b.radius, b.color) for b in second]


def test_bob_count_below_minimum_is_clamped():
    config = CradleConfig(bob_count=2)
    config.bob_count = 1
    assert len(build_layout(config, VIEWPORT_WIDTH)) == constants.MIN_BOBS


def test_beam_is_centred_and_wider_than_row():
    layout = build_layout(CradleConfig(bob_count=5), VIEWPORT_WIDTH)
    (x0, y0), (x1, y1) = layout.beam_start, layout.beam_end
    assert y0 == y1 == constants.PIVOT_Y
    assert (x0 + x1) / 2 == pytest.approx(VIEWPORT_WIDTH / 2)
    assert x1 - x0 == pytest.approx((2 * constants.BOB_RADIUS + constants.BEAM_PADDING) * 5)
    assert x0 < layout[0].anchor[0] and layout[-1].anchor[0] < x1
