"""Configuration model: commands, clamping and the grow-only override list."""

import math

import pytest

import constants
from cradle_config import (
    CradleConfig,
    SetBobCount,
    SetGap,
    SetMassMode,
    SetMassOverride,
    apply_command,
    clamp_mass_ratio,
)


def test_default_overrides_cover_every_bob():
    config = CradleConfig(bob_count=7)
    assert len(config.mass_overrides) == 7
    assert all(m == constants.BASE_MASS for m in config.mass_overrides)


@pytest.mark.parametrize("requested, expected", [(1, 2), (0, 2), (-4, 2), (2, 2), (20, 20), (99, 20)])
def test_bob_count_is_clamped(requested, expected):
    config = apply_command(CradleConfig(bob_count=5), SetBobCount(requested))
    assert config.bob_count == expected


def test_unparseable_bob_count_keeps_current():
    config = apply_command(CradleConfig(bob_count=6), SetBobCount("lots"))
    assert config.bob_count == 6


def test_shrinking_count_keeps_stored_overrides():
    config = CradleConfig(bob_count=5, mass_mode=constants.MASS_MODE_INDIVIDUAL,
                          mass_overrides=[0.5, 1.5, 2.0, 2.5, 3.0])
    smaller = apply_command(config, SetBobCount(3))

    assert smaller.bob_count == 3
    assert smaller.mass_overrides == (0.5, 1.5, 2.0, 2.5, 3.0)

    regrown = apply_command(smaller, SetBobCount(5))
    assert regrown.mass_overrides[3:] == (2.5, 3.0)


def test_growing_count_appends_base_mass():
    config = CradleConfig(bob_count=3, mass_overrides=[2.0, 2.0, 2.0])
    grown = apply_command(config, SetBobCount(6))
    assert grown.mass_overrides == (2.0, 2.0, 2.0, 1.0, 1.0, 1.0)


def test_commands_do_not_mutate_input():
    config = CradleConfig(bob_count=5)
    apply_command(config, SetGap(True))
    apply_command(config, SetMassOverride(0, 2.0))
    assert config.contact_gap is False
    assert config.mass_overrides[0] == 1.0


def test_gap_and_mode_commands():
    config = apply_command(CradleConfig(), SetGap(True))
    assert config.contact_gap is True

    config = apply_command(config, SetMassMode(constants.MASS_MODE_INDIVIDUAL))
    assert config.mass_mode == constants.MASS_MODE_INDIVIDUAL
    assert not config.is_uniform


def test_unknown_mass_mode_is_ignored():
    config = CradleConfig(mass_mode=constants.MASS_MODE_INDIVIDUAL)
    assert apply_command(config, SetMassMode("heavy")).mass_mode == constants.MASS_MODE_INDIVIDUAL


@pytest.mark.parametrize("value, expected", [
    (5.0, 3.0),
    (0.1, 0.5),
    (1.23, 1.2),
    (2.26, 2.3),
    ("1.7", 1.7),
])
def test_mass_override_is_clamped_and_snapped(value, expected):
    config = apply_command(CradleConfig(bob_count=5), SetMassOverride(1, value))
    assert config.mass_overrides[1] == pytest.approx(expected)


@pytest.mark.parametrize("value", [float('nan'), "heavy", None])
def test_malformed_mass_override_keeps_current(value):
    config = CradleConfig(bob_count=5, mass_overrides=[1.0, 2.5, 1.0, 1.0, 1.0])
    updated = apply_command(config, SetMassOverride(1, value))
    assert updated.mass_overrides[1] == 2.5


def test_mass_override_negative_index_is_ignored():
    config = CradleConfig(bob_count=5)
    assert apply_command(config, SetMassOverride(-1, 2.0)) == config


def test_mass_override_beyond_row_grows_list():
    config = apply_command(CradleConfig(bob_count=3), SetMassOverride(6, 2.0))
    assert len(config.mass_overrides) == 7
    assert config.mass_overrides[6] == 2.0
    assert config.bob_count == 3


def test_mass_ratio_depends_on_mode():
    overrides = [2.0, 3.0]
    uniform = CradleConfig(bob_count=2, mass_overrides=overrides)
    individual = uniform.replace(mass_mode=constants.MASS_MODE_INDIVIDUAL)
    assert [uniform.mass_ratio(i) for i in range(2)] == [1.0, 1.0]
    assert [individual.mass_ratio(i) for i in range(2)] == [2.0, 3.0]


def test_unknown_command_raises():
    with pytest.raises(TypeError):
        apply_command(CradleConfig(), ("SetBobCount", 4))


def test_from_dict_round_trips_config_file_section():
    section = {'bob_count': 4, 'contact_gap': True, 'mass_mode': 'individual',
               'mass_overrides': [1.0, 2.0, 0.5, 3.0]}
    config = CradleConfig.from_dict(section)
    assert config.to_dict() == section


def test_clamp_mass_ratio_rejects_infinity_to_bounds():
    assert clamp_mass_ratio(math.inf) == constants.MAX_MASS_RATIO
    assert clamp_mass_ratio(-math.inf) == constants.MIN_MASS_RATIO


@pytest.mark.parametrize("index", [constants.MAX_BOBS, 2_000_000])
def test_mass_override_beyond_largest_cradle_is_ignored(index):
    config = CradleConfig(bob_count=5)
    assert apply_command(config, SetMassOverride(index, 2.0)) == config


def test_last_possible_override_is_stored():
    config = apply_command(CradleConfig(bob_count=5), SetMassOverride(constants.MAX_BOBS - 1, 2.0))
    assert len(config.mass_overrides) == constants.MAX_BOBS
    assert config.mass_overrides[-1] == 2.0


def test_stored_overrides_are_capped_at_largest_cradle():
    config = CradleConfig(bob_count=5, mass_overrides=[1.5] * (constants.MAX_BOBS + 10))
    assert len(config.mass_overrides) == constants.MAX_BOBS
