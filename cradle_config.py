# cradle_config.py

"""
Configuration Model

Holds the user-chosen cradle parameters and the typed commands that change
them. Every command produces a new CradleConfig; the previous one is never
modified, so a session can rebuild from (old_session, new_config) without
shared mutable state.

Invalid values are clamped to the nearest valid value and logged. Nothing in
this module raises on bad user input.
"""

import logging
import math
from collections import namedtuple

import constants

logger = logging.getLogger("cradle_sim")

# --- Configuration update channel ---
SetBobCount = namedtuple('SetBobCount', ['count'])
SetGap = namedtuple('SetGap', ['enabled'])
SetMassMode = namedtuple('SetMassMode', ['mode'])
SetMassOverride = namedtuple('SetMassOverride', ['index', 'value'])


def clamp_bob_count(value, fallback: int = 5) -> int:
    """Coerces a bob count to an int within [MIN_BOBS, MAX_BOBS]."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable bob count {value!r}; keeping {fallback}.")
        return fallback

    clamped = max(constants.MIN_BOBS, min(constants.MAX_BOBS, count))
    if clamped != count:
        logger.warning(f"Bob count {count} out of range; clamped to {clamped}.")
    return clamped


def clamp_mass_ratio(value, fallback: float = constants.BASE_MASS) -> float:
    """
    Coerces a mass override to the slider's domain: [MIN_MASS_RATIO,
    MAX_MASS_RATIO] snapped to MASS_RATIO_STEP.
    """
    try:
        ratio = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable mass override {value!r}; using {fallback}.")
        return fallback
    if math.isnan(ratio):
        logger.warning(f"Mass override is NaN; using {fallback}.")
        return fallback

    clamped = max(constants.MIN_MASS_RATIO, min(constants.MAX_MASS_RATIO, ratio))
    snapped = round(round(clamped / constants.MASS_RATIO_STEP) * constants.MASS_RATIO_STEP, 10)
    if abs(snapped - ratio) > 1e-9:
        logger.warning(f"Mass override {ratio} adjusted to {snapped}.")
    return snapped


def _coerce_mass_mode(value, fallback: str = constants.MASS_MODE_UNIFORM) -> str:
    mode = str(value).lower()
    if mode not in constants.MASS_MODES:
        logger.warning(f"Unknown mass mode {value!r}; keeping {fallback!r}.")
        return fallback
    return mode


class CradleConfig:
    """
    The user-tunable cradle parameters.

    Data Contract:
    - bob_count (int): In [MIN_BOBS, MAX_BOBS].
    - contact_gap (bool): Whether resting bobs are separated by a small gap.
    - mass_mode (str): MASS_MODE_UNIFORM or MASS_MODE_INDIVIDUAL.
    - mass_overrides (tuple of float): Per-bob mass ratios.
    - Invariants: bob_count <= len(mass_overrides) <= MAX_BOBS. The overrides are grown
      when the count grows and never shrunk, so per-bob tuning survives a
      count change.
    """
    def __init__(self, bob_count: int = 5, contact_gap: bool = False,
                 mass_mode: str = constants.MASS_MODE_UNIFORM, mass_overrides=None):
        self.bob_count = clamp_bob_count(bob_count)
        self.contact_gap = bool(contact_gap)
        self.mass_mode = _coerce_mass_mode(mass_mode)

        overrides = [clamp_mass_ratio(m) for m in list(mass_overrides or [])[:constants.MAX_BOBS]]
        # Grow, never shrink
        while len(overrides) < self.bob_count:
            overrides.append(constants.BASE_MASS)
        self.mass_overrides = tuple(overrides)

    @classmethod
    def from_dict(cls, data: dict) -> "CradleConfig":
        """Builds a configuration from the 'cradle' section of config.json."""
        return cls(
            bob_count=data.get('bob_count', 5),
            contact_gap=data.get('contact_gap', False),
            mass_mode=data.get('mass_mode', constants.MASS_MODE_UNIFORM),
            mass_overrides=data.get('mass_overrides'),
        )

    def to_dict(self) -> dict:
        return {
            'bob_count': self.bob_count,
            'contact_gap': self.contact_gap,
            'mass_mode': self.mass_mode,
            'mass_overrides': list(self.mass_overrides),
        }

    @property
    def is_uniform(self) -> bool:
        return self.mass_mode == constants.MASS_MODE_UNIFORM

    def mass_ratio(self, index: int) -> float:
        """Mass ratio of bob `index` under the current mass mode."""
        if self.is_uniform:
            return constants.BASE_MASS
        return self.mass_overrides[index]

    def replace(self, **changes) -> "CradleConfig":
        values = self.to_dict()
        values.update(changes)
        return CradleConfig(**values)

    def __eq__(self, other):
        if not isinstance(other, CradleConfig):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"CradleConfig(bob_count={self.bob_count}, contact_gap={self.contact_gap}, "
                f"mass_mode={self.mass_mode!r}, mass_overrides={list(self.mass_overrides)})")


def apply_command(config: CradleConfig, command) -> CradleConfig:
    """
    Applies one configuration command and returns the resulting configuration.

    Data Contract:
    - Inputs: config (CradleConfig), command (SetBobCount | SetGap | SetMassMode | SetMassOverride).
    - Outputs: A new CradleConfig. The input configuration is left untouched.
    - Side Effects: Logs warnings for clamped or ignored values.
    - Raises: TypeError for an object that is not a configuration command.
    """
    if isinstance(command, SetBobCount):
        return config.replace(bob_count=clamp_bob_count(command.count, fallback=config.bob_count))

    if isinstance(command, SetGap):
        return config.replace(contact_gap=bool(command.enabled))

    if isinstance(command, SetMassMode):
        return config.replace(mass_mode=_coerce_mass_mode(command.mode, fallback=config.mass_mode))

    if isinstance(command, SetMassOverride):
        try:
            index = int(command.index)
        except (TypeError, ValueError):
            logger.warning(f"Unparseable mass override index {command.index!r}; ignored.")
            return config
        if index < 0:
            logger.warning(f"Negative mass override index {index}; ignored.")
            return config
        if index >= constants.MAX_BOBS:
            logger.warning(f"Mass override index {index} beyond the largest cradle; ignored.")
            return config

        current = config.mass_overrides[index] if index < len(config.mass_overrides) else constants.BASE_MASS
        overrides = list(config.mass_overrides)
        while len(overrides) <= index:
            overrides.append(constants.BASE_MASS)
        overrides[index] = clamp_mass_ratio(command.value, fallback=current)
        return config.replace(mass_overrides=overrides)

    raise TypeError(f"Not a configuration command: {command!r}")
