# settings.py
"""
Resolved configuration for a particle field.

The JSON configuration only names the options it wants to change; this
module merges those over the defaults in `constants` and validates the
result into an immutable record that the Field and its particles share.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from constants import (
    DEFAULT_BRIGHTNESS, DEFAULT_COLOR, DEFAULT_EASE, DEFAULT_GAP,
    DEFAULT_INFLUENCE_RADIUS, DEFAULT_PARTICLE_SPACING, DEFAULT_SCALE,
    DEFAULT_VIBRATE,
)

# --- Data Contracts ---
#
# FieldConfig.from_dict(params: Optional[Dict[str, Any]]) -> FieldConfig:
#   - Inputs:
#     - params: the "field" section of config.json. Every key is optional.
#       - "gap": float in [0, 1)
#       - "psize" / "particle_spacing": int >= 1
#       - "color": [r, g, b] override, or null
#       - "radius" / "influence_radius": float >= 0
#       - "brightness": float >= 0
#       - "vibrate": {"chance": float in [0, 1], "velocity": float >= 0}, or null
#       - "ease": float >= 0
#       - "scale": float > 0
#       - "seed": int, or null for uncontrolled randomness
#   - Outputs: a frozen FieldConfig.
#   - Side Effects: logs unknown keys at WARNING.
#   - Invariants: raises ValueError (after a CRITICAL log) on any invalid value.

# JSON key -> dataclass field. "psize" and "radius" are the short names.
_KEY_ALIASES = {
    "gap": "gap",
    "psize": "particle_spacing",
    "particle_spacing": "particle_spacing",
    "color": "color",
    "radius": "influence_radius",
    "influence_radius": "influence_radius",
    "brightness": "brightness",
    "vibrate": "vibrate",
    "ease": "ease",
    "scale": "scale",
    "seed": "seed",
}


def _config_error(msg: str) -> ValueError:
    logging.critical(f"Configuration error: {msg}")
    return ValueError(f"Configuration error: {msg}")


def _as_number(name: str, value: Any) -> float:
    """Returns `value` as a float, rejecting bools, strings and None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _config_error(f"{name} must be a number, got {value!r}.")
    return float(value)


@dataclass(frozen=True)
class VibrateConfig:
    """Random jitter added to nearly-still particles."""
    chance: float
    velocity: float

    def __post_init__(self):
        chance = _as_number("vibrate.chance", self.chance)
        velocity = _as_number("vibrate.velocity", self.velocity)
        if not 0.0 <= chance <= 1.0:
            raise _config_error(f"vibrate.chance must be in [0, 1], got {chance}.")
        if velocity < 0:
            raise _config_error(f"vibrate.velocity must be >= 0, got {velocity}.")
        object.__setattr__(self, "chance", chance)
        object.__setattr__(self, "velocity", velocity)


@dataclass(frozen=True)
class FieldConfig:
    gap: float = DEFAULT_GAP
    particle_spacing: int = DEFAULT_PARTICLE_SPACING
    color: Optional[Tuple[int, int, int]] = DEFAULT_COLOR
    influence_radius: float = DEFAULT_INFLUENCE_RADIUS
    brightness: float = DEFAULT_BRIGHTNESS
    vibrate: Optional[VibrateConfig] = DEFAULT_VIBRATE
    ease: float = DEFAULT_EASE
    scale: float = DEFAULT_SCALE
    seed: Optional[int] = None

    def __post_init__(self):
        # Numbers are stored as floats so the step kernel always sees one type.
        for name in ("gap", "influence_radius", "brightness", "ease", "scale"):
            object.__setattr__(self, name, _as_number(name, getattr(self, name)))

        spacing = self.particle_spacing
        if isinstance(spacing, bool) or not isinstance(spacing, int) or spacing < 1:
            raise _config_error(f"particle_spacing must be an integer >= 1, got {spacing!r}.")
        if not 0.0 <= self.gap < 1.0:
            raise _config_error(f"gap must be in [0, 1), got {self.gap}.")
        if self.influence_radius < 0:
            raise _config_error(f"influence_radius must be >= 0, got {self.influence_radius}.")
        if self.brightness < 0:
            raise _config_error(f"brightness must be >= 0, got {self.brightness}.")
        if self.ease < 0:
            raise _config_error(f"ease must be >= 0, got {self.ease}.")
        if self.scale <= 0:
            raise _config_error(f"scale must be > 0, got {self.scale}.")
        if self.vibrate is not None and not isinstance(self.vibrate, VibrateConfig):
            raise _config_error(f"vibrate must be a VibrateConfig or None, got {self.vibrate!r}.")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise _config_error(f"seed must be an integer or null, got {self.seed!r}.")
        if self.color is not None:
            color = self.color
            if (
                not isinstance(color, tuple)
                or len(color) != 3
                or not all(isinstance(c, int) and not isinstance(c, bool) for c in color)
                or not all(0 <= c <= 255 for c in color)
            ):
                raise _config_error(f"color must be three integers in [0, 255], got {color!r}.")

    @property
    def block_size(self) -> int:
        """Edge length of a rendered particle block."""
        return math.floor(self.particle_spacing * (1 - self.gap))

    @classmethod
    def from_dict(cls, params: Optional[Dict[str, Any]] = None) -> "FieldConfig":
        kwargs: Dict[str, Any] = {}
        for key, value in (params or {}).items():
            name = _KEY_ALIASES.get(key)
            if name is None:
                logging.warning(f"Ignoring unknown field option '{key}'.")
                continue
            kwargs[name] = value

        color = kwargs.get("color")
        if isinstance(color, list):
            kwargs["color"] = tuple(color)

        vibrate = kwargs.get("vibrate")
        if isinstance(vibrate, dict):
            try:
                kwargs["vibrate"] = VibrateConfig(
                    chance=vibrate["chance"],
                    velocity=vibrate["velocity"],
                )
            except KeyError as e:
                raise _config_error(f"vibrate is missing the {e} key.") from e
        elif vibrate is not None:
            raise _config_error(
                f"vibrate must be an object with 'chance' and 'velocity', got {vibrate!r}."
            )

        config = cls(**kwargs)
        logging.debug(f"Resolved field configuration: {config}")
        return config
