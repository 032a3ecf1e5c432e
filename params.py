# params.py
"""
Parameter schema for the simulation.

A World is built from two parameter groups: SimParams, which shape the
simulation itself, and DisplayParams, which define the random color
palette. Config is the versioned record that bundles both with the
frame limit so a run can be saved, shared and restored.
"""
import base64
import hashlib
import json
import logging
import re
import zlib
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional

from constants import (
    CONFIG_VERSION, DEFAULT_SEED, DEFAULT_PARTICLE_COUNT, DEFAULT_ACC_LIMIT,
    DEFAULT_PARTICLE_COLOR_HUE_MID, DEFAULT_PARTICLE_COLOR_HUE_SPREAD,
    DEFAULT_PARTICLE_COLOR_SATURATION_MID, DEFAULT_PARTICLE_COLOR_SATURATION_SPREAD,
    DEFAULT_PARTICLE_COLOR_VALUE, DEFAULT_PARTICLE_COLOR_ALPHA, DEFAULT_FRAME_LIMIT,
    MIN_PARTICLE_COUNT, MAX_PARTICLE_COUNT, MIN_ACC_LIMIT, MAX_ACC_LIMIT,
    MIN_PARTICLE_COLOR_HUE_MID, MAX_PARTICLE_COLOR_HUE_MID,
    MIN_PARTICLE_COLOR_HUE_SPREAD, MAX_PARTICLE_COLOR_HUE_SPREAD,
    MIN_PARTICLE_COLOR_SATURATION_MID, MAX_PARTICLE_COLOR_SATURATION_MID,
    MIN_PARTICLE_COLOR_SATURATION_SPREAD, MAX_PARTICLE_COLOR_SATURATION_SPREAD,
    MIN_PARTICLE_COLOR_VALUE, MAX_PARTICLE_COLOR_VALUE,
    MIN_PARTICLE_COLOR_ALPHA, MAX_PARTICLE_COLOR_ALPHA, MIN_FRAME_LIMIT,
)

# --- Data Contracts ---
#
# class Seed:
#   - Seed.from_hash(value: int) -> Seed: a literal 64-bit seed. Its text
#     form is the canonical "0x" + 16 hex digits.
#   - Seed.from_str(text: str) -> Seed: canonical hex text parses to the
#     literal value; any other text is hashed (MD5, first 8 digest bytes
#     read little-endian).
#   - Invariants: `value` is resolved once and always fits in 64 bits.
#
# class SimParams:
#   - check(self) -> None: raises ValidationError if particle_count < 3.
#
# encode_config_str(config: Config) -> str
# decode_config_str(text: str) -> Optional[Config]:
#   - Outputs: None for malformed text or an unknown config version.

_CANONICAL_SEED = re.compile(r"0x[0-9a-fA-F]{16}")


class ValidationError(ValueError):
    """Raised when a World is requested with invalid parameters."""


@dataclass(frozen=True)
class Seed:
    """A user-facing seed string and the 64-bit value derived from it."""
    text: str
    value: int

    @classmethod
    def from_hash(cls, value: int) -> 'Seed':
        value &= 0xffffffffffffffff
        return cls(f"0x{value:016x}", value)

    @classmethod
    def from_str(cls, text: str) -> 'Seed':
        if _CANONICAL_SEED.fullmatch(text):
            return cls(text, int(text[2:], 16))
        digest = hashlib.md5(text.encode('utf-8')).digest()
        return cls(text, int.from_bytes(digest[:8], 'little'))

    def as_str(self) -> str:
        return self.text


@dataclass
class SimParams:
    seed: Seed = field(default_factory=lambda: Seed.from_hash(DEFAULT_SEED))
    particle_count: int = DEFAULT_PARTICLE_COUNT
    acc_limit: int = DEFAULT_ACC_LIMIT

    def check(self) -> None:
        if self.particle_count < MIN_PARTICLE_COUNT:
            msg = (
                f"Configuration error: particle_count is {self.particle_count}, "
                f"but at least {MIN_PARTICLE_COUNT} particles are needed so every "
                f"particle can have two distinct partners."
            )
            logging.critical(msg)
            raise ValidationError(msg)

    def file_name(self, ext: str) -> str:
        """Export file name that identifies the run that produced it."""
        return f"followers-{self.seed.value:016x}-{self.particle_count}-{self.acc_limit}.{ext}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'seed': self.seed.as_str(),
            'particle_count': self.particle_count,
            'acc_limit': self.acc_limit,
        }

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> 'SimParams':
        seed = params.get('seed', DEFAULT_SEED)
        # Integer seeds in hand-written config files are taken literally.
        seed = Seed.from_hash(seed) if isinstance(seed, int) else Seed.from_str(str(seed))
        return cls(
            seed=seed,
            particle_count=_clamp(
                int(params.get('particle_count', DEFAULT_PARTICLE_COUNT)),
                MIN_PARTICLE_COUNT, MAX_PARTICLE_COUNT
            ),
            acc_limit=_clamp(
                int(params.get('acc_limit', DEFAULT_ACC_LIMIT)),
                MIN_ACC_LIMIT, MAX_ACC_LIMIT
            ),
        )


@dataclass
class DisplayParams:
    particle_color_hue_mid: float = DEFAULT_PARTICLE_COLOR_HUE_MID
    particle_color_hue_spread: float = DEFAULT_PARTICLE_COLOR_HUE_SPREAD
    particle_color_saturation_mid: float = DEFAULT_PARTICLE_COLOR_SATURATION_MID
    particle_color_saturation_spread: float = DEFAULT_PARTICLE_COLOR_SATURATION_SPREAD
    particle_color_value: float = DEFAULT_PARTICLE_COLOR_VALUE
    particle_color_alpha: float = DEFAULT_PARTICLE_COLOR_ALPHA

    def hue_range(self):
        half = self.particle_color_hue_spread / 2.0
        return self.particle_color_hue_mid - half, self.particle_color_hue_mid + half

    def saturation_range(self):
        half = self.particle_color_saturation_spread / 2.0
        return self.particle_color_saturation_mid - half, self.particle_color_saturation_mid + half

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> 'DisplayParams':
        limits = {
            'particle_color_hue_mid': (MIN_PARTICLE_COLOR_HUE_MID, MAX_PARTICLE_COLOR_HUE_MID),
            'particle_color_hue_spread': (MIN_PARTICLE_COLOR_HUE_SPREAD, MAX_PARTICLE_COLOR_HUE_SPREAD),
            'particle_color_saturation_mid': (MIN_PARTICLE_COLOR_SATURATION_MID, MAX_PARTICLE_COLOR_SATURATION_MID),
            'particle_color_saturation_spread': (MIN_PARTICLE_COLOR_SATURATION_SPREAD, MAX_PARTICLE_COLOR_SATURATION_SPREAD),
            'particle_color_value': (MIN_PARTICLE_COLOR_VALUE, MAX_PARTICLE_COLOR_VALUE),
            'particle_color_alpha': (MIN_PARTICLE_COLOR_ALPHA, MAX_PARTICLE_COLOR_ALPHA),
        }
        defaults = cls()
        values = {}
        for key, (low, high) in limits.items():
            values[key] = _clamp(float(params.get(key, getattr(defaults, key))), low, high)
        return cls(**values)


@dataclass
class Config:
    """The versioned record persisted for a run."""
    sim_params: SimParams = field(default_factory=SimParams)
    display_params: DisplayParams = field(default_factory=DisplayParams)
    frame_limit: int = DEFAULT_FRAME_LIMIT
    version: int = CONFIG_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'sim_params': self.sim_params.to_dict(),
            'display_params': self.display_params.to_dict(),
            'frame_limit': self.frame_limit,
        }

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'Config':
        version = config.get('version', CONFIG_VERSION)
        if version != CONFIG_VERSION:
            raise ValueError(
                f"Unsupported config version {version} (expected {CONFIG_VERSION})."
            )
        return cls(
            sim_params=SimParams.from_dict(config.get('sim_params', {})),
            display_params=DisplayParams.from_dict(config.get('display_params', {})),
            frame_limit=max(int(config.get('frame_limit', DEFAULT_FRAME_LIMIT)), MIN_FRAME_LIMIT),
            version=version,
        )


def encode_config_str(config: Config) -> str:
    """Packs a Config into a compact URL-safe string."""
    payload = json.dumps(config.to_dict(), separators=(',', ':')).encode('utf-8')
    packed = base64.urlsafe_b64encode(zlib.compress(payload, 9))
    return packed.rstrip(b'=').decode('ascii')


def decode_config_str(text: str) -> Optional[Config]:
    """Inverse of encode_config_str. Returns None if `text` is not a valid config."""
    try:
        padded = text + '=' * (-len(text) % 4)
        payload = zlib.decompress(base64.urlsafe_b64decode(padded.encode('ascii')))
        return Config.from_dict(json.loads(payload))
    except (ValueError, TypeError, AttributeError, zlib.error) as e:
        logging.warning(f"Ignoring invalid config string: {e}")
        return None


def _clamp(value, low, high):
    return min(max(value, low), high)
