# color.py
"""
RGBA8 color model.

Colors are four 8-bit channels with straight (non-premultiplied) alpha.
This module generates particle colors from HSV and composites colors
with the Porter-Duff "source over" operator. The compositing math lives
in a Numba-jitted scalar function so the raster kernel in image.py and
Color.blend share one implementation.
"""
import numpy as np
from numba import jit
from typing import NamedTuple

# --- Data Contracts ---
#
# class Color(NamedTuple):
#   - Fields: r, g, b, a, each an int in [0, 255].
#   - Invariants: instances are immutable values.
#
#   - Color.hex(rgba: int) -> Color: decodes packed 0xRRGGBBAA.
#   - Color.hsva(h, s, v, a) -> Color:
#     - Inputs: h in degrees (wrapped into [0, 360)), s, v, a in percent
#       (clamped to [0, 100]).
#     - The HSV result is treated as linear light and encoded with the
#       sRGB transfer curve before quantizing. This defines the palette's
#       look and must not be changed.
#   - blend(self, top: Color) -> Color: composites top over self.
#     - Invariants: blending an opaque color yields exactly that color;
#       blending a transparent color leaves self unchanged.

BYTE_MAX_FLOAT = 255.0


@jit(nopython=True)
def to_byte(x):
    """Quantizes a normalized channel to the nearest byte."""
    value = int(x * BYTE_MAX_FLOAT + 0.5)
    return min(max(value, 0), 255)


@jit(nopython=True)
def blend_channels(bot_r, bot_g, bot_b, bot_a, top_r, top_g, top_b, top_a):
    """
    Source-over compositing of one RGBA8 color onto another.

    All channels are normalized to [0, 1] before compositing and
    requantized afterwards. A fully transparent result is returned as
    (0, 0, 0, 0).
    """
    tr = top_r / BYTE_MAX_FLOAT
    tg = top_g / BYTE_MAX_FLOAT
    tb = top_b / BYTE_MAX_FLOAT
    ta = top_a / BYTE_MAX_FLOAT
    br = bot_r / BYTE_MAX_FLOAT
    bg = bot_g / BYTE_MAX_FLOAT
    bb = bot_b / BYTE_MAX_FLOAT
    ba = bot_a / BYTE_MAX_FLOAT

    ta_inv = 1.0 - ta
    a = ta + ba * ta_inv
    if a == 0.0:
        return 0, 0, 0, 0
    r = (tr * ta + br * ba * ta_inv) / a
    g = (tg * ta + bg * ba * ta_inv) / a
    b = (tb * ta + bb * ba * ta_inv) / a
    return to_byte(r), to_byte(g), to_byte(b), to_byte(a)


def srgb_from_linear(x: float) -> float:
    """Encodes a linear-light channel with the sRGB transfer curve."""
    if x <= 0.0031308:
        return x * 12.92
    # Full intensity must stay exactly 1 so it quantizes to 255.
    if x >= 1.0:
        return 1.0
    return x ** (1.0 / 2.4) * 1.055 - 0.055


def _truncate_byte(x: float) -> int:
    return min(max(int(x * BYTE_MAX_FLOAT), 0), 255)


class Color(NamedTuple):
    """An RGBA8 color with straight alpha."""
    r: int
    g: int
    b: int
    a: int

    @classmethod
    def transparent(cls) -> 'Color':
        return cls(0, 0, 0, 0)

    @classmethod
    def hex(cls, rgba: int) -> 'Color':
        """Decodes a packed 0xRRGGBBAA value."""
        return cls(
            (rgba >> 24) & 0xff,
            (rgba >> 16) & 0xff,
            (rgba >> 8) & 0xff,
            rgba & 0xff,
        )

    @classmethod
    def hsva(cls, h: float, s: float, v: float, a: float) -> 'Color':
        """
        Builds a color from hue (degrees) and saturation, value and alpha
        (percent).

        The hexagonal HSV model gives linear RGB, which is then gamma
        encoded to sRGB. Channels are truncated to bytes.
        """
        h = h % 360.0
        s = min(max(s, 0.0), 100.0)
        v = min(max(v, 0.0), 100.0)
        a = min(max(a, 0.0), 100.0)
        h /= 60.0
        s /= 100.0
        v /= 100.0
        a /= 100.0

        c = v * s
        x = c * (1.0 - abs(h % 2.0 - 1.0))
        if h < 1.0:
            r, g, b = c, x, 0.0
        elif h < 2.0:
            r, g, b = x, c, 0.0
        elif h < 3.0:
            r, g, b = 0.0, c, x
        elif h < 4.0:
            r, g, b = 0.0, x, c
        elif h < 5.0:
            r, g, b = x, 0.0, c
        else:
            r, g, b = c, 0.0, x
        m = v - c

        return cls(
            _truncate_byte(srgb_from_linear(r + m)),
            _truncate_byte(srgb_from_linear(g + m)),
            _truncate_byte(srgb_from_linear(b + m)),
            _truncate_byte(a),
        )

    def blend(self, top: 'Color') -> 'Color':
        """Composites `top` over this color ("source over")."""
        return Color(*blend_channels(*self, *top))

    def fade(self, factor: float) -> 'Color':
        """Returns this color with its alpha scaled by `factor`."""
        return self._replace(a=min(max(int(self.a * factor), 0), 255))

    def to_hex(self) -> str:
        """Formats as lowercase `rrggbbaa`, as used by SVG and CSS."""
        return f"{self.r:02x}{self.g:02x}{self.b:02x}{self.a:02x}"

    def as_array(self) -> np.ndarray:
        return np.array(self, dtype=np.uint8)
