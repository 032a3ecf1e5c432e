# image.py
"""
The accumulation image.

An Image is a persistent RGBA8 pixel buffer that particles are splatted
onto every frame. Its content is the visual memory of the simulation:
it survives across frames and resizes, and is only reset by clear().
"""
import logging
import numpy as np
from numba import jit
from color import Color, blend_channels

# --- Data Contracts ---
#
# class Image:
#   - __init__(self, width: int, height: int, background: Color):
#     - Side Effects: Allocates a (height, width, 4) uint8 buffer filled
#       with the background color.
#     - Invariants:
#       - self.pixels.shape == (self.height, self.width, 4)
#       - Pixels are stored row-major, so self.pixels.tobytes() is the
#         RGBA8 raster expected by surface painters.
#
#   - pixel(self, x: int, y: int) -> Color:
#     - Read-back of a single pixel, for tests and debugging. Painters
#       read the whole raster through to_raster_bytes().
#
#   - draw_particle(self, x: float, y: float, color: Color) -> None:
#     - Anti-aliased splat covering up to 2x2 pixels. Coordinates are in
#       pixel units where (0.5, 0.5) is the center of the top-left pixel.
#       Points entirely outside the image write nothing.
#
#   - resize(self, width: int, height: int) -> None:
#     - Side Effects: Replaces the buffer. The overlapping region of the
#       old content is kept, centered in the new buffer.


@jit(nopython=True)
def _axis_coverage(x, extent):
    """
    Returns (i0, w0, i1, w1): the pixel indices covered along one axis and
    their weights. A missing pixel is reported as index -1.
    """
    x -= 0.5
    if extent <= 0 or x <= -1.0 or x >= extent:
        return -1, 0.0, -1, 0.0
    if x < 0.0:
        return -1, 0.0, 0, 1.0 + x
    frac = x - np.floor(x)
    if x >= extent - 1:
        return extent - 1, 1.0 - frac, -1, 0.0
    i = int(x)
    return i, 1.0 - frac, i + 1, frac


@jit(nopython=True)
def _blend_into(pixels, x, y, r, g, b, a):
    nr, ng, nb, na = blend_channels(
        pixels[y, x, 0], pixels[y, x, 1], pixels[y, x, 2], pixels[y, x, 3],
        r, g, b, a
    )
    pixels[y, x, 0] = nr
    pixels[y, x, 1] = ng
    pixels[y, x, 2] = nb
    pixels[y, x, 3] = na


@jit(nopython=True)
def _splat_cell(pixels, x, wx, y, wy, r, g, b, a):
    if x < 0 or y < 0:
        return
    faded_a = min(max(int(a * (wx * wy)), 0), 255)
    _blend_into(pixels, x, y, r, g, b, faded_a)


@jit(nopython=True)
def _splat_numba(pixels, x, y, r, g, b, a):
    """Numba-jitted anti-aliased point splat."""
    x0, wx0, x1, wx1 = _axis_coverage(x, pixels.shape[1])
    y0, wy0, y1, wy1 = _axis_coverage(y, pixels.shape[0])
    _splat_cell(pixels, x0, wx0, y0, wy0, r, g, b, a)
    _splat_cell(pixels, x0, wx0, y1, wy1, r, g, b, a)
    _splat_cell(pixels, x1, wx1, y0, wy0, r, g, b, a)
    _splat_cell(pixels, x1, wx1, y1, wy1, r, g, b, a)


@jit(nopython=True)
def splat_many_numba(pixels, xs, ys, colors):
    """
    Splats one point per particle. Used by World.render so the whole frame
    is drawn in a single jitted call.
    """
    for i in range(xs.shape[0]):
        _splat_numba(
            pixels, xs[i], ys[i],
            colors[i, 0], colors[i, 1], colors[i, 2], colors[i, 3]
        )


def _centered_overlap(old: int, new: int):
    """Returns (src_offset, dst_offset, length) for one axis of a resize."""
    if new < old:
        return (old - new) // 2, 0, new
    return 0, (new - old) // 2, old


class Image:
    """
    A width x height grid of RGBA8 colors with a fixed background.
    """
    def __init__(self, width: int, height: int, background: Color):
        self.width = width
        self.height = height
        self.background = background
        self.pixels = np.empty((height, width, 4), dtype=np.uint8)
        self.pixels[:, :] = background.as_array()
        logging.debug(f"Image allocated ({width}x{height}).")

    def pixel(self, x: int, y: int) -> Color:
        return Color(*(int(c) for c in self.pixels[y, x]))

    def put_pixel(self, x: int, y: int, color: Color) -> None:
        """Overwrites a pixel. The caller guarantees the bounds."""
        self.pixels[y, x] = color

    def blend_pixel(self, x: int, y: int, color: Color) -> None:
        """Composites `color` over the current pixel value."""
        _blend_into(self.pixels, x, y, *color)

    def draw_particle(self, x: float, y: float, color: Color) -> None:
        """Splats `color` at a sub-pixel position with bilinear weights."""
        _splat_numba(self.pixels, float(x), float(y), *color)

    def resize(self, width: int, height: int) -> None:
        """
        Resizes the buffer, keeping the old content centered.

        Growing an axis pads both sides with background; shrinking it crops
        both sides. The extra pixel of an odd difference goes to the end.
        """
        if width == self.width and height == self.height:
            return

        src_x, dst_x, span_x = _centered_overlap(self.width, width)
        src_y, dst_y, span_y = _centered_overlap(self.height, height)

        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = self.background.as_array()
        pixels[dst_y:dst_y + span_y, dst_x:dst_x + span_x] = \
            self.pixels[src_y:src_y + span_y, src_x:src_x + span_x]

        logging.debug(
            f"Image resized {self.width}x{self.height} -> {width}x{height}."
        )
        self.pixels = pixels
        self.width = width
        self.height = height

    def clear(self) -> None:
        """Refills every pixel with the background color."""
        self.pixels[:, :] = self.background.as_array()

    def to_raster_bytes(self) -> bytes:
        """Returns the pixels as row-major RGBA8 bytes."""
        return self.pixels.tobytes()
