# color.py
"""
Turns a sampled RGBA pixel buffer into particle colors.

A grid cell becomes a particle only when its sampled alpha is non-zero; the
particle's color is the brightened RGB of that pixel, or the configured
override color when one is set.
"""
import logging
import numpy as np
from numba import jit
from typing import Optional, Sequence, Tuple

RGB = Tuple[int, int, int]

# --- Data Contracts ---
#
# sample_color(pixels, index, brightness, override) -> Optional[RGB]:
#   - Inputs:
#     - pixels: flat row-major RGBA buffer, 4 bytes per pixel.
#     - index: offset of the pixel's red byte (pixel_number * 4).
#   - Outputs: None when the alpha byte is 0, else override or the
#     brightened RGB tuple.
#
# sample_grid(pixels, width, height, spacing, brightness, override)
#     -> Tuple[np.ndarray, list]:
#   - Outputs:
#     - origins: int64 array of shape (N, 2), (x, y) of each opaque cell.
#     - colors: list of N RGB tuples.
#   - Invariants: cells are visited row-major with a fixed stride, so two
#     scans of the same buffer always yield the same order.


@jit(nopython=True)
def _scale_channel(raw, brightness):
    return int(min(raw * brightness, 255.0))


@jit(nopython=True)
def _scan_grid_numba(pixels, width, height, spacing, brightness):
    """
    Numba-jitted stride walk over the pixel buffer.

    Returns the origins and brightened RGB values of every opaque cell,
    in row-major order.
    """
    cols = (width + spacing - 1) // spacing
    rows = (height + spacing - 1) // spacing
    origins = np.empty((rows * cols, 2), dtype=np.int64)
    colors = np.empty((rows * cols, 3), dtype=np.int64)

    count = 0
    for y in range(0, height, spacing):
        for x in range(0, width, spacing):
            index = (y * width + x) * 4
            if pixels[index + 3] == 0:
                continue
            origins[count, 0] = x
            origins[count, 1] = y
            for c in range(3):
                colors[count, c] = _scale_channel(np.float64(pixels[index + c]), brightness)
            count += 1
    return origins[:count], colors[:count]


def sample_color(
    pixels: Sequence[int],
    index: int,
    brightness: float = 1.0,
    override: Optional[RGB] = None,
) -> Optional[RGB]:
    """Returns the display color of the pixel at `index`, or None if transparent."""
    if pixels[index + 3] == 0:
        return None
    if override is not None:
        return override
    return (
        _scale_channel(float(pixels[index]), float(brightness)),
        _scale_channel(float(pixels[index + 1]), float(brightness)),
        _scale_channel(float(pixels[index + 2]), float(brightness)),
    )


def sample_grid(
    pixels: np.ndarray,
    width: int,
    height: int,
    spacing: int,
    brightness: float = 1.0,
    override: Optional[RGB] = None,
) -> Tuple[np.ndarray, list]:
    """
    Samples every `spacing`-th pixel of a width x height RGBA buffer.

    Args:
        pixels (np.ndarray): Flat RGBA buffer as returned by Surface.read_pixels.
        width (int): Buffer width in pixels.
        height (int): Buffer height in pixels.
        spacing (int): Grid stride along both axes.
        brightness (float): Multiplier applied to each RGB channel.
        override (Optional[RGB]): Color used verbatim for every opaque cell.

    Returns:
        Tuple[np.ndarray, list]: Origins of shape (N, 2) and N colors.
    """
    pixels = np.ascontiguousarray(pixels, dtype=np.uint8).ravel()
    expected = width * height * 4
    if pixels.size < expected:
        msg = (
            f"Pixel buffer holds {pixels.size} bytes, but a {width}x{height} "
            f"RGBA grid needs {expected}."
        )
        logging.error(msg)
        raise ValueError(msg)

    origins, raw_colors = _scan_grid_numba(
        pixels, int(width), int(height), int(spacing), float(brightness)
    )
    if override is not None:
        colors = [override] * len(origins)
    else:
        colors = [tuple(int(c) for c in rgb) for rgb in raw_colors]

    logging.debug(
        f"Sampled {width}x{height} buffer at stride {spacing}: "
        f"{len(origins)} opaque cells."
    )
    return origins, colors
