import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from settings import FieldConfig
from simulation import Field


class FakeImage:
    """An RGBA image held as a (height, width, 4) uint8 array."""

    def __init__(self, pixels):
        self.pixels = np.asarray(pixels, dtype=np.uint8)

    @classmethod
    def solid(cls, width, height, rgba=(255, 255, 255, 255)):
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = rgba
        return cls(pixels)

    def get_width(self):
        return self.pixels.shape[1]

    def get_height(self):
        return self.pixels.shape[0]


class FakeSurface:
    """In-memory surface that records fills and composites images by copy."""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.canvas = np.zeros((height, width, 4), dtype=np.uint8)
        self.fills = []
        self.clears = []

    def draw_image(self, image, x, y, w, h):
        w, h = int(round(w)), int(round(h))
        x, y = int(round(x)), int(round(y))
        # Nearest-neighbour resample to the requested size.
        rows = (np.arange(h) * image.get_height() // h).astype(int)
        cols = (np.arange(w) * image.get_width() // w).astype(int)
        scaled = image.pixels[rows][:, cols]
        for row in range(h):
            for col in range(w):
                cx, cy = x + col, y + row
                if 0 <= cx < self.width and 0 <= cy < self.height:
                    self.canvas[cy, cx] = scaled[row, col]

    def read_pixels(self, x, y, w, h):
        return self.canvas[y:y + h, x:x + w].copy().ravel()

    def clear(self, x, y, w, h):
        self.clears.append((x, y, w, h))
        self.canvas[y:y + h, x:x + w] = 0

    def fill_rect(self, x, y, w, h, color):
        self.fills.append((x, y, w, h, color))


class FixedRandom:
    """Stands in for a numpy Generator; every draw returns `value`."""

    def __init__(self, value):
        self.value = value

    def random(self, size=None):
        if size is None:
            return self.value
        return np.full(size, self.value, dtype=np.float64)


@pytest.fixture
def make_field():
    def _make(width=10, height=10, images=None, **params):
        if images is None:
            images = [FakeImage.solid(width, height)]
        params.setdefault("seed", 1234)
        return Field(width, height, images, FieldConfig.from_dict(params))
    return _make


@pytest.fixture
def fake_surface():
    return FakeSurface
