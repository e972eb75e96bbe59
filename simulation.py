# simulation.py
"""
Handles the particle field: building it from an image, stepping it and
re-targeting it when the image changes.

This module defines the Field class, which owns the particle population,
the list of source images and the pointer state every particle reads. The
physical state of all particles is kept in NumPy arrays (one row per
particle) and advanced by a Numba-jitted kernel. An image switch re-samples
the pixel grid and hands the existing rows new origins instead of
rebuilding the population.
"""
import logging
import math
import numpy as np
from numba import jit
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from color import sample_grid
from constants import (
    DISTANCE_SQ_FLOOR, FORCE_SCALE, FRICTION, INFLUENCE_DIVISOR,
    VIBRATE_THRESHOLD,
)
from particle import Particle, PointerState
from settings import FieldConfig
from surface import ImageHandle, Surface

# --- Data Contracts ---
#
# class Field:
#   - __init__(self, width, height, images, config):
#     - Inputs:
#       - width, height: int, extent of the sampling and display surfaces.
#       - images: non-empty sequence of ImageHandle.
#       - config: FieldConfig, or a dict resolved with FieldConfig.from_dict.
#     - Side Effects: creates the RNG (seeded by config.seed), the pointer
#       and empty state arrays.
#     - Invariants:
#       - positions, velocities: float64 arrays of shape (capacity, 2).
#       - origins: int64 array of shape (capacity, 2).
#       - eases: float64 array of shape (capacity,).
#       - After init / switch_image, particles[i].index == i.
#
#   - init(self, surface: Surface) -> None:
#     - Side Effects: draws the active image onto `surface`, samples it and
#       replaces the population with one new particle per opaque cell.
#
#   - switch_image(self, surface: Surface) -> None:
#     - Side Effects: advances to the next image (cyclically), re-samples
#       and reconciles the population, reusing rows from the tail.
#     - Invariants: len(particles) equals the number of opaque cells of the
#       last sampled grid. No arrays are reallocated when the new image has
#       no more cells than the current capacity.
#
#   - update(self) -> None / draw(self, surface: Surface) -> None:
#     - One simulation step / one render pass over every particle.

UNINITIALIZED = "uninitialized"
POPULATED = "populated"

MIN_CAPACITY = 64

# Stands in for the jitter rolls when vibration is disabled.
_NO_ROLLS = np.empty((0, 3), dtype=np.float64)


@jit(nopython=True)
def _step_numba(
    positions, velocities, origins, eases,
    pointer_x, pointer_y, radius,
    vibrate_chance, vibrate_velocity, rolls
):
    """
    Numba-jitted per-frame update of every row.

    Each row is repelled from the pointer when it is inside the influence
    radius, slowed by friction, optionally jittered and then pulled toward
    its origin by its own ease factor. `rolls` holds three uniform draws per
    row (chance, x jitter, y jitter), or no rows when vibration is off.
    """
    jitter = rolls.shape[0] > 0
    half_velocity = vibrate_velocity / 2
    for i in range(positions.shape[0]):
        dx = pointer_x - positions[i, 0]
        dy = pointer_y - positions[i, 1]
        # Never square-rooted; the force falls off with d^2.
        distance_sq = dx * dx + dy * dy

        # An unset (NaN) pointer fails this comparison, so no force applies.
        if distance_sq / INFLUENCE_DIVISOR < radius:
            force = FORCE_SCALE * radius / max(distance_sq, DISTANCE_SQ_FLOOR)
            angle = math.atan2(dy, dx)
            velocities[i, 0] += force * math.cos(angle)
            velocities[i, 1] += force * math.sin(angle)

        velocities[i, 0] *= FRICTION
        velocities[i, 1] *= FRICTION

        if jitter and rolls[i, 0] < vibrate_chance:
            # One-sided check: strongly negative velocities still get jitter.
            if velocities[i, 0] < VIBRATE_THRESHOLD:
                velocities[i, 0] += rolls[i, 1] * vibrate_velocity - half_velocity
            if velocities[i, 1] < VIBRATE_THRESHOLD:
                velocities[i, 1] += rolls[i, 2] * vibrate_velocity - half_velocity

        ease = eases[i]
        positions[i, 0] += velocities[i, 0] + (origins[i, 0] - positions[i, 0]) * ease
        positions[i, 1] += velocities[i, 1] + (origins[i, 1] - positions[i, 1]) * ease


def _grow(array: np.ndarray, capacity: int) -> np.ndarray:
    grown = np.zeros((capacity,) + array.shape[1:], dtype=array.dtype)
    grown[:len(array)] = array
    return grown


class Field:
    """
    The particle population and the shared state it is simulated against.
    """
    def __init__(
        self,
        width: int,
        height: int,
        images: Sequence[ImageHandle],
        config: Union[FieldConfig, Dict[str, Any], None] = None,
    ):
        """
        Initializes an empty field.

        Args:
            width (int): Width of the field in pixels.
            height (int): Height of the field in pixels.
            images (Sequence[ImageHandle]): Images the field cycles through.
            config (Union[FieldConfig, Dict[str, Any], None]): Field options.
        """
        if not isinstance(config, FieldConfig):
            config = FieldConfig.from_dict(config)
        self.config = config

        if width <= 0 or height <= 0:
            msg = f"Field dimensions must be positive, got {width}x{height}."
            logging.critical(msg)
            raise ValueError(msg)
        if not images:
            msg = "Field needs at least one image."
            logging.critical(msg)
            raise ValueError(msg)

        self.width = int(width)
        self.height = int(height)
        self.images = list(images)
        self.active_image_index = 0
        self.particles: List[Particle] = []
        self.state = UNINITIALIZED

        # A seed of None gives uncontrolled randomness.
        self.rng = np.random.default_rng(self.config.seed)
        self.pointer = PointerState(radius=self.config.influence_radius)

        # Particle state arena. Rows [0, _rows) are allocated.
        self.positions = np.zeros((0, 2), dtype=np.float64)
        self.velocities = np.zeros((0, 2), dtype=np.float64)
        self.origins = np.zeros((0, 2), dtype=np.int64)
        self.eases = np.zeros(0, dtype=np.float64)
        self._rows = 0

        logging.info(
            f"Field initialized ({self.width}x{self.height}) with "
            f"{len(self.images)} images, spacing {self.config.particle_spacing}px, "
            f"block size {self.config.block_size}px."
        )

    @property
    def image(self) -> ImageHandle:
        return self.images[self.active_image_index]

    @property
    def capacity(self) -> int:
        """Number of rows the state arrays can hold without reallocating."""
        return len(self.eases)

    @property
    def placement(self) -> Tuple[float, float, float, float]:
        """Rectangle (x, y, w, h) of the active image, centered and scaled."""
        scale = self.config.scale
        w = self.image.get_width() * scale
        h = self.image.get_height() * scale
        x = self.width * 0.5 - w * 0.5
        y = self.height * 0.5 - h * 0.5
        return x, y, w, h

    def allocate(self, origin_x: int, origin_y: int, ease: float) -> int:
        """Claims the next free row for a new particle and returns its index."""
        if self._rows == self.capacity:
            capacity = max(MIN_CAPACITY, 2 * self.capacity)
            self.positions = _grow(self.positions, capacity)
            self.velocities = _grow(self.velocities, capacity)
            self.origins = _grow(self.origins, capacity)
            self.eases = _grow(self.eases, capacity)
            logging.debug(f"Particle arrays grown to {capacity} rows.")

        index = self._rows
        self.positions[index] = 0.0
        self.velocities[index] = 0.0
        self.origins[index] = (origin_x, origin_y)
        self.eases[index] = ease
        self._rows += 1
        return index

    def _compact(self, particles: List[Particle]) -> None:
        """Moves the rows of `particles` to the front, in list order."""
        order = np.array([p.index for p in particles], dtype=np.int64)
        count = len(order)
        # Fancy indexing copies before the assignment, so overlaps are safe.
        self.positions[:count] = self.positions[order]
        self.velocities[:count] = self.velocities[order]
        self.origins[:count] = self.origins[order]
        self.eases[:count] = self.eases[order]
        for index, particle in enumerate(particles):
            particle.index = index
        self._rows = count
        self.particles = particles

    def _sample(self, surface: Surface) -> Tuple[np.ndarray, list]:
        """Draws the active image onto a clean surface and samples its grid."""
        surface.clear(0, 0, self.width, self.height)
        surface.draw_image(self.image, *self.placement)
        pixels = surface.read_pixels(0, 0, self.width, self.height)
        return sample_grid(
            pixels,
            self.width,
            self.height,
            self.config.particle_spacing,
            self.config.brightness,
            self.config.color,
        )

    def init(self, surface: Surface) -> None:
        """Builds a fresh population from the active image."""
        origins, colors = self._sample(surface)
        self._rows = 0
        self.particles = [
            Particle(self, x, y, color)
            for (x, y), color in zip(origins.tolist(), colors)
        ]
        self.state = POPULATED
        logging.info(
            f"Field populated from image {self.active_image_index} "
            f"with {len(self.particles)} particles."
        )

    def next_image(self) -> None:
        self.active_image_index = (self.active_image_index + 1) % len(self.images)

    def switch_image(self, surface: Surface) -> None:
        """
        Moves to the next image and re-targets the population onto it.

        Opaque cells are walked in the same order as `init`. Each one takes
        the next particle from the tail of the current population, or a new
        particle once the pool runs out. Pooled particles left over when the
        new image has fewer cells are dropped and their rows become free.
        """
        self.next_image()
        origins, colors = self._sample(surface)

        pool = self.particles
        remaining = len(pool)
        reused = 0
        particles: List[Particle] = []
        for (x, y), color in zip(origins.tolist(), colors):
            if remaining > 0:
                remaining -= 1
                particle = pool[remaining]
                particle.reassign(x, y, color)
                reused += 1
            else:
                particle = Particle(self, x, y, color)
            particles.append(particle)

        self._compact(particles)
        self.state = POPULATED
        logging.info(
            f"Switched to image {self.active_image_index}: {reused} particles reused, "
            f"{len(particles) - reused} created, {remaining} discarded."
        )

    def step_rows(self, start: int, stop: int, pointer: Optional[PointerState] = None) -> None:
        """Advances rows [start, stop) by one frame."""
        if pointer is None:
            pointer = self.pointer
        vibrate = self.config.vibrate
        if vibrate is not None:
            rolls = np.asarray(self.rng.random((stop - start, 3)), dtype=np.float64)
            chance, velocity = vibrate.chance, vibrate.velocity
        else:
            rolls, chance, velocity = _NO_ROLLS, 0.0, 0.0

        _step_numba(
            self.positions[start:stop], self.velocities[start:stop],
            self.origins[start:stop], self.eases[start:stop],
            float(pointer.x), float(pointer.y), float(pointer.radius),
            float(chance), float(velocity), rolls,
        )

    def update(self, pointer: Optional[PointerState] = None) -> None:
        """Advances every particle by one frame."""
        self.step_rows(0, len(self.particles), pointer)

    def draw(self, surface: Surface) -> None:
        size = self.config.block_size
        positions = self.positions[:len(self.particles)].tolist()
        for particle, (x, y) in zip(self.particles, positions):
            surface.fill_rect(x, y, size, size, particle.color)

    def scatter(self) -> None:
        """Sends every particle to a random position; origins stay put."""
        count = len(self.particles)
        self.positions[:count] = self.rng.random((count, 2)) * (self.width, self.height)
        logging.info(f"Scattered {count} particles.")

    def drop(self) -> None:
        """Collapses the figure onto the bottom edge until origins are reassigned."""
        self.origins[:len(self.particles), 1] = self.height
        logging.info(f"Dropped {len(self.particles)} particles to the bottom edge.")

    def set_pointer(self, x: float, y: float) -> None:
        self.pointer.move_to(x, y)

    def clear_pointer(self) -> None:
        self.pointer.reset()

    def average_speed(self) -> float:
        if not self.particles:
            return 0.0
        speeds = np.linalg.norm(self.velocities[:len(self.particles)], axis=1)
        return float(np.mean(speeds))
