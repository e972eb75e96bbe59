# particle.py
"""
Manages the pointer state and the per-cell particle handles.

A Particle is one sampled grid cell rendered as a solid block. It is pulled
back toward its origin by a damped spring and pushed away from the pointer
when the pointer is close enough. The physical state of every particle
lives in NumPy arrays owned by its Field; a Particle is the row index into
those arrays plus the color of its block.
"""
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from constants import EASE_BASE

if TYPE_CHECKING:
    from color import RGB
    from simulation import Field
    from surface import Surface

# --- Data Contracts ---
#
# class PointerState:
#   - x, y: float, NaN until the first pointer event arrives.
#   - radius: float, influence radius in squared-distance units.
#
# class Particle:
#   - __init__(self, field: Field, x: float, y: float, color: RGB):
#     - Side Effects: allocates a row in the field's state arrays, draws an
#       ease factor from field.rng and scatters the particle to a random
#       position inside the field.
#     - Invariants:
#       - origin_x / origin_y are integers.
#       - size and ease never change after construction.
#       - `index` is only rewritten by the field when it compacts rows.
#
#   - update(self, pointer: Optional[PointerState] = None) -> None:
#     - Side Effects: advances this particle's row by one frame.
#     - Invariants: with no pointer influence, position converges to origin.


@dataclass
class PointerState:
    """The pointer position shared by every particle of a field."""
    radius: float
    x: float = math.nan
    y: float = math.nan

    @property
    def is_set(self) -> bool:
        return not (math.isnan(self.x) or math.isnan(self.y))

    def move_to(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)

    def reset(self) -> None:
        """Forgets the pointer position, e.g. when it leaves the window."""
        self.x = math.nan
        self.y = math.nan


class Particle:
    """
    One block of the image, with its own velocity and return speed.
    """
    def __init__(self, field: "Field", x: float, y: float, color: "RGB"):
        self.field = field
        self.color = color
        self.size = field.config.block_size
        ease = field.config.ease * field.rng.random() + EASE_BASE
        self.index = field.allocate(math.floor(x), math.floor(y), ease)
        self.warp()

    def __repr__(self) -> str:
        return (
            f"Particle(origin=({self.origin_x}, {self.origin_y}), "
            f"pos=({self.x:.1f}, {self.y:.1f}), color={self.color})"
        )

    # --- Views onto the field's state arrays ---

    @property
    def x(self) -> float:
        return self.field.positions[self.index, 0]

    @x.setter
    def x(self, value: float) -> None:
        self.field.positions[self.index, 0] = value

    @property
    def y(self) -> float:
        return self.field.positions[self.index, 1]

    @y.setter
    def y(self, value: float) -> None:
        self.field.positions[self.index, 1] = value

    @property
    def vx(self) -> float:
        return self.field.velocities[self.index, 0]

    @vx.setter
    def vx(self, value: float) -> None:
        self.field.velocities[self.index, 0] = value

    @property
    def vy(self) -> float:
        return self.field.velocities[self.index, 1]

    @vy.setter
    def vy(self, value: float) -> None:
        self.field.velocities[self.index, 1] = value

    @property
    def origin_x(self) -> int:
        return int(self.field.origins[self.index, 0])

    @origin_x.setter
    def origin_x(self, value: int) -> None:
        self.field.origins[self.index, 0] = value

    @property
    def origin_y(self) -> int:
        return int(self.field.origins[self.index, 1])

    @origin_y.setter
    def origin_y(self, value: int) -> None:
        self.field.origins[self.index, 1] = value

    @property
    def ease(self) -> float:
        return self.field.eases[self.index]

    @property
    def speed_sq(self) -> float:
        vx, vy = self.field.velocities[self.index]
        return vx * vx + vy * vy

    def reassign(self, x: float, y: float, color: "RGB") -> None:
        """
        Gives a pooled particle a new origin and color.

        Position, velocity and ease are kept so the particle flies from
        wherever it is to its new cell.
        """
        self.field.origins[self.index] = (math.floor(x), math.floor(y))
        self.color = color

    def update(self, pointer: Optional[PointerState] = None) -> None:
        """
        Advances the particle by one frame.

        Runs the field's step kernel on this particle's row only.
        """
        self.field.step_rows(self.index, self.index + 1, pointer)

    def draw(self, surface: "Surface") -> None:
        surface.fill_rect(self.x, self.y, self.size, self.size, self.color)

    def warp(self) -> None:
        """Moves the particle to a random point of the field."""
        self.x = self.field.rng.random() * self.field.width
        self.y = self.field.rng.random() * self.field.height
