# surface.py
"""
Drawing surfaces used by the field.

The field only needs four operations from a surface: draw a scaled image,
read pixels back, clear a rectangle and fill a rectangle. PygameSurface
provides them on top of a pygame.Surface, both for the window and for the
offscreen surface images are sampled from.
"""
import logging
import numpy as np
import pygame
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union

# --- Data Contracts ---
#
# class Surface (protocol):
#   - draw_image(image, x, y, w, h) -> None: draws `image` scaled to w x h
#     with its top-left corner at (x, y).
#   - read_pixels(x, y, w, h) -> np.ndarray: flat uint8 buffer of w * h * 4
#     bytes, RGBA, row-major.
#   - clear(x, y, w, h) -> None: resets the rectangle to the background.
#   - fill_rect(x, y, w, h, color) -> None: fills the rectangle with `color`.


class ImageHandle(Protocol):
    def get_width(self) -> int: ...

    def get_height(self) -> int: ...


class Surface(Protocol):
    def draw_image(self, image, x: float, y: float, w: float, h: float) -> None: ...

    def read_pixels(self, x: int, y: int, w: int, h: int) -> np.ndarray: ...

    def clear(self, x: int, y: int, w: int, h: int) -> None: ...

    def fill_rect(self, x: float, y: float, w: float, h: float, color) -> None: ...


class PygameSurface:
    """
    Adapts a pygame.Surface to the Surface protocol.
    """
    def __init__(self, target: pygame.Surface, background: Optional[Sequence[int]] = None):
        """
        Args:
            target (pygame.Surface): The surface to draw on and read from.
            background (Optional[Sequence[int]]): Color used by `clear`.
                Defaults to fully transparent black.
        """
        self.target = target
        self.background = pygame.Color(*(background if background is not None else (0, 0, 0, 0)))

    @classmethod
    def offscreen(cls, width: int, height: int) -> "PygameSurface":
        """Creates a transparent surface for sampling images."""
        return cls(pygame.Surface((width, height), pygame.SRCALPHA))

    def draw_image(self, image: pygame.Surface, x: float, y: float, w: float, h: float) -> None:
        size = (int(round(w)), int(round(h)))
        if size[0] <= 0 or size[1] <= 0:
            logging.warning(f"Skipping image draw with empty size {size}.")
            return
        if size != image.get_size():
            try:
                image = pygame.transform.smoothscale(image, size)
            except ValueError:
                # smoothscale only handles 24 and 32 bit surfaces.
                image = pygame.transform.scale(image, size)
        self.target.blit(image, (int(round(x)), int(round(y))))

    def read_pixels(self, x: int, y: int, w: int, h: int) -> np.ndarray:
        # surfarray indexes [x, y]; transpose to row-major before flattening.
        rgb = pygame.surfarray.array3d(self.target)[x:x + w, y:y + h]
        alpha = pygame.surfarray.array_alpha(self.target)[x:x + w, y:y + h]
        rgba = np.dstack((rgb.transpose(1, 0, 2), alpha.T))
        return np.ascontiguousarray(rgba, dtype=np.uint8).ravel()

    def clear(self, x: int, y: int, w: int, h: int) -> None:
        self.target.fill(self.background, pygame.Rect(int(x), int(y), int(w), int(h)))

    def fill_rect(self, x: float, y: float, w: float, h: float, color) -> None:
        self.target.fill(color, pygame.Rect(int(x), int(y), int(w), int(h)))


def render_text_image(text: str, font_size: int = 160, color: Sequence[int] = (255, 255, 255)) -> pygame.Surface:
    """Renders `text` onto a transparent surface, for use as a field image."""
    if not pygame.font.get_init():
        pygame.font.init()
    font = pygame.font.SysFont(None, font_size, bold=True)
    image = font.render(text, True, color)
    logging.info(f"Rendered text image '{text}' ({image.get_width()}x{image.get_height()}).")
    return image


def load_images(sources: Iterable[Union[str, Dict[str, Any]]]) -> List[pygame.Surface]:
    """
    Loads every image source, keeping per-pixel alpha.

    A source is either a file path or a mapping such as
    {"text": "Hello", "size": 160, "color": [255, 200, 0]} rendered with a
    system font.
    """
    images = []
    for source in sources:
        if isinstance(source, dict):
            if "text" not in source:
                msg = f"Image source {source} needs a 'text' key."
                logging.error(msg)
                raise ValueError(msg)
            images.append(render_text_image(
                str(source["text"]),
                int(source.get("size", 160)),
                tuple(source.get("color", (255, 255, 255))),
            ))
            continue
        path = source
        try:
            image = pygame.image.load(path)
        except (pygame.error, FileNotFoundError):
            logging.error(f"Could not load image from {path}.")
            raise
        if pygame.display.get_surface() is not None:
            image = image.convert_alpha()
        logging.info(f"Loaded image {path} ({image.get_width()}x{image.get_height()}).")
        images.append(image)
    return images
