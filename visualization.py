# visualization.py
"""
Handles the window, input and rendering of the particle field using Pygame.
"""
import logging
import pygame
from typing import Dict, Optional, Tuple

from constants import (
    BACKGROUND_COLOR, BUTTON_COLOR, BUTTON_HEIGHT, BUTTON_HOVER_COLOR,
    BUTTON_MARGIN, BUTTON_WIDTH, FPS, FULLSCREEN, HUD_COLOR, TEXT_COLOR,
    WINDOW_SIZE,
)
from surface import PygameSurface

# Forward reference for type hinting to avoid circular import
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from simulation import Field


# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, vis_params: Optional[dict] = None):
#     - Inputs:
#       - vis_params: the "visualization" section of config.json.
#         - "fullscreen": bool (defaults to constants.FULLSCREEN)
#         - "window_size": [width, height] (defaults to constants.WINDOW_SIZE)
#         - "fps": int (defaults to constants.FPS)
#     - Side Effects: Initializes Pygame and creates the display and an
#       offscreen sampling surface of the same size.
#
#   - handle_events(self, field: Field) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: forwards pointer moves to the field's pointer state and
#       triggers scatter / switch_image / drop.
#
#   - draw(self, field: Field) -> None:
#     - Side Effects: clears the display, renders the particles, buttons and
#       HUD, flips the display and waits for the next frame.

SCATTER = "scatter"
SWITCH = "switch"
DROP = "drop"

BUTTON_LABELS = {
    SCATTER: "Scatter",
    SWITCH: "Switch",
    DROP: "Drop",
}


class Visualizer:
    """
    Owns the window and wires user input to the field.
    """
    def __init__(self, vis_params: Optional[dict] = None):
        """
        Initializes Pygame and the display window.
        """
        vis_params = vis_params if vis_params is not None else {}
        pygame.init()
        pygame.font.init()

        if vis_params.get('fullscreen', FULLSCREEN):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = vis_params.get('window_size', WINDOW_SIZE)
            self.screen = pygame.display.set_mode((width, height))

        self.width = width
        self.height = height
        self.fps = vis_params.get('fps', FPS)

        self.display = PygameSurface(self.screen, background=BACKGROUND_COLOR)
        # Images are drawn and read back here, never on the visible screen.
        self.sampling_surface = PygameSurface.offscreen(width, height)

        pygame.display.set_caption("Particle Field")
        self.clock = pygame.time.Clock()

        try:
            self.font_main = pygame.font.SysFont("Segoe UI", 14)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_main = pygame.font.SysFont(None, 18)

        self.buttons = self._layout_buttons()

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def _layout_buttons(self) -> Dict[str, pygame.Rect]:
        """Places the buttons in a row along the top-left corner."""
        buttons = {}
        x = BUTTON_MARGIN
        for action in (SCATTER, SWITCH, DROP):
            buttons[action] = pygame.Rect(x, BUTTON_MARGIN, BUTTON_WIDTH, BUTTON_HEIGHT)
            x += BUTTON_WIDTH + BUTTON_MARGIN
        return buttons

    def _button_at(self, pos: Tuple[int, int]) -> Optional[str]:
        for action, rect in self.buttons.items():
            if rect.collidepoint(pos):
                return action
        return None

    def _draw_buttons(self, mouse_pos: Tuple[int, int]):
        """Draws the buttons and handles their hover state."""
        hovered = self._button_at(mouse_pos)
        for action, rect in self.buttons.items():
            color = BUTTON_HOVER_COLOR if action == hovered else BUTTON_COLOR
            pygame.draw.rect(self.screen, color, rect, border_radius=5)

            text_surf = self.font_main.render(BUTTON_LABELS[action], True, TEXT_COLOR)
            text_rect = text_surf.get_rect(center=rect.center)
            self.screen.blit(text_surf, text_rect)

    def _draw_hud(self, field: "Field"):
        text = (
            f"Particles: {len(field.particles)}   "
            f"Image: {field.active_image_index + 1}/{len(field.images)}   "
            f"FPS: {self.clock.get_fps():.0f}"
        )
        text_surf = self.font_main.render(text, True, HUD_COLOR)
        self.screen.blit(text_surf, (BUTTON_MARGIN, BUTTON_MARGIN * 2 + BUTTON_HEIGHT))

    def trigger(self, action: str, field: "Field") -> None:
        """Runs a button action against the field."""
        if action == SCATTER:
            field.scatter()
        elif action == SWITCH:
            field.switch_image(self.sampling_surface)
        elif action == DROP:
            field.drop()
        else:
            raise ValueError(f"Unknown action '{action}'.")

    def handle_events(self, field: "Field") -> bool:
        """
        Processes pending events.

        Returns:
            bool: False if the app should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                # Any other key scatters the particles.
                self.trigger(SCATTER, field)

            elif event.type == pygame.MOUSEMOTION:
                field.set_pointer(*event.pos)

            elif event.type == pygame.WINDOWLEAVE:
                field.clear_pointer()

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                action = self._button_at(event.pos)
                if action is not None:
                    logging.info(f"'{BUTTON_LABELS[action]}' button clicked.")
                    self.trigger(action, field)
        return True

    def draw(self, field: "Field") -> None:
        """Draws the field, buttons and HUD, then waits for the next frame."""
        self.display.clear(0, 0, self.width, self.height)
        field.draw(self.display)
        self._draw_buttons(pygame.mouse.get_pos())
        self._draw_hud(field)

        pygame.display.flip()
        self.clock.tick(self.fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
