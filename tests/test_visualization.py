import pygame
import pytest

from simulation import Field
from visualization import DROP, SCATTER, SWITCH, Visualizer


def solid_image(width, height, rgba=(255, 255, 255, 255)):
    image = pygame.Surface((width, height), pygame.SRCALPHA)
    image.fill(rgba)
    return image


@pytest.fixture
def visualizer():
    vis = Visualizer({"fullscreen": False, "window_size": [300, 200], "fps": 1000})
    pygame.event.clear()
    yield vis
    vis.close()


@pytest.fixture
def field(visualizer):
    images = [solid_image(10, 10), solid_image(4, 4, (0, 0, 255, 255))]
    field = Field(visualizer.width, visualizer.height, images, {"psize": 2, "seed": 3})
    field.init(visualizer.sampling_surface)
    return field


def test_buttons_do_not_overlap(visualizer) -> None:
    rects = list(visualizer.buttons.values())

    assert len(rects) == 3
    assert not rects[0].colliderect(rects[1])
    assert not rects[1].colliderect(rects[2])


def test_triggers_run_field_actions(visualizer, field) -> None:
    assert len(field.particles) == 25

    visualizer.trigger(SWITCH, field)
    assert field.active_image_index == 1
    assert len(field.particles) == 4

    visualizer.trigger(DROP, field)
    assert all(p.origin_y == field.height for p in field.particles)

    origins = [(p.origin_x, p.origin_y) for p in field.particles]
    visualizer.trigger(SCATTER, field)
    assert [(p.origin_x, p.origin_y) for p in field.particles] == origins

    with pytest.raises(ValueError):
        visualizer.trigger("explode", field)


def test_mouse_motion_moves_pointer(visualizer, field) -> None:
    pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, pos=(12, 7), rel=(0, 0), buttons=(0, 0, 0)))

    assert visualizer.handle_events(field)
    assert (field.pointer.x, field.pointer.y) == (12.0, 7.0)


def test_quit_and_escape_stop_the_loop(visualizer, field) -> None:
    pygame.event.post(pygame.event.Event(pygame.QUIT))
    assert not visualizer.handle_events(field)

    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE, mod=0, unicode="", scancode=0))
    assert not visualizer.handle_events(field)


def test_draw_fills_particles_on_screen(visualizer, field) -> None:
    for p in field.particles:
        p.x, p.y = float(p.origin_x), float(p.origin_y)

    visualizer.draw(field)

    # The bottom-right particle sits outside the button row and HUD.
    assert tuple(visualizer.screen.get_at((154, 104)))[:3] == (255, 255, 255)
