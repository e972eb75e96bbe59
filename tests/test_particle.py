import math

import pytest

from conftest import FakeSurface, FixedRandom
from particle import Particle, PointerState


@pytest.fixture
def field(make_field):
    return make_field(width=100, height=80)


def test_origin_is_truncated_and_position_scattered(field) -> None:
    particle = Particle(field, 12.9, 7.2, (1, 2, 3))

    assert (particle.origin_x, particle.origin_y) == (12, 7)
    assert 0 <= particle.x < field.width
    assert 0 <= particle.y < field.height
    assert (particle.vx, particle.vy) == (0.0, 0.0)


def test_ease_is_drawn_above_base(make_field) -> None:
    field = make_field(ease=0.05)

    eases = [Particle(field, 0, 0, (0, 0, 0)).ease for _ in range(200)]

    assert all(0.1 <= e < 0.15 for e in eases)
    assert len(set(eases)) > 1


def test_block_size_leaves_gap(make_field) -> None:
    field = make_field(psize=5, gap=0.25)

    assert Particle(field, 0, 0, (0, 0, 0)).size == 3


def test_converges_to_origin_with_far_pointer(field) -> None:
    particle = Particle(field, 40, 30, (0, 0, 0))
    pointer = PointerState(radius=20000.0, x=1e6, y=1e6)

    for _ in range(500):
        particle.update(pointer)

    assert particle.x == pytest.approx(40, abs=1e-6)
    assert particle.y == pytest.approx(30, abs=1e-6)


def test_unset_pointer_applies_no_force(field) -> None:
    particle = Particle(field, 40, 30, (0, 0, 0))
    assert not field.pointer.is_set

    particle.update()

    assert (particle.vx, particle.vy) == (0.0, 0.0)
    assert math.isfinite(particle.x) and math.isfinite(particle.y)


def test_pointer_on_top_of_particle_gives_finite_force(field) -> None:
    particle = Particle(field, 40, 30, (0, 0, 0))
    pointer = PointerState(radius=200.0, x=particle.x, y=particle.y)

    particle.update(pointer)

    # distance 0 is floored to 10, so the force is -10 * 200 / 10 along angle 0.
    assert particle.vx == pytest.approx(-200.0 * 0.9)
    assert particle.vy == pytest.approx(0.0)
    assert math.isfinite(particle.x)


def test_pointer_repels_particle(field) -> None:
    particle = Particle(field, 40, 30, (0, 0, 0))
    particle.x, particle.y = 40.0, 30.0
    pointer = PointerState(radius=20000.0, x=50.0, y=30.0)

    particle.update(pointer)

    assert particle.vx < 0
    assert particle.x < 40.0


def test_pointer_outside_radius_is_ignored(field) -> None:
    particle = Particle(field, 40, 30, (0, 0, 0))
    particle.x, particle.y = 40.0, 30.0
    # distance_sq = 100, and 100 / 8 is not below a radius of 12.
    pointer = PointerState(radius=12.0, x=50.0, y=30.0)

    particle.update(pointer)

    assert (particle.vx, particle.vy) == (0.0, 0.0)


def test_friction_decays_velocity(field) -> None:
    particle = Particle(field, 40, 30, (0, 0, 0))
    particle.vx, particle.vy = 10.0, -10.0

    particle.update(PointerState(radius=0.0))

    assert particle.vx == pytest.approx(9.0)
    assert particle.vy == pytest.approx(-9.0)


def test_vibration_only_nudges_low_velocities(make_field) -> None:
    field = make_field(vibrate={"chance": 1.0, "velocity": 0.2})
    particle = Particle(field, 5, 5, (0, 0, 0))
    particle.x, particle.y = 5.0, 5.0
    particle.vx, particle.vy = 5.0, -5.0
    field.rng = FixedRandom(0.75)

    particle.update(PointerState(radius=0.0))

    # Jitter is 0.75 * 0.2 - 0.1; only the axis below 0.01 receives it.
    assert particle.vx == pytest.approx(4.5)
    assert particle.vy == pytest.approx(-4.5 + 0.05)


def test_vibration_respects_chance(make_field) -> None:
    field = make_field(vibrate={"chance": 0.5, "velocity": 0.2})
    particle = Particle(field, 5, 5, (0, 0, 0))
    field.rng = FixedRandom(0.75)

    particle.update(PointerState(radius=0.0))

    assert (particle.vx, particle.vy) == (0.0, 0.0)


def test_reassign_keeps_motion_state(field) -> None:
    particle = Particle(field, 1, 1, (0, 0, 0))
    particle.vx, particle.vy = 3.0, 4.0
    before = (particle.x, particle.y, particle.vx, particle.vy, particle.ease)

    particle.reassign(20.7, 30.2, (9, 9, 9))

    assert (particle.origin_x, particle.origin_y) == (20, 30)
    assert particle.color == (9, 9, 9)
    assert (particle.x, particle.y, particle.vx, particle.vy, particle.ease) == before


def test_draw_fills_block(field) -> None:
    surface = FakeSurface(100, 80)
    particle = Particle(field, 1, 1, (9, 8, 7))

    particle.draw(surface)

    assert surface.fills == [(particle.x, particle.y, particle.size, particle.size, (9, 8, 7))]


def test_pointer_state_set_and_reset() -> None:
    pointer = PointerState(radius=10.0)
    assert not pointer.is_set

    pointer.move_to(3, 4)
    assert pointer.is_set
    assert (pointer.x, pointer.y) == (3.0, 4.0)

    pointer.reset()
    assert not pointer.is_set
