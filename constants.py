# constants.py
"""
Application-level constants.

These values are static and do not change between runs. They cover the
particle physics that is not part of the experimental configuration, the
defaults for every field option, and the rendering properties of the
window and its buttons.
"""

# --- Particle Physics ---
# Velocity multiplier applied every update step.
FRICTION = 0.9
# Numerator scale of the pointer repulsion: force = FORCE_SCALE * radius / d^2.
FORCE_SCALE = -10.0
# Lower bound on the squared distance used in the force denominator.
DISTANCE_SQ_FLOOR = 10.0
# Repulsion applies only while distance_sq / INFLUENCE_DIVISOR < radius.
INFLUENCE_DIVISOR = 8.0
# Jitter is only added to an axis whose velocity is below this value.
VIBRATE_THRESHOLD = 0.01
# Per-particle ease is drawn from [EASE_BASE, EASE_BASE + ease).
EASE_BASE = 0.1

# --- Field Defaults ---
DEFAULT_GAP = 0.0
DEFAULT_PARTICLE_SPACING = 5
DEFAULT_COLOR = None
DEFAULT_INFLUENCE_RADIUS = 20000.0
DEFAULT_BRIGHTNESS = 1.0
DEFAULT_VIBRATE = None
DEFAULT_EASE = 0.1
DEFAULT_SCALE = 1.0

# --- Visualization settings ---
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (1280x720).
FULLSCREEN = False
WINDOW_SIZE = (1280, 720)
FPS = 60
BACKGROUND_COLOR = (0, 0, 0)

# --- Buttons ---
BUTTON_WIDTH = 110
BUTTON_HEIGHT = 30
BUTTON_MARGIN = 10
BUTTON_COLOR = (80, 80, 80)
BUTTON_HOVER_COLOR = (110, 110, 110)
TEXT_COLOR = (255, 255, 255)
HUD_COLOR = (200, 200, 200)
