# constants.py
"""
Application-level constants.

These values are static and do not change between runs. They are
fundamental to the motion engine (edge tolerances, wave clamps) or to the
viewer framework (window size, frame rate, colors) and are not part of the
per-scene configuration in config.json.
"""
import math

# --- Motion Engine ---
# Distance from a rect edge within which a point counts as touching it.
EDGE_MARGIN = 0.1
# Default interval (seconds) between two position-updated notifications.
DEFAULT_UPDATE_INTERVAL = 1.0
# Upper bound on leg transitions handled in a single tick.
MAX_LEG_TRANSITIONS_PER_TICK = 64

# --- Wave Surface ---
# Wavelength is a divisor in the sine argument and must stay positive.
WAVE_MIN_WAVELENGTH = 1e-6
# Rotation of the water line is only defined between -45 and 45 degrees.
WAVE_MAX_ROTATION = math.pi / 4
# Horizontal distance between two samples of the surface curve.
WAVE_SAMPLE_STEP = 1.0

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (see DEFAULT_WINDOW_SIZE).
FULLSCREEN = False
DEFAULT_WINDOW_SIZE = (960, 640)
FPS = 60
BACKGROUND_COLOR = (12, 24, 48) # Abyss Blue
DEFAULT_PARTICLE_RADIUS = 2

# Alpha value for the motion blur effect (0-255). Lower is a longer trail.
MOTION_BLUR_ALPHA = 60
# Alpha for the background wave layers, front layer is drawn opaque.
WAVE_BACKGROUND_ALPHA = 150

# Ocean palette used for wave layers when the config does not list colors.
OCEAN_COLORS = [
    (0, 119, 190),   # Ocean Blue
    (0, 64, 128),    # Deep Sea Blue
    (74, 155, 212),  # Wave Blue
    (159, 215, 238), # Ice Blue
    (113, 238, 184), # Seafoam Green
    (222, 203, 164)  # Sand Beige
]
PARTICLE_COLOR = (235, 245, 255)
