"""Renderer-side display configuration constants."""

# Default viewport used by headless renderers
VIEWPORT_WIDTH = 800
VIEWPORT_HEIGHT = 600

# Movement: each frame a frog covers this fraction of the way to its destination
MOVE_FRACTION = 1 / 100
ARRIVAL_DISTANCE = 5  # Pick a new destination once closer than this (pixels)

# Proximity checks run every N frames
HIT_TEST_INTERVAL_FRAMES = 10

# Frog shapes start as 1x1 and grow by FROG_GROWTH_RATE**age until FROG_MAX_SIZE
FROG_INITIAL_SIZE = 1
FROG_MAX_SIZE = 10
FROG_GROWTH_RATE = 1.01

# Colours
MALE_FILL = (0, 255, 0)
FEMALE_FILL = (255, 255, 0)
ELIGIBLE_STROKE = "red"
DEFAULT_STROKE = "black"
ALGAE_FILL = "#A5FFA9"
ALGAE_PATCH_SIZE = 10
