"""Ecosystem, lifecycle and resource configuration constants."""

# Resource pool levels at session start (and after a reset)
INITIAL_ALGAE = 100
INITIAL_NITROGEN = 10000
INITIAL_OXYGEN = 100

# Algae growth factor is nitrogen/algae clamped into this range
ALGAE_GROWTH_MIN = 0.9
ALGAE_GROWTH_MAX = 1.5

# Population
INITIAL_POPULATION = 20  # Frogs created when a session starts
DEFAULT_MAX_AGE = 100  # Ticks a frog lives

# Fertile window as fractions of max age (both bounds exclusive)
FERTILE_MIN_FRACTION = 0.2
FERTILE_MAX_FRACTION = 0.8

# Feeding and decomposition
ALGAE_PER_FROG = 1  # Algae eaten by each living frog per tick
DEATH_NITROGEN_CREDIT = 100  # Nitrogen returned to the pool when a frog dies

# Mating
MATING_COOLDOWN_SECONDS = 10.0  # Simulated seconds a parent cannot mate again

# Log a status line every N ticks
STATUS_LOG_INTERVAL_TICKS = 30
