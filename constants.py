# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They cover the rendering framework (window and panel sizes, colors),
the accepted ranges for every user-facing parameter, and the defaults
used when the config file leaves a parameter out.
"""

# Visualization settings
WINDOW_WIDTH = 1200
WINDOW_HEIGHT = 800
UI_PANEL_WIDTH = 300
FPS = 60
# Packed 0xRRGGBBAA values. The image background is what the trails
# accumulate on; the SVG background is written into exported drawings.
IMAGE_BACKGROUND_HEX = 0x242424ff
SVG_BACKGROUND_HEX = 0x000000ff
UI_BACKGROUND_ALPHA = 100

# Size of the palette preview in the UI panel.
PALETTE_WIDTH = 100
PALETTE_HEIGHT = 40

# --- Simulation ---
# Particles spawn on a ring with a radius drawn from this range.
SPAWN_RADIUS_MIN = 9.0
SPAWN_RADIUS_MAX = 10.0
MAX_VELOCITY = 1.0

# Enough for a minute of 1000 particles at 60 fps. Each snapshot entry
# is a float32 2-vector (8 bytes).
HISTORY_MEMORY_CAP = 3600 * 1000 * 8

# --- Parameter ranges ---
MIN_PARTICLE_COUNT = 3
MAX_PARTICLE_COUNT = 1000000
MIN_ACC_LIMIT = -10
MAX_ACC_LIMIT = 10
MIN_PARTICLE_COLOR_HUE_MID = 0.0
MAX_PARTICLE_COLOR_HUE_MID = 360.0
MIN_PARTICLE_COLOR_HUE_SPREAD = 0.0
MAX_PARTICLE_COLOR_HUE_SPREAD = 360.0
MIN_PARTICLE_COLOR_SATURATION_MID = 0.0
MAX_PARTICLE_COLOR_SATURATION_MID = 100.0
MIN_PARTICLE_COLOR_SATURATION_SPREAD = 0.0
MAX_PARTICLE_COLOR_SATURATION_SPREAD = 100.0
MIN_PARTICLE_COLOR_VALUE = 1.0
MAX_PARTICLE_COLOR_VALUE = 100.0
MIN_PARTICLE_COLOR_ALPHA = 1.0
MAX_PARTICLE_COLOR_ALPHA = 100.0
MIN_FRAME_LIMIT = 1

# --- Defaults ---
DEFAULT_SEED = 0x27e3771584a46455
DEFAULT_PARTICLE_COUNT = 1000
DEFAULT_ACC_LIMIT = -1
DEFAULT_PARTICLE_COLOR_HUE_MID = 120.0
DEFAULT_PARTICLE_COLOR_HUE_SPREAD = 240.0
DEFAULT_PARTICLE_COLOR_SATURATION_MID = 70.0
DEFAULT_PARTICLE_COLOR_SATURATION_SPREAD = 20.0
DEFAULT_PARTICLE_COLOR_VALUE = 100.0
DEFAULT_PARTICLE_COLOR_ALPHA = 6.0
DEFAULT_FRAME_LIMIT = 60 * 60

# Version of the persisted configuration record.
CONFIG_VERSION = 1
