# constants.py

"""
Application Constants

This module defines static configuration values for the application's framework.
These are not expected to change between simulation runs. Run-specific tuning
(timestep, solver settings, initial cradle) lives in config.json.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Screen dimensions
WIDTH = 1200  # Pixels
HEIGHT = 700  # Pixels

# Framerate
FPS = 60  # Frames per second

# Window Title
TITLE = "Newton's Cradle"

# Colors (RGB)
BACKGROUND_COLOR = (247, 249, 250)
BEAM_COLOR = (229, 229, 229)
STRING_COLOR = (175, 175, 175)
ACCENT_BLUE = (28, 176, 246)     # Bob color in uniform mass mode
DRAG_HIGHLIGHT = (255, 127, 14)  # Bob color while grabbed
SHINE_COLOR = (255, 255, 255, 60)  # RGBA. Highlight drawn over every bob.

# Cradle geometry
BOB_RADIUS = 25.0      # Pixels. Base radius, mass ratio 1.0.
STRING_LENGTH = 250.0  # Pixels
PIVOT_Y = 100.0        # Pixels from the top of the window
BEAM_PADDING = 20.0    # Pixels of beam per bob beyond the bob diameter
BEAM_WIDTH = 12        # Pixels
STRING_WIDTH = 4       # Pixels

# Bob count range
MIN_BOBS = 2
MAX_BOBS = 20

# Mass settings
MASS_MODE_UNIFORM = "uniform"
MASS_MODE_INDIVIDUAL = "individual"
MASS_MODES = (MASS_MODE_UNIFORM, MASS_MODE_INDIVIDUAL)
BASE_MASS = 1.0       # Mass ratio of a default bob
MASS_SCALE = 10.0     # Engine mass units per unit of mass ratio
MIN_MASS_RATIO = 0.5
MAX_MASS_RATIO = 3.0
MASS_RATIO_STEP = 0.1

# Individual mode coloring (HSV, pygame ranges)
HUE_STEP = 40               # Degrees per bob index
INDIVIDUAL_SATURATION = 60  # Percent
INDIVIDUAL_VALUE = 90       # Percent

# Interaction
GRAB_RADIUS_FACTOR = 1.5  # A bob is grabbed within radius * factor of its centre.

# Physical parameters handed to the engine for every bob
BOB_RESTITUTION = 1.0  # Perfectly elastic
BOB_FRICTION = 0.0
BOB_AIR_DRAG = 0.0
STRING_STIFFNESS = 1.0
