"""
Default run parameters and shading constants for the Voxel Timelapse Renderer.
"""

# Output
DEFAULT_WIDTH = 960
DEFAULT_HEIGHT = 540
DEFAULT_FPS = 30.0
DEFAULT_SECONDS = 10.0
DEFAULT_OUTPUT_DIR = "output/frames"
FRAME_PATTERN = "frame_{index:04d}.png"

# Tiling / workers
DEFAULT_TILE_SIZE = 32
DEFAULT_WORKERS = 4

# Ray tracing
EPSILON = 1e-4
PARALLEL_EPSILON = 1e-12
MAX_DEPTH = 3

# Camera orbit (centered on the house)
ORBIT_TARGET = (8.0, 3.0, 8.0)
ORBIT_BASE_RADIUS = 18.0
ORBIT_ZOOM_AMPLITUDE = 2.0
ORBIT_ELEVATION_DEG = 16.0
ORBIT_PERIOD_SECONDS = 10.0
FOV_DEG = 60.0

# Day / night cycle
# time_of_day is normalized: 0 = midnight, 0.25 = sunrise, 0.5 = noon, 0.75 = sunset
SUN_AXIS_TILT_DEG = 11.5
SUN_PEAK_INTENSITY = 1.0
SUN_NIGHT_FLOOR = 0.0
SUN_ELEVATION_GAMMA = 0.8
AMBIENT_FRACTION = 0.25
DEFAULT_START_TIME = 0.2
DEFAULT_DAY_CYCLES = 1.0

SUN_COLOR_WARM = [1.00, 0.72, 0.40]
SUN_COLOR_NOON = [1.00, 0.95, 0.88]

SKY_NIGHT = [0.06, 0.08, 0.12]
SKY_DAWN = [0.68, 0.50, 0.72]
SKY_DAY = [0.71, 0.84, 1.00]
SKY_DUSK = [0.95, 0.62, 0.50]

# (time_of_day, color) keyframes; first and last are equal so the cycle wraps
SKY_KEYFRAMES = [
    (0.00, SKY_NIGHT),
    (0.20, SKY_NIGHT),
    (0.25, SKY_DAWN),
    (0.32, SKY_DAY),
    (0.68, SKY_DAY),
    (0.75, SKY_DUSK),
    (0.80, SKY_NIGHT),
    (1.00, SKY_NIGHT),
]

# Torches (point lights from emissive voxels)
TORCH_INTENSITY = 2.0
TORCH_RANGE = 10.0

# Material defaults
DEFAULT_SPECULAR = 0.04
DEFAULT_SHININESS = 32.0

# Ambient: sky above, dark ground bounce below, darkened in creases
GROUND_BOUNCE_COLOR = [0.08, 0.07, 0.06]
AO_PROBES = 3
AO_STEP = 0.15
AO_EPSILON = 1e-3
AO_REACH = 0.25
AO_STRENGTH = 0.22
AO_FLOOR = 0.5

# Sub-pixel samples per pixel
DEFAULT_SAMPLES = 1

# Scrolling texture speed for animated materials (UV units per animation second)
UV_SCROLL_SPEED = 0.2
