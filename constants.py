# constants.py
"""
Application-level constants.

These values are static and do not change between runs. Every numeric
parameter of the animation lives here and doubles as the default for the
matching key in `config.json`, so an empty config section reproduces the
stock look and feel.
"""
import math

# --- Population ---
PARTICLE_COUNT = 300
PARTICLE_SIZE_MIN = 2.0
PARTICLE_SIZE_MAX = 24.0
# Initial velocity components are drawn from [-1, 1] and scaled by this.
INITIAL_VELOCITY_SCALE = 1.0
BASE_LIGHTNESS = 60.0
INITIAL_SATURATION = 70.0

# --- Kinematics ---
MAX_PARTICLE_SPEED = 1.0

# --- Color / shape oscillator ---
HUE_STEP = 5.0
SATURATION_CENTER = 75.0
SATURATION_AMPLITUDE = 25.0
# The saturation wave runs slower than the hue cycle.
SATURATION_FREQUENCY = 0.1
SHAPE_ROTATION_STEP = 0.02  # radians per frame
SHAPE_CHANGE_INTERVAL = 1   # frames
WIGGLE_STEP = 0.1
WIGGLE_MAGNITUDE = 0.3
# Triangle side length relative to particle size.
TRIANGLE_RATIO = 1.5

# --- Smoothing of displayed size / lightness ---
SMOOTHING_RATE = 0.1
SMOOTHING_SNAP_EPSILON = 0.05

# --- Pointer interaction ---
INTERACTION_RADIUS = 150.0
DIRECT_ATTRACTION_FACTOR = 0.02
SWIRL_FACTOR = 0.01
# Pointers closer than this (squared distance) exert no force.
COINCIDENCE_EPSILON_SQ = 0.001
POINTER_LIGHTNESS_BOOST = 30.0
POINTER_SIZE_BOOST = 4.0
# Reserved pointer id for the mouse; touch ids are never negative.
MOUSE_ID = -1

# --- Audio ---
AUDIO_LIGHTNESS_BOOST = 20.0
AUDIO_SIZE_BOOST = 5.0
# Average byte energy that maps to an audio factor of 1.0.
AUDIO_REFERENCE_LEVEL = 128.0
FFT_SIZE = 256
AUDIO_SAMPLE_RATE = 44100
AUDIO_SMOOTHING = 0.8
AUDIO_MIN_DECIBELS = -100.0
AUDIO_MAX_DECIBELS = -30.0

# --- Visualization settings ---
FULLSCREEN = False
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
FPS = 60
BACKGROUND_COLOR = (0, 0, 0)
# One of "feedback", "trail" or "clear".
COMPOSITE_MODE = "feedback"
FEEDBACK_ROTATION = 0.005  # radians per frame
FEEDBACK_ZOOM = 1.01
# Alpha value for the trail fill (0-255). Lower is a longer trail.
TRAIL_ALPHA = 25
COMPOSITE_MODES = ("feedback", "trail", "clear")

TWO_PI = 2.0 * math.pi
