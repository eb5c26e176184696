"""
Global configuration settings for the simulation.

This file contains global variables that can be accessed and modified by
different parts of the application. The DEBUG flag and the driving tunables
are set here and can be overridden via command-line arguments in cli.py.
Values are read at call time, so changing them affects the next tick.
"""

# When True, enables detailed logging and other debugging features.
# This value is typically set at runtime by the argument parser.
DEBUG = False

# --- Obstacle tracking ---
# Obstacle map keys are fixed-point integers: position * POSITION_SCALE, rounded.
POSITION_SCALE = 10
# Trailing-hazard key = round(position) - OBSTACLE_EPSILON - RUN_BEHIND_MARGIN.
OBSTACLE_EPSILON = 0.1
RUN_BEHIND_MARGIN = 5.0

# --- Braking ---
# Early-stop margin subtracted from a braking distance, per unit of speed.
EARLY_STOP_FACTOR = 0.1

# --- Arrival ---
# A vehicle is accepted as arrived from destination_position - ARRIVAL_WINDOW on.
ARRIVAL_WINDOW = 10.0
# Speeds at or below this count as standing still for the arrival check.
ARRIVAL_SPEED_TOLERANCE = 0.05

# --- Run loop ---
DEFAULT_TIME_STEP = 1.0
DEFAULT_TPS = 20.0
