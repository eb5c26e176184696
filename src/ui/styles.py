"""
Visual configuration and color schemes for the traffic simulation visualizer.
"""


class Colors:
    """Color palette for the visualizer"""

    # Background
    BG = (15, 23, 42)  # Dark blue-gray

    # Roads
    ROAD_BASE = (71, 85, 105)
    ROAD_HOVER = (100, 116, 139)
    ROAD_END = (234, 179, 8)  # End-of-road speed restriction marker

    # Vehicles (slow -> fast)
    VEHICLE_STOPPED = (239, 68, 68)  # Red
    VEHICLE_FAST = (34, 197, 94)  # Green
    HAZARD = (148, 163, 184)

    # UI Elements
    TEXT = (241, 245, 249)  # Light gray
    TEXT_DIM = (148, 163, 184)
    INFO_BG = (30, 41, 59, 230)  # Semi-transparent
    INFO_BORDER = (51, 65, 85)


class Sizes:
    """Size constants for visual elements"""

    ROAD_WIDTH = 6
    ROAD_WIDTH_HOVER = 9
    ROAD_END_RADIUS = 4

    VEHICLE_RADIUS = 6
    HAZARD_TICK = 5

    ARROW_SIZE = 10

    # UI
    INFO_PADDING = 12
    INFO_LINE_HEIGHT = 22
    MARGIN = 60
    HOVER_THRESHOLD = 10


class Fonts:
    """Font configuration"""

    MEDIUM = 20
    SMALL = 16
    TINY = 14


class Animation:
    """Animation and timing constants"""

    ZOOM_SPEED = 0.1

    # Target FPS
    TARGET_FPS = 60
