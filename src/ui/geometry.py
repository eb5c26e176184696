"""
Geometric utilities for drawing the road network on screen.

World coordinates are 3-D; the visualizer shows the (x, y) plane with the
y axis pointing up.
"""

import math
from typing import Sequence, Tuple

Point2D = Tuple[float, float]


def project(point: Sequence[float]) -> Point2D:
    """Drops the z coordinate of a world point."""
    return (float(point[0]), float(point[1]))


def point_to_segment_distance(point: Point2D, seg_start: Point2D, seg_end: Point2D) -> float:
    """Calculate the distance from a point to a line segment"""
    px, py = point
    x1, y1 = seg_start
    x2, y2 = seg_end

    length_sq = (x2 - x1) ** 2 + (y2 - y1) ** 2
    if length_sq == 0:
        return math.hypot(px - x1, py - y1)

    # Project point onto the segment
    t = max(0.0, min(1.0, ((px - x1) * (x2 - x1) + (py - y1) * (y2 - y1)) / length_sq))
    return math.hypot(px - (x1 + t * (x2 - x1)), py - (y1 + t * (y2 - y1)))


def get_arrow_points(start: Point2D, end: Point2D, size: float = 10) -> list:
    """
    Calculate the three points of an arrow head placed at the middle of a line.

    :param start: Line start point
    :param end: Line end point
    :param size: Arrow size
    :return: List of 3 points forming the arrow head
    """
    angle = math.atan2(end[1] - start[1], end[0] - start[0])
    mid_x = (start[0] + end[0]) / 2
    mid_y = (start[1] + end[1]) / 2

    return [
        (mid_x, mid_y),
        (mid_x - size * math.cos(angle - math.pi / 6),
         mid_y - size * math.sin(angle - math.pi / 6)),
        (mid_x - size * math.cos(angle + math.pi / 6),
         mid_y - size * math.sin(angle + math.pi / 6)),
    ]


def lerp_color(color1: Tuple[int, int, int], color2: Tuple[int, int, int], t: float) -> Tuple[int, int, int]:
    """Linear interpolation between two RGB colors, with t clamped to [0, 1]."""
    t = max(0.0, min(1.0, t))
    return tuple(int(a + t * (b - a)) for a, b in zip(color1, color2))


class ViewTransform:
    """
    Maps world (x, y) coordinates to screen pixels and back.

    The view is centered on (`x`, `y`) in world space, scaled by `zoom`
    pixels per world unit, with the world y axis pointing up on screen.
    """

    def __init__(self, width: int, height: int, min_zoom: float = 0.05, max_zoom: float = 20.0):
        self.width = width
        self.height = height
        self.x = 0.0
        self.y = 0.0
        self.zoom = 1.0
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom

    def world_to_screen(self, world_pos: Sequence[float]) -> Tuple[int, int]:
        wx, wy = world_pos[0], world_pos[1]
        screen_x = (wx - self.x) * self.zoom + self.width / 2
        screen_y = self.height / 2 - (wy - self.y) * self.zoom
        return (int(round(screen_x)), int(round(screen_y)))

    def screen_to_world(self, screen_pos: Sequence[float]) -> Point2D:
        sx, sy = screen_pos
        world_x = (sx - self.width / 2) / self.zoom + self.x
        world_y = (self.height / 2 - sy) / self.zoom + self.y
        return (world_x, world_y)

    def fit_bounds(self, points: Sequence[Sequence[float]], margin: float = 60):
        """Centers the view on `points` and zooms so they all fit inside the margin."""
        if not points:
            return
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        self.x = (min(xs) + max(xs)) / 2
        self.y = (min(ys) + max(ys)) / 2

        range_x = max(xs) - min(xs)
        range_y = max(ys) - min(ys)
        zooms = []
        if range_x > 0:
            zooms.append((self.width - 2 * margin) / range_x)
        if range_y > 0:
            zooms.append((self.height - 2 * margin) / range_y)
        zoom = min(zooms) if zooms else 1.0
        self.zoom = max(self.min_zoom, min(self.max_zoom, zoom))

    def zoom_at(self, screen_pos: Sequence[float], factor: float):
        """Zooms by `factor` while keeping the world point under `screen_pos` in place."""
        before = self.screen_to_world(screen_pos)
        self.zoom = max(self.min_zoom, min(self.max_zoom, self.zoom * factor))
        after = self.screen_to_world(screen_pos)
        self.x += before[0] - after[0]
        self.y += before[1] - after[1]

    def pan(self, dx_pixels: float, dy_pixels: float):
        self.x -= dx_pixels / self.zoom
        self.y += dy_pixels / self.zoom
