"""
Main visualizer class for the traffic simulation.
Draws the road network and the vehicles of a World, handles user input and
view controls. It only reads the world; it never changes it.
"""
from typing import List, Optional, Tuple

import pygame

from core.world import World
from ui.geometry import ViewTransform, get_arrow_points, lerp_color, point_to_segment_distance, project
from ui.styles import Animation, Colors, Fonts, Sizes


class Visualizer:
    """
    Orchestrates the visualization of a running simulation.
    """

    def __init__(self, world: World, width: int = 1400, height: int = 900):
        pygame.init()
        self.width = width
        self.height = height
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption("Traffic Simulation")

        self.world = world
        self.current_tick = 0
        self.view = ViewTransform(width, height)
        self.hovered_road: Optional[int] = None

        self.font_medium = pygame.font.SysFont("Arial", Fonts.MEDIUM, bold=True)
        self.font_small = pygame.font.SysFont("Arial", Fonts.SMALL)
        self.font_tiny = pygame.font.SysFont("Arial", Fonts.TINY)

        self._panning = False
        self._pan_last = (0, 0)

        self._fit_view_to_content()
        self.clock = pygame.time.Clock()

    def _fit_view_to_content(self):
        """Adjusts the view so the entire network is visible."""
        points = [project(p) for road in self.world.roads for p in (road.start, road.end)]
        self.view.fit_bounds(points, margin=Sizes.MARGIN)

    def _road_on_screen(self, index: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        road = self.world.roads[index]
        return self.view.world_to_screen(road.start), self.view.world_to_screen(road.end)

    def _check_road_hover(self, mouse_pos: Tuple[int, int]) -> Optional[int]:
        """Returns the road closest to the mouse, if it is within the hover threshold."""
        best, best_distance = None, None
        for index in range(len(self.world.roads)):
            start, end = self._road_on_screen(index)
            distance = point_to_segment_distance(mouse_pos, start, end)
            if distance <= Sizes.HOVER_THRESHOLD and (best_distance is None or distance < best_distance):
                best, best_distance = index, distance
        return best

    def update(self, world: World, current_tick: int):
        """
        Called by the simulation loop to redraw the screen.
        The world is passed each time because loading replaces its content.
        """
        self.world = world
        self.current_tick = current_tick
        self.hovered_road = self._check_road_hover(pygame.mouse.get_pos())
        self._render()
        self.clock.tick(Animation.TARGET_FPS)

    def _render(self):
        self.screen.fill(Colors.BG)

        for index in range(len(self.world.roads)):
            self._draw_road(index)
        self._draw_vehicles()

        self._draw_text(f"Tick: {self.current_tick}", (20, 20), self.font_medium, Colors.TEXT)
        self._draw_text(f"Time: {self.world.time:.1f}   Vehicles: {len(self.world.vehicles)}",
                        (20, 48), self.font_small, Colors.TEXT_DIM)
        self._draw_controls_help()

        if self.hovered_road is not None:
            self._draw_road_info(pygame.mouse.get_pos(), self.hovered_road)

        pygame.display.flip()

    def _draw_road(self, index: int):
        """Draws a road with its direction arrow, end marker and hazard ticks."""
        road = self.world.roads[index]
        start, end = self._road_on_screen(index)
        hovered = index == self.hovered_road
        width = Sizes.ROAD_WIDTH_HOVER if hovered else Sizes.ROAD_WIDTH
        color = Colors.ROAD_HOVER if hovered else Colors.ROAD_BASE

        pygame.draw.line(self.screen, color, start, end, width)
        if start != end:
            pygame.draw.polygon(self.screen, Colors.TEXT_DIM, get_arrow_points(start, end, Sizes.ARROW_SIZE))
        pygame.draw.circle(self.screen, Colors.ROAD_END, end, Sizes.ROAD_END_RADIUS)

        for position, _speed in road.obstacles.items():
            if 0 <= position < road.length:
                x, y = self.view.world_to_screen(road.point_at(position))
                pygame.draw.line(self.screen, Colors.HAZARD, (x, y - Sizes.HAZARD_TICK),
                                 (x, y + Sizes.HAZARD_TICK), 1)

    def _draw_vehicles(self):
        """Draws every vehicle at its placement, colored by its share of the speed limit."""
        for placement in self.world.snapshot():
            limit = self.world.roads[placement.road].speed_limit
            ratio = placement.velocity / limit if limit > 0 else 0.0
            color = lerp_color(Colors.VEHICLE_STOPPED, Colors.VEHICLE_FAST, ratio)
            pygame.draw.circle(self.screen, color, self.view.world_to_screen(placement.point),
                               Sizes.VEHICLE_RADIUS)

    def _draw_text(self, text: str, pos: Tuple[int, int], font, color):
        self.screen.blit(font.render(text, True, color), pos)

    def _draw_controls_help(self):
        """Displays help text for view controls."""
        y = 76
        for line in ("L-Click + Drag: Pan", "Wheel: Zoom", "R: Reset View", "Esc: Quit"):
            self._draw_text(line, (20, y), self.font_tiny, Colors.TEXT_DIM)
            y += 15

    def _draw_road_info(self, mouse_pos: Tuple[int, int], index: int):
        """Draws a semi-transparent box describing the hovered road."""
        road = self.world.roads[index]
        lines: List[str] = road.get_infos()
        lines.append(f"Next roads:  {road.outgoing}")
        lines.extend(f"  @ {position:7.1f}  max {speed:.1f}" for position, speed in road.obstacles.items())

        rendered = [self.font_medium.render(f"Road {index}", True, Colors.TEXT)]
        rendered.extend(self.font_small.render(line, True, Colors.TEXT_DIM) for line in lines)

        padding = Sizes.INFO_PADDING
        box_w = max(surf.get_width() for surf in rendered) + padding * 2
        box_h = len(rendered) * Sizes.INFO_LINE_HEIGHT + padding

        x, y = mouse_pos[0] + 15, mouse_pos[1] + 15
        sw, sh = self.screen.get_size()
        x = min(x, sw - box_w - 10)
        y = min(y, sh - box_h - 10)

        background = pygame.Surface((box_w, box_h), pygame.SRCALPHA)
        background.fill(Colors.INFO_BG)
        pygame.draw.rect(background, Colors.INFO_BORDER, background.get_rect(), 1)
        self.screen.blit(background, (x, y))

        for i, surf in enumerate(rendered):
            self.screen.blit(surf, (x + padding, y + padding / 2 + i * Sizes.INFO_LINE_HEIGHT))

    def handle_events(self) -> bool:
        """
        Processes all user input from the Pygame event queue.
        Returns False if the simulation should exit.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            elif event.type == pygame.VIDEORESIZE:
                self.width, self.height = event.w, event.h
                self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
                self.view.width, self.view.height = self.width, self.height
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                if event.key == pygame.K_r:
                    self._fit_view_to_content()
            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button in (1, 2):
                    self._panning = True
                    self._pan_last = event.pos
                elif event.button == 4:
                    self.view.zoom_at(event.pos, 1 + Animation.ZOOM_SPEED)  # Scroll up
                elif event.button == 5:
                    self.view.zoom_at(event.pos, 1 / (1 + Animation.ZOOM_SPEED))  # Scroll down
            elif event.type == pygame.MOUSEBUTTONUP:
                if event.button in (1, 2):
                    self._panning = False
            elif event.type == pygame.MOUSEMOTION and self._panning:
                self.view.pan(event.pos[0] - self._pan_last[0], event.pos[1] - self._pan_last[1])
                self._pan_last = event.pos
        return True

    @staticmethod
    def close():
        """Shuts down Pygame."""
        pygame.quit()
