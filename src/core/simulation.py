from time import time
from typing import Callable, Optional

from cli import debug_log
from core.world import World


class Simulation:
    """
    Drives a World forward in time.

    In real time (`tick`), the world advances at a fixed number of ticks per
    second while the visualizer redraws at its own frame rate. Headless runs
    (`run`) advance as fast as possible.
    """

    def __init__(self, world: World, tps: float, dt: float, visualizer=None):
        self.world = world
        self.tps = tps
        self.tick_duration = 1.0 / tps
        self.dt = dt
        self.t = 0
        self.running = False
        self.stalled = False
        self.visualizer = visualizer

        # Separation between simulation and UI frame rates
        self.simulation_accumulator = 0.0
        self.last_frame_time = time()

    def tick(self):
        """
        Runs the simulation steps that are due since the last call, then
        refreshes the visualizer.
        """
        current_time = time()
        frame_time = current_time - self.last_frame_time
        self.last_frame_time = current_time

        # Limit frame_time to avoid the spiral of death
        if frame_time > 0.25:
            frame_time = 0.25

        self.simulation_accumulator += frame_time

        simulation_steps = 0
        max_steps = 5  # Avoid piling up steps when running late

        while self.simulation_accumulator >= self.tick_duration and simulation_steps < max_steps:
            self.internal_step()
            self.simulation_accumulator -= self.tick_duration
            simulation_steps += 1

        if self.visualizer:
            self.visualizer.update(self.world, self.t)
            if not self.visualizer.handle_events():
                self.running = False
        elif self.world.is_empty():
            self.running = False

    def internal_step(self):
        """A single simulation step of `dt` time units."""
        arrived = self.world.step(self.dt)
        self.t += 1
        for vehicle in arrived:
            debug_log(f"Tick {self.t}: vehicle {vehicle.id} reached road {vehicle.destination}")

    def run(self, ticks: Optional[int] = None, on_tick: Optional[Callable[["Simulation"], None]] = None):
        """
        Runs headless.

        Args:
            ticks: Number of steps to run. None runs until no vehicle is left,
                or until a step leaves every vehicle exactly as it was; the
                world can then never change again and `stalled` is set.
            on_tick: Called after every step with this simulation.
        """
        self.running = True
        self.stalled = False
        while self.running:
            if ticks is not None and self.t >= ticks:
                break
            if ticks is None and self.world.is_empty():
                break
            before = self.vehicle_states()
            self.internal_step()
            if on_tick:
                on_tick(self)
            if ticks is None and self.vehicle_states() == before:
                debug_log(f"Tick {self.t}: no vehicle moved, {len(self.world.vehicles)} will never arrive", "warning")
                self.stalled = True
                break
        self.running = False

    def vehicle_states(self):
        return [(v.id, v.on_road, v.position, v.velocity, v.stopping) for v in self.world.vehicles]
