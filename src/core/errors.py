"""
Exceptions raised by the simulation core.

Configuration errors are raised while a world is being built or loaded and
abort that load. Invariant errors are raised during a tick and abort the run.
"""


class SimulationError(Exception):
    """Base class for every error raised by the simulation core."""


class ConfigurationError(SimulationError, ValueError):
    """The world description is malformed or inconsistent."""


class NoRouteError(ConfigurationError):
    """No sequence of segments leads from the start segment to the destination."""

    def __init__(self, start: int, destination: int):
        super().__init__(f"No route found from road {start} to road {destination}")
        self.start = start
        self.destination = destination


class SimulationInvariantError(SimulationError, RuntimeError):
    """The simulation reached a state its design rules out."""
