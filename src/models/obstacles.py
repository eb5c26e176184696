"""
Per-segment obstacle tracking.

Every road segment owns an ObstacleMap: a sparse index from a longitudinal
position to the speed that must not be exceeded when reaching it. Two kinds
of entries share the map:

- the permanent end-of-segment entry, keyed at the segment length and holding
  the segment's end speed limit;
- transient trailing-hazard entries, one per vehicle on the segment, keyed a
  little behind the vehicle and holding the vehicle's current velocity.

Keys are fixed-point integers (position * POSITION_SCALE, rounded), so an
entry is always removed with exactly the key it was inserted with.
"""
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

import config
from core.errors import SimulationInvariantError


class Hazard(NamedTuple):
    """The nearest constraint ahead of a vehicle: how far away and how fast."""
    distance: float
    speed: float


# Returned when nothing lies within the watch distance. A distance of 0 means
# "ignore", never "obstacle at the vehicle's own position".
NO_HAZARD = Hazard(0.0, 0.0)


def quantize(position: float) -> int:
    """Converts a position to its fixed-point obstacle key."""
    return int(round(position * config.POSITION_SCALE))


def key_to_position(key: int) -> float:
    return key / config.POSITION_SCALE


def trailing_key(position: float) -> int:
    """
    Key of the trailing-hazard entry for a vehicle at `position`.

    The entry lags the vehicle by OBSTACLE_EPSILON + RUN_BEHIND_MARGIN so that
    a follower aims for a point behind the leader rather than at it.
    """
    return quantize(position) - quantize(config.OBSTACLE_EPSILON) - quantize(config.RUN_BEHIND_MARGIN)


class ObstacleMap:
    """
    Sparse position -> speed index of one road segment.

    Several vehicles may publish the same key; the effective speed at a key is
    the lowest of the speeds stored there.
    """

    def __init__(self, end_position: float, end_speed: float):
        self.end_key = quantize(end_position)
        self.end_speed = float(end_speed)
        self._entries: Dict[int, List[float]] = {}

    def insert(self, key: int, speed: float):
        """Publishes a transient entry."""
        self._entries.setdefault(key, []).append(float(speed))

    def remove(self, key: int, speed: float):
        """
        Withdraws a transient entry previously published with `insert`.

        The end-of-segment entry is not stored among the transient entries and
        can never be removed.

        Raises:
            SimulationInvariantError: If no such entry was published.
        """
        speeds = self._entries.get(key)
        if not speeds or speed not in speeds:
            raise SimulationInvariantError(
                f"No obstacle entry at {key_to_position(key)} with speed {speed} to remove"
            )
        speeds.remove(speed)
        if not speeds:
            del self._entries[key]

    def speed_at(self, key: int) -> Optional[float]:
        """Returns the effective speed at `key`, or None if nothing is stored there."""
        candidates = list(self._entries.get(key, ()))
        if key == self.end_key:
            candidates.append(self.end_speed)
        return min(candidates) if candidates else None

    def keys(self) -> List[int]:
        keys = set(self._entries)
        keys.add(self.end_key)
        return sorted(keys)

    def items(self) -> Iterator[Tuple[float, float]]:
        """Yields (position, effective speed) pairs ordered by position."""
        for key in self.keys():
            yield key_to_position(key), self.speed_at(key)

    def transient_count(self) -> int:
        return sum(len(speeds) for speeds in self._entries.values())

    def nearest_ahead(self, position: float, watch_distance: float) -> Hazard:
        """
        Finds the closest entry within [position, position + watch_distance].

        Returns:
            The Hazard of that entry, or NO_HAZARD if none lies in range.
        """
        horizon = position + watch_distance
        best_key = None
        best_distance = None
        for key in self.keys():
            key_position = key_to_position(key)
            if key_position < position or key_position > horizon:
                continue
            distance = key_position - position
            if best_distance is None or distance < best_distance:
                best_key, best_distance = key, distance

        if best_key is None:
            return NO_HAZARD
        return Hazard(best_distance, self.speed_at(best_key))
