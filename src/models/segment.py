import math
from typing import List, Sequence, Tuple

from models.obstacles import ObstacleMap

Point = Tuple[float, float, float]


class RoadSegment:
    """
    A directed road unit of the network.

    The geometry (`start`, `end`) and the limits are fixed at creation; the
    only state that changes during a run is the obstacle map. Adjacency is
    stored as segment indices into the owning RoadNetwork.
    """

    def __init__(self, start: Sequence[float], end: Sequence[float], lanes: int, speed_limit: float,
                 end_speed_limit: float, incoming: Sequence[int] = (), outgoing: Sequence[int] = ()):
        """
        Initializes a road segment.

        Args:
            start: The (x, y, z) point where the segment begins.
            end: The (x, y, z) point where the segment ends.
            lanes: The number of lanes (informational, no overtaking).
            speed_limit: The maximum speed allowed on the segment.
            end_speed_limit: The speed a vehicle must have slowed to by the end.
            incoming: Indices of the segments leading into this one.
            outgoing: Indices of the segments reachable after this one.
        """
        self.start: Point = tuple(float(c) for c in start)
        self.end: Point = tuple(float(c) for c in end)
        self.length = math.dist(self.start, self.end)
        self.lanes = int(lanes)
        self.speed_limit = float(speed_limit)
        self.end_speed_limit = float(end_speed_limit)
        # Ordered and duplicate-free.
        self.incoming: List[int] = list(dict.fromkeys(int(i) for i in incoming))
        self.outgoing: List[int] = list(dict.fromkeys(int(i) for i in outgoing))

        self.obstacles = ObstacleMap(self.length, self.end_speed_limit)

    def point_at(self, position: float) -> Point:
        """Interpolates the 3-D point `position` units along the segment."""
        if self.length == 0:
            return self.start
        ratio = position / self.length
        return tuple(s + (e - s) * ratio for s, e in zip(self.start, self.end))

    def get_infos(self) -> list:
        """Returns a list of strings with details about the segment."""
        return [
            f"Length:      {self.length:.1f}",
            f"Lanes:       {self.lanes}",
            f"Speed limit: {self.speed_limit:.1f}",
            f"End limit:   {self.end_speed_limit:.1f}",
            f"Vehicles:    {self.obstacles.transient_count()}",
        ]

    def __str__(self):
        return f"Length: {self.length}\nLanes: {self.lanes}\nSpeed Limit: {self.speed_limit}"

    def __repr__(self):
        return (f"RoadSegment(start={self.start}, end={self.end}, lanes={self.lanes}, "
                f"speed_limit={self.speed_limit}, end_speed_limit={self.end_speed_limit}, "
                f"incoming={self.incoming}, outgoing={self.outgoing})")
