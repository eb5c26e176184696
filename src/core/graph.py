import math
from typing import List, Optional, Sequence

import networkx as nx
import matplotlib.pyplot as plt

from core.errors import ConfigurationError
from models.segment import RoadSegment


class RoadNetwork:
    """
    Represents the road network as an arena of directed road segments.

    Segments are addressed by stable integer handles (their insertion index)
    and are never reordered or removed during a run. Adjacency lists hold
    handles only. A NetworkX DiGraph view of the network, with one node per
    segment, is built on demand for route planning.
    """

    def __init__(self):
        self.segments: List[RoadSegment] = []
        self._routing_graph: Optional[nx.DiGraph] = None

    def add_segment(self, segment: RoadSegment) -> int:
        """Adds a segment and returns its handle."""
        self.segments.append(segment)
        self._routing_graph = None
        return len(self.segments) - 1

    def segment(self, index: int) -> RoadSegment:
        """
        Retrieves a segment by handle.

        Raises:
            ConfigurationError: If no segment has this handle.
        """
        if not self.has_segment(index):
            raise ConfigurationError(f"Road {index} does not exist ({len(self.segments)} roads defined)")
        return self.segments[index]

    def has_segment(self, index) -> bool:
        return isinstance(index, int) and 0 <= index < len(self.segments)

    def get_adjacent(self, index: int) -> List[int]:
        """Returns the handles of the segments reachable after `index`."""
        return self.segment(index).outgoing

    def gap_between(self, index_1: int, index_2: int) -> float:
        """Distance from the end of one segment to the start of another."""
        return math.dist(self.segment(index_1).end, self.segment(index_2).start)

    def end_distance(self, index_1: int, index_2: int) -> float:
        """Distance between the end points of two segments."""
        return math.dist(self.segment(index_1).end, self.segment(index_2).end)

    def validate(self):
        """
        Checks that every adjacency entry refers to an existing segment.

        Raises:
            ConfigurationError: On the first dangling reference.
        """
        for index, segment in enumerate(self.segments):
            for kind, handles in (("incoming", segment.incoming), ("outgoing", segment.outgoing)):
                for handle in handles:
                    if not self.has_segment(handle):
                        raise ConfigurationError(
                            f"Road {index} lists {kind} road {handle}, which does not exist"
                        )

    def routing_graph(self) -> nx.DiGraph:
        """
        Returns the DiGraph used for route planning.

        Each edge (i, j) carries a `gap` attribute: the distance between the
        end of segment i and the start of segment j.
        """
        if self._routing_graph is None:
            self.validate()
            graph = nx.DiGraph()
            graph.add_nodes_from(range(len(self.segments)))
            for index, segment in enumerate(self.segments):
                for next_index in segment.outgoing:
                    graph.add_edge(index, next_index, gap=self.gap_between(index, next_index))
            self._routing_graph = graph
        return self._routing_graph

    def show_map(self, file_path: str, highlight: Sequence[int] = ()):
        """
        Generates and saves a top-down (x, y) drawing of the network to a file.

        Args:
            file_path: Where to write the image.
            highlight: Handles of segments to draw emphasized (e.g. a route).
        """
        fig, ax = plt.subplots(figsize=(10, 8))

        for index, segment in enumerate(self.segments):
            color = "tomato" if index in highlight else "steelblue"
            ax.annotate(
                "",
                xy=segment.end[:2],
                xytext=segment.start[:2],
                arrowprops=dict(arrowstyle="->", color=color, lw=2),
            )
            mid = segment.point_at(segment.length / 2)
            ax.text(mid[0], mid[1], str(index), fontsize=10, fontweight="bold",
                    ha="center", va="center")

        points = [p for s in self.segments for p in (s.start, s.end)]
        if points:
            xs = [p[0] for p in points]
            ys = [p[1] for p in points]
            margin = max(max(xs) - min(xs), max(ys) - min(ys), 1.0) * 0.05
            ax.set_xlim(min(xs) - margin, max(xs) + margin)
            ax.set_ylim(min(ys) - margin, max(ys) + margin)

        ax.set_title("Road Network (Real Coordinates)")
        ax.set_aspect("equal")
        fig.savefig(file_path)
        plt.close(fig)

    def __len__(self):
        return len(self.segments)
