"""
Route planning over the road network.

A route is the ordered list of segment handles a vehicle drives through, from
its starting segment to its destination segment, both included.
"""
from typing import List

import networkx as nx

from cli import debug_log
from core.errors import ConfigurationError, NoRouteError
from core.graph import RoadNetwork


def find_route(network: RoadNetwork, start: int, destination: int) -> List[int]:
    """
    Calculates the shortest route between two segments using the A* algorithm.

    The cost of moving from a segment to one of its successors is the gap
    between the end of the first and the start of the second. The heuristic
    is the distance between the end of a segment and the end of the
    destination segment: a practical estimate rather than a strict lower
    bound. Equal priorities are resolved in insertion order, so a given
    network always yields the same route.

    Args:
        network: The road network to search.
        start: Handle of the segment the vehicle is on.
        destination: Handle of the segment the vehicle must reach.

    Returns:
        The list of segment handles, starting with `start` and ending with
        `destination`.

    Raises:
        ConfigurationError: If `start` or `destination` is not a segment.
        NoRouteError: If `destination` cannot be reached from `start`.
    """
    for handle in (start, destination):
        if not network.has_segment(handle):
            raise ConfigurationError(f"Road {handle} does not exist ({len(network)} roads defined)")

    def end_point_heuristic(u, v):
        # Heuristic function for A*: estimates the distance to the target.
        return network.end_distance(u, v)

    try:
        route = nx.astar_path(
            network.routing_graph(),
            start,
            destination,
            heuristic=end_point_heuristic,
            weight="gap"
        )
    except nx.NetworkXNoPath:
        debug_log(f"Road {destination} is unreachable from road {start}", "warning")
        raise NoRouteError(start, destination)

    debug_log(f"Route from road {start} to road {destination}: {route}")
    return route
