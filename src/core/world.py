from typing import List, NamedTuple, Sequence, Tuple

from cli import debug_log
from core.errors import ConfigurationError, SimulationInvariantError
from core.graph import RoadNetwork
from core.kinematics import publish_hazard, update_vehicle
from core.routing import find_route
from entities.vehicle import Vehicle
from models.segment import RoadSegment


class VehiclePlacement(NamedTuple):
    """Where a vehicle is, as read by presentation layers once per tick."""
    vehicle_id: str
    road: int
    position: float
    velocity: float
    point: Tuple[float, float, float]


class World:
    """
    Owns the road network and the vehicles driving on it.

    Vehicles are kept in insertion order and advanced in that order every
    tick; vehicles that arrived during a tick are removed together once all
    vehicles have moved, so list indices shift after a removal.
    """

    def __init__(self):
        self.network = RoadNetwork()
        self.vehicles: List[Vehicle] = []
        self.time = 0.0
        self.tick_count = 0
        self._vehicle_counter = 0

    @property
    def roads(self) -> List[RoadSegment]:
        return self.network.segments

    def add_road(self, start: Sequence[float], end: Sequence[float], lanes: int, speed_limit: float,
                 incoming: Sequence[int], outgoing: Sequence[int], end_speed_limit: float) -> int:
        """Adds a road segment and returns its handle."""
        return self.network.add_segment(
            RoadSegment(start, end, lanes, speed_limit, end_speed_limit, incoming, outgoing)
        )

    def add_vehicle(self, position: float, velocity: float, acceleration: float, break_deceleration: float,
                    on_road: int, watch_distance: float, destination: int,
                    destination_position: float) -> Vehicle:
        """
        Creates a vehicle, plans its route and places it on the network.

        Raises:
            ConfigurationError: If a parameter is out of range or a road does not exist.
            NoRouteError: If the destination cannot be reached from `on_road`.
        """
        start_road = self.network.segment(on_road)
        destination_road = self.network.segment(destination)

        for name, value in (("position", position), ("velocity", velocity),
                            ("acceleration", acceleration), ("watch_distance", watch_distance)):
            if value < 0:
                raise ConfigurationError(f"Vehicle {name} must not be negative, got {value}")
        if velocity > start_road.speed_limit:
            raise ConfigurationError(
                f"Vehicle velocity {velocity} exceeds the speed limit {start_road.speed_limit} of road {on_road}"
            )
        if not 0 <= destination_position <= destination_road.length:
            raise ConfigurationError(
                f"Destination position {destination_position} is outside road {destination} "
                f"(length {destination_road.length:.2f})"
            )

        route = find_route(self.network, on_road, destination)

        vehicle = Vehicle(
            vehicle_id=f"V{self._vehicle_counter}",
            route=route,
            position=position,
            velocity=velocity,
            acceleration=acceleration,
            break_deceleration=break_deceleration,
            watch_distance=watch_distance,
            destination=destination,
            destination_position=destination_position,
        )
        self._vehicle_counter += 1
        publish_hazard(vehicle, self.network)
        self.vehicles.append(vehicle)
        debug_log(f"Vehicle {vehicle.id} added with path: {vehicle.path}")
        return vehicle

    def replace_with(self, other: "World"):
        """Takes over the roads, vehicles and clock of another world."""
        self.network = other.network
        self.vehicles = other.vehicles
        self.time = other.time
        self.tick_count = other.tick_count
        self._vehicle_counter = other._vehicle_counter

    def step(self, t: float) -> List[Vehicle]:
        """
        Advances the whole world by one tick of duration `t`.

        Returns:
            The vehicles that arrived during this tick, already removed.
        """
        if t < 0:
            raise SimulationInvariantError(f"Time step must not be negative, got {t}")

        for vehicle in self.vehicles:
            update_vehicle(vehicle, self.network, t)

        arrived = [vehicle for vehicle in self.vehicles if vehicle.arrived]
        if arrived:
            self.vehicles = [vehicle for vehicle in self.vehicles if not vehicle.arrived]
            for vehicle in arrived:
                debug_log(f"Vehicle {vehicle.id} removed after {self.time + t:.2f} time units")

        self.time += t
        self.tick_count += 1
        return arrived

    def is_empty(self) -> bool:
        return not self.vehicles

    def placement(self, vehicle: Vehicle) -> VehiclePlacement:
        segment = self.network.segment(vehicle.on_road)
        return VehiclePlacement(
            vehicle.id, vehicle.on_road, vehicle.position, vehicle.velocity, segment.point_at(vehicle.position)
        )

    def snapshot(self) -> List[VehiclePlacement]:
        """Returns the placement of every vehicle, in vehicle order."""
        return [self.placement(vehicle) for vehicle in self.vehicles]

    def __str__(self):
        return f"Roads: {self.roads!r}\nVehicles: {self.vehicles!r}"


def sample_world() -> World:
    """
    Creates a small world with two opposite roads and two vehicles.

    Returns:
        A World whose vehicles each drive to the other road.
    """
    world = World()
    world.add_road((0.0, 10.0, 0.0), (500.0, 10.0, 0.0), 1, 100.0, [1], [1], 10.0)
    world.add_road((500.0, -10.0, 0.0), (0.0, -10.0, 0.0), 1, 100.0, [0], [0], 10.0)
    world.add_vehicle(0.0, 0.0, 5.0, -10.0, 0, 200.0, 1, 250.0)
    world.add_vehicle(0.0, 0.0, 4.0, -7.0, 1, 250.0, 0, 311.0)
    return world
