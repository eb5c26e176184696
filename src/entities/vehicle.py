from typing import List, Optional, Sequence, Tuple


class Vehicle:
    """
    Represents a single vehicle in the traffic simulation.

    Each vehicle has a unique ID, a route computed once at creation, and
    kinematic state: the segment it is on, its position along that segment
    and its velocity. The route is never modified; a cursor marks the segment
    the vehicle currently occupies.
    """

    def __init__(self, vehicle_id: str, route: Sequence[int], position: float, velocity: float,
                 acceleration: float, break_deceleration: float, watch_distance: float,
                 destination: int, destination_position: float):
        """
        Initializes a new vehicle.

        Args:
            vehicle_id (str): A unique identifier for the vehicle.
            route (Sequence[int]): Segment handles from the starting segment to the
                                   destination segment, both included.
            position (float): Distance travelled along the starting segment.
            velocity (float): The vehicle's current speed.
            acceleration (float): Rate used while below the speed limit.
            break_deceleration (float): Maximum braking rate. Only its magnitude is used.
            watch_distance (float): How far ahead the vehicle senses obstacles.
            destination (int): Handle of the segment the vehicle must reach.
            destination_position (float): Where to stop on the destination segment.
        """
        if not route:
            raise ValueError(f"Vehicle {vehicle_id} needs a route with at least one road")

        self.id = vehicle_id
        self.route: Tuple[int, ...] = tuple(route)
        self.route_index = 0
        self.position = float(position)
        self.velocity = float(velocity)
        self.acceleration = float(acceleration)
        self.break_deceleration = abs(float(break_deceleration))
        self.watch_distance = float(watch_distance)
        self.destination = int(destination)
        self.destination_position = float(destination_position)
        self.arrived = False
        # Set while braking for the destination; released if the vehicle is held
        # to a stop short of it.
        self.stopping = False

        # The trailing-hazard entry this vehicle published: (road, key, speed).
        self.hazard: Optional[Tuple[int, int, float]] = None

    @property
    def on_road(self) -> int:
        """Handle of the segment the vehicle is on."""
        return self.route[self.route_index]

    @property
    def path(self) -> List[int]:
        """The segments still ahead of the vehicle, destination included."""
        return list(self.route[self.route_index + 1:])

    def next_target(self) -> Optional[int]:
        """
        Returns the next segment handle in the route without consuming it.

        Returns:
            The next handle, or None if the vehicle is on its last segment.
        """
        if self.route_index + 1 < len(self.route):
            return self.route[self.route_index + 1]
        return None

    def pop_next_target(self) -> Optional[int]:
        """
        Moves the cursor to the next segment of the route.

        This is called when the vehicle crosses the end of its current segment.

        Returns:
            The handle of the new current segment, or None if the route is exhausted.
        """
        target = self.next_target()
        if target is not None:
            self.route_index += 1
        return target

    def on_destination(self) -> bool:
        return self.on_road == self.destination

    def __str__(self):
        return f"Position: {self.position}\nVelocity: {self.velocity}\nAcceleration: {self.acceleration}"

    def __repr__(self):
        return (f"Vehicle(id={self.id!r}, on_road={self.on_road}, position={self.position:.3f}, "
                f"velocity={self.velocity:.3f}, path={self.path})")
