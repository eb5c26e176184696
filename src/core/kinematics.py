"""
Kinematics engine: advances one vehicle by one time step.

Each tick a vehicle withdraws the trailing-hazard entry it published on the
previous tick, looks for the nearest constraint ahead on its segment, picks a
regime (destination braking, obstacle braking or free acceleration), moves
with closed-form uniformly accelerated motion, crosses into the next segment
of its route if it passed the end of the current one, and finally publishes a
new trailing-hazard entry unless it has arrived.

Motion is exact within a tick: when the target speed is reached part way
through, the tick is split at that instant and the remainder is driven at
the target speed.
"""
import math

import config
from cli import debug_log
from core.errors import SimulationInvariantError
from core.graph import RoadNetwork
from entities.vehicle import Vehicle
from models.obstacles import Hazard, trailing_key
from models.segment import RoadSegment


def advance(vehicle: Vehicle, rate: float, target_speed: float, t: float):
    """
    Moves a vehicle for `t` time units at constant `rate` toward `target_speed`.

    A zero rate, or a vehicle already at the target speed, keeps the velocity
    constant for the whole tick.

    Raises:
        SimulationInvariantError: If `rate` points away from `target_speed`.
    """
    v0 = vehicle.velocity
    if rate == 0 or v0 == target_speed:
        vehicle.position += v0 * t
        return
    if (target_speed - v0) * rate < 0:
        raise SimulationInvariantError(
            f"Vehicle {vehicle.id}: rate {rate} moves away from target speed {target_speed} (velocity {v0})"
        )

    v1 = v0 + rate * t
    if (rate > 0 and v1 > target_speed) or (rate < 0 and v1 < target_speed):
        target_t = (target_speed - v0) / rate
        # Update position up to the moment the target speed is reached
        vehicle.position += v0 * target_t + rate * target_t ** 2 / 2
        vehicle.velocity = target_speed
        # Update position after reaching target
        vehicle.position += target_speed * (t - target_t)
    else:
        vehicle.position += v0 * t + rate * t ** 2 / 2
        vehicle.velocity = v1


def early_stop_distance(distance: float, velocity: float) -> float:
    """Shortens a braking distance by the speed-proportional early-stop margin, never below zero."""
    return max(distance - config.EARLY_STOP_FACTOR * velocity, 0.0)


def required_deceleration(vehicle: Vehicle, target_speed: float, distance: float) -> float:
    """
    Deceleration that brings a vehicle to `target_speed` within `distance`.

    This is (v^2 - target^2) / (2 * distance), capped at the vehicle's
    braking capacity. A distance that the early-stop margin reduces to zero
    uses the full capacity.
    """
    velocity = vehicle.velocity
    effective = early_stop_distance(distance, velocity)
    if effective > 0:
        return min((velocity ** 2 - target_speed ** 2) / (2 * effective), vehicle.break_deceleration)
    return vehicle.break_deceleration


def brake(vehicle: Vehicle, target_speed: float, distance: float, t: float):
    """Slows a vehicle down so that it reaches `target_speed` within `distance`."""
    velocity = vehicle.velocity
    if target_speed > velocity:
        raise SimulationInvariantError(
            f"Vehicle {vehicle.id} cannot brake from {velocity} toward the higher speed {target_speed}"
        )
    advance(vehicle, -required_deceleration(vehicle, target_speed, distance), target_speed, t)


def safe_speed(vehicle: Vehicle, hazard: Hazard) -> float:
    """Highest speed from which full braking still meets the hazard at its speed."""
    effective = early_stop_distance(hazard.distance, vehicle.velocity)
    return math.sqrt(hazard.speed ** 2 + 2 * vehicle.break_deceleration * effective)


def cruise(vehicle: Vehicle, segment: RoadSegment, hazard: Hazard, t: float):
    """
    Accelerates toward the speed limit, or holds it.

    With a hazard in range the target is also capped at the speed from which
    the hazard can still be met, so a vehicle already at the hazard's speed
    does not speed up past it.
    """
    limit = segment.speed_limit
    if hazard.distance > 0:
        limit = min(limit, safe_speed(vehicle, hazard))

    if vehicle.velocity < limit:
        advance(vehicle, vehicle.acceleration, limit, t)
    elif vehicle.velocity > limit:
        advance(vehicle, -vehicle.break_deceleration, limit, t)
    else:
        advance(vehicle, 0.0, limit, t)


def stopping_distance(vehicle: Vehicle) -> float:
    """Distance at which braking for the destination starts: v^2 / deceleration."""
    if vehicle.velocity == 0:
        return 0.0
    if vehicle.break_deceleration == 0:
        return math.inf
    return vehicle.velocity ** 2 / vehicle.break_deceleration


def cross_segment_ends(vehicle: Vehicle, network: RoadNetwork) -> RoadSegment:
    """
    Moves a vehicle past the end of its segment onto the next segments of its route.

    The distance driven beyond the end is carried over into the next segment.
    Entering a segment caps the velocity at its speed limit. A vehicle on its
    destination segment never leaves it.

    Returns:
        The segment the vehicle is on afterwards.

    Raises:
        SimulationInvariantError: If the route ends before the destination.
    """
    segment = network.segment(vehicle.on_road)
    while vehicle.position >= segment.length and not vehicle.on_destination():
        previous = vehicle.on_road
        next_road = vehicle.pop_next_target()
        if next_road is None:
            raise SimulationInvariantError(
                f"Vehicle {vehicle.id} ran out of route on road {previous} "
                f"before reaching road {vehicle.destination}"
            )
        vehicle.position -= segment.length
        segment = network.segment(next_road)
        vehicle.velocity = min(vehicle.velocity, segment.speed_limit)
        debug_log(f"Vehicle {vehicle.id} moved from road {previous} to road {next_road}")
    return segment


def has_arrived(vehicle: Vehicle) -> bool:
    """
    True once the vehicle stands still near its destination position.

    While braking for the destination, speeds up to ARRIVAL_SPEED_TOLERANCE
    count as standing still; otherwise the vehicle must be fully stopped.
    """
    if not vehicle.on_destination():
        return False
    if vehicle.position < vehicle.destination_position - config.ARRIVAL_WINDOW:
        return False
    if vehicle.stopping:
        return vehicle.velocity <= config.ARRIVAL_SPEED_TOLERANCE
    return vehicle.velocity == 0


def publish_hazard(vehicle: Vehicle, network: RoadNetwork):
    """Inserts the vehicle's trailing-hazard entry on its current segment."""
    key = trailing_key(vehicle.position)
    network.segment(vehicle.on_road).obstacles.insert(key, vehicle.velocity)
    vehicle.hazard = (vehicle.on_road, key, vehicle.velocity)


def withdraw_hazard(vehicle: Vehicle, network: RoadNetwork):
    """Removes the trailing-hazard entry the vehicle published last, if any."""
    if vehicle.hazard is None:
        return
    road, key, speed = vehicle.hazard
    network.segment(road).obstacles.remove(key, speed)
    vehicle.hazard = None


def update_vehicle(vehicle: Vehicle, network: RoadNetwork, t: float):
    """
    Advances a vehicle by one tick of duration `t`.

    Destination braking starts once the distance left is shorter than
    v^2 / deceleration and then holds until the vehicle stops. A hazard
    closer than the destination that needs harder braking takes over for
    that tick.
    Sets `vehicle.arrived` when the vehicle has stopped at its destination;
    such a vehicle leaves no trailing-hazard entry behind.
    """
    if t < 0:
        raise SimulationInvariantError(f"Time step must not be negative, got {t}")

    withdraw_hazard(vehicle, network)
    segment = cross_segment_ends(vehicle, network)
    hazard = segment.obstacles.nearest_ahead(vehicle.position, vehicle.watch_distance)

    if vehicle.stopping and vehicle.velocity == 0:
        # Held up short of the arrival window; drive on once the way is clear.
        vehicle.stopping = False

    remaining = vehicle.destination_position - vehicle.position
    hazard_ahead = hazard.distance > 0 and vehicle.velocity > hazard.speed
    if vehicle.on_destination() and (vehicle.stopping or remaining < stopping_distance(vehicle)):
        vehicle.stopping = True
        if hazard_ahead and hazard.distance < remaining and (
                required_deceleration(vehicle, hazard.speed, hazard.distance)
                > required_deceleration(vehicle, 0.0, remaining)):
            brake(vehicle, hazard.speed, hazard.distance, t)
        else:
            brake(vehicle, 0.0, remaining, t)
    elif hazard_ahead:
        brake(vehicle, hazard.speed, hazard.distance, t)
    else:
        cruise(vehicle, segment, hazard, t)

    cross_segment_ends(vehicle, network)

    if has_arrived(vehicle):
        vehicle.velocity = 0.0
        vehicle.arrived = True
        debug_log(f"Vehicle {vehicle.id} arrived on road {vehicle.on_road} at {vehicle.position:.2f}")
    else:
        publish_hazard(vehicle, network)
