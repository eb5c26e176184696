"""
Builds worlds from deserialized world descriptions.

A description is a mapping with two lists, `roads` and `vehicles`:

    {
      "roads": [
        {"from": [x, y, z], "to": [x, y, z], "lanes": 1, "speed_limit": 100,
         "upstream_segment_indices": [1], "downstream_segment_indices": [1],
         "end_speed_limit": 10}
      ],
      "vehicles": [
        {"position": 0, "velocity": 0, "acceleration": 5, "brake_deceleration": 10,
         "on_road": 0, "watch_distance": 200, "destination": 1,
         "destination_position": 250}
      ]
    }

The keys `from_road`, `to_road` and `break_deceleration` are accepted as
aliases of `upstream_segment_indices`, `downstream_segment_indices` and
`brake_deceleration`.
"""
import json
from typing import Any, Mapping, Optional, Sequence

from cli import debug_log
from core.errors import ConfigurationError
from core.world import World

ROAD_FIELDS = {
    "from": ("from",),
    "to": ("to",),
    "lanes": ("lanes",),
    "speed_limit": ("speed_limit",),
    "incoming": ("upstream_segment_indices", "from_road"),
    "outgoing": ("downstream_segment_indices", "to_road"),
    "end_speed_limit": ("end_speed_limit",),
}

VEHICLE_FIELDS = {
    "position": ("position",),
    "velocity": ("velocity",),
    "acceleration": ("acceleration",),
    "break_deceleration": ("brake_deceleration", "break_deceleration"),
    "on_road": ("on_road",),
    "watch_distance": ("watch_distance",),
    "destination": ("destination",),
    "destination_position": ("destination_position",),
}


def _field(entry: Mapping[str, Any], names: Sequence[str], where: str) -> Any:
    for name in names:
        if name in entry:
            return entry[name]
    raise ConfigurationError(f"{where}: missing field '{names[0]}'")


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{where}: expected a number, found {value!r}")
    return float(value)


def _index(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{where}: expected a road index, found {value!r}")
    return value


def _point(value: Any, where: str) -> tuple:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ConfigurationError(f"{where}: expected [x, y, z], found {value!r}")
    return tuple(_number(c, where) for c in value)


def _indices(value: Any, where: str) -> list:
    # Older world files write a single index instead of a list.
    if isinstance(value, int) and not isinstance(value, bool):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"{where}: expected a list of road indices, found {value!r}")
    return [_index(v, where) for v in value]


def build_world(data: Mapping[str, Any]) -> World:
    """
    Creates a new world from a description.

    Raises:
        ConfigurationError: If the description is malformed or inconsistent,
            including unreachable vehicle destinations.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"World description must be an object, found {type(data).__name__}")

    world = World()

    for i, road in enumerate(data.get("roads", [])):
        where = f"road {i}"
        if not isinstance(road, Mapping):
            raise ConfigurationError(f"{where}: expected an object")
        world.add_road(
            start=_point(_field(road, ROAD_FIELDS["from"], where), where),
            end=_point(_field(road, ROAD_FIELDS["to"], where), where),
            lanes=_index(_field(road, ROAD_FIELDS["lanes"], where), where),
            speed_limit=_number(_field(road, ROAD_FIELDS["speed_limit"], where), where),
            incoming=_indices(_field(road, ROAD_FIELDS["incoming"], where), where),
            outgoing=_indices(_field(road, ROAD_FIELDS["outgoing"], where), where),
            end_speed_limit=_number(_field(road, ROAD_FIELDS["end_speed_limit"], where), where),
        )
    world.network.validate()

    for i, vehicle in enumerate(data.get("vehicles", [])):
        where = f"vehicle {i}"
        if not isinstance(vehicle, Mapping):
            raise ConfigurationError(f"{where}: expected an object")
        values = {
            name: _field(vehicle, names, where)
            for name, names in VEHICLE_FIELDS.items()
        }
        world.add_vehicle(
            position=_number(values["position"], where),
            velocity=_number(values["velocity"], where),
            acceleration=_number(values["acceleration"], where),
            break_deceleration=_number(values["break_deceleration"], where),
            on_road=_index(values["on_road"], where),
            watch_distance=_number(values["watch_distance"], where),
            destination=_index(values["destination"], where),
            destination_position=_number(values["destination_position"], where),
        )

    return world


def load_world(data: Mapping[str, Any], world: Optional[World] = None) -> World:
    """
    Replaces the contents of `world` with the described roads and vehicles.

    The description is built into a fresh world first, so a configuration
    error leaves `world` exactly as it was.

    Returns:
        `world`, or the new world when none was given.
    """
    loaded = build_world(data)
    debug_log(f"World loaded: {len(loaded.roads)} roads, {len(loaded.vehicles)} vehicles")
    if world is None:
        return loaded
    world.replace_with(loaded)
    return world


def import_world(file_path: str, world: Optional[World] = None) -> World:
    """Loads a world description from a JSON file."""
    with open(file_path, "r") as f:
        content = f.read()

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{file_path} is not valid JSON: {e}") from e

    return load_world(data, world)
