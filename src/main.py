"""
Main entry point for the traffic simulation application.

This script handles command-line argument parsing, world loading,
and the initialization of the main simulation loop.
"""
from typing import Optional, Sequence

from cli import parse_arguments, debug_log
from core.errors import ConfigurationError
from core.fs.loader import import_world
from core.simulation import Simulation
from core.world import World, sample_world


def print_vehicles(simulation: Simulation):
    """Prints one line per vehicle: id, velocity, position and road."""
    print(f"After tick {simulation.t} (t = {simulation.world.time:.2f})")
    for vehicle in simulation.world.vehicles:
        print(f"{vehicle.id}\t{vehicle.velocity:.3f}\t{vehicle.position:.3f}\troad {vehicle.on_road}")


def load(file_path: Optional[str]) -> World:
    if file_path is None:
        print("Loading the sample world...\n")
        return sample_world()
    print(f"Loading world from '{file_path}'...\n")
    return import_world(file_path)


def run_simulation(world: World, dt: float, tps: float, ticks: Optional[int], show_viz: bool,
                   map_image: Optional[str] = None) -> Simulation:
    """
    Runs the traffic simulation on an already loaded world.

    Args:
        world (World): The world to simulate.
        dt (float): Simulated time advanced by each tick.
        tps (float): Ticks per second of the real-time loop (visualizer only).
        ticks (int | None): Number of ticks to run; None runs until every vehicle arrived.
        show_viz (bool): If True, the graphical visualizer will be enabled.
        map_image (str | None): If given, a drawing of the network is saved there first.
    """
    print(f"World loaded: {len(world.roads)} roads, {len(world.vehicles)} vehicles")
    for vehicle in world.vehicles:
        debug_log(f"Vehicle {vehicle.id} on road {vehicle.on_road}, path: {vehicle.path}")

    if map_image:
        print("\nGenerating network map image...")
        world.network.show_map(map_image)
        print(f"Map image saved to {map_image}")

    simulation = Simulation(world, tps, dt)

    if show_viz:
        from ui.visualizer import Visualizer

        print("\nInitializing visualizer...")
        simulation.visualizer = Visualizer(world)
        print(f"\nLaunching simulation at {tps} TPS... (Press Ctrl+C to stop)")
        simulation.running = True
        try:
            while simulation.running:
                if ticks is not None and simulation.t >= ticks:
                    break
                simulation.tick()
        except KeyboardInterrupt:
            print("\nSimulation interrupted by user.")
        finally:
            simulation.visualizer.close()
    else:
        try:
            simulation.run(ticks, on_tick=print_vehicles)
        except KeyboardInterrupt:
            print("\nSimulation interrupted by user.")
        if simulation.stalled:
            print("\nNo vehicle can move any more; stopping.")

    print(f"\nSimulation finished after {simulation.t} ticks, {len(world.vehicles)} vehicles remaining.")
    return simulation


def main(argv: Optional[Sequence[str]] = None) -> int:
    # Parse command-line arguments.
    args = parse_arguments(argv)

    debug_log(f"World file: {args.world or 'sample'}")
    debug_log(f"dt: {args.dt}, TPS: {args.tps}, ticks: {args.ticks}")
    debug_log(f"Visualizer enabled: {args.visualizer}")

    try:
        world = load(args.world)
    except (ConfigurationError, OSError) as e:
        print(f"Cannot load world: {e}")
        return 2

    run_simulation(
        world=world,
        dt=args.dt,
        tps=args.tps,
        ticks=args.ticks,
        show_viz=args.visualizer,
        map_image=args.map_image,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
