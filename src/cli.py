import argparse
from typing import Optional, Sequence

import config

LOG_COLORS = {
    "info": "\033[94m",  # Blue
    "warning": "\033[93m",  # Yellow
    "error": "\033[91m",  # Red
}
RESET_COLOR = "\033[0m"


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the traffic simulation.

    This function sets up the argument parser, defines the expected command-line
    flags, validates the provided inputs and applies the overrides to the
    global configuration.

    Args:
        argv: The arguments to parse. Defaults to sys.argv[1:].

    Returns:
        An argparse.Namespace object containing the parsed arguments.
        - world (str | None): Path to a JSON world file, None for the sample world.
        - ticks (int | None): Number of ticks to run headless, None to run until empty.
        - dt (float): Simulated time advanced by each tick.
        - tps (float): Ticks per second of the real-time loop.
        - visualizer (bool): Flag to enable the graphical visualizer.
        - map_image (str | None): Where to save a drawing of the road network.
        - early_stop (float | None): Override for the early-stop braking factor.
        - debug (bool): Flag to enable debug mode.
    """
    parser = argparse.ArgumentParser(
        description="Run a microscopic traffic simulation on a directed road network.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  python main.py --ticks 20
  python main.py --world data/worlds/sample.json --dt 0.1 --visualizer
  python main.py --world data/worlds/branching.json --map-image branching.png --debug
        """
    )

    # World definition; the built-in sample world is used when omitted.
    parser.add_argument(
        "--world",
        type=str,
        default=None,
        help="Path to the .json file defining the roads and vehicles (default: sample world)."
    )

    # Headless run length.
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Number of ticks to simulate, printing the vehicles after each one\n"
             "(default: until every vehicle has arrived)."
    )

    # Simulated time per tick.
    parser.add_argument(
        "--dt",
        type=float,
        default=config.DEFAULT_TIME_STEP,
        help=f"Simulated time advanced by each tick (default: {config.DEFAULT_TIME_STEP})."
    )

    # Optional argument for real-time simulation speed.
    parser.add_argument(
        "--tps",
        type=float,
        default=config.DEFAULT_TPS,
        help=f"Ticks Per Second when running with the visualizer (default: {config.DEFAULT_TPS})."
    )

    # Optional flag to enable the Pygame visualizer.
    parser.add_argument(
        "--visualizer",
        action="store_true",
        help="Enable the graphical visualizer."
    )

    parser.add_argument(
        "--map-image",
        type=str,
        default=None,
        help="Save a drawing of the road network to this file before running."
    )

    parser.add_argument(
        "--early-stop",
        type=float,
        default=None,
        help=f"Early-stop braking margin per unit of speed (default: {config.EARLY_STOP_FACTOR})."
    )

    # Optional flag for verbose logging.
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable detailed debug logging to the console."
    )

    args = parser.parse_args(argv)

    # Validate arguments.
    if args.dt < 0:
        parser.error("--dt must not be negative.")
    if args.tps <= 0:
        parser.error("--tps must be a positive number.")
    if args.ticks is not None and args.ticks < 0:
        parser.error("--ticks must not be negative.")
    if args.early_stop is not None and args.early_stop < 0:
        parser.error("--early-stop must not be negative.")

    # Set the global flags based on the parsed arguments.
    config.DEBUG = args.debug
    if args.early_stop is not None:
        config.EARLY_STOP_FACTOR = args.early_stop

    return args


def debug_log(message: str, level: str = "info"):
    """
    Prints a message to the console if debug mode is enabled.

    Warnings and errors are tagged with their level so they stand out in
    long per-tick traces.

    Args:
        message (str): The message to log.
        level (str): The log level ('info', 'warning', 'error'). Affects the color and tag.
    """
    if not config.DEBUG:
        return
    level = level.lower()
    color = LOG_COLORS.get(level, "")
    reset = RESET_COLOR if color else ""
    tag = "[DEBUG]" if level == "info" else f"[DEBUG:{level.upper()}]"
    print(f"{color}{tag} {message}{reset}")
