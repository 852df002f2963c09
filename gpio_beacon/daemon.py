"""Daemon entry point for gpio_beacon.

Configures the requested input pins, then polls them once per tick and
broadcasts their state until SIGTERM/SIGQUIT/SIGINT.
"""

from __future__ import annotations

from typing import List, Optional
import argparse
import logging
import signal

from .broadcast import BroadcastTransmitter, DEFAULT_PORT
from .config import BeaconConfig, load_config_mapping
from .errors import BeaconError, ConfigError
from .packet import MAX_PINS
from .runtime import BeaconRuntime
from .state import StateAggregator
from .sysfs import SysfsPinReader, configure_input

LOGGER = logging.getLogger(__name__)

DEBUG_VERBOSITY = 9


def gpio_number(token: str) -> int:
    """argparse type for a GPIO number in the mask range."""
    try:
        pin = int(token)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid GPIO: {token!r}") from None
    if not 0 <= pin < MAX_PINS:
        raise argparse.ArgumentTypeError(f"GPIO {pin} out of range (0-{MAX_PINS - 1})")
    return pin


def port_number(token: str) -> int:
    """argparse type for a UDP port."""
    try:
        port = int(token)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {token!r}") from None
    if not 1 <= port <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"port {port} out of range (1-65535)")
    return port


class VerbosityAction(argparse.Action):
    """Record -d/-q/-v in command-line order so the last one wins.

    Each occurrence appends ``(op, amount)`` where op is ``"set"`` or ``"add"``.
    """

    def __init__(self, option_strings, dest, op: str = "add", amount: int = 1, **kwargs) -> None:
        kwargs.setdefault("nargs", 0)
        super().__init__(option_strings, dest, **kwargs)
        self.op = op
        self.amount = amount

    def __call__(self, parser, namespace, values, option_string=None) -> None:
        steps = list(getattr(namespace, self.dest, None) or [])
        steps.append((self.op, self.amount))
        setattr(namespace, self.dest, steps)


def apply_verbosity(base: int, steps) -> int:
    verbosity = base
    for op, amount in steps or []:
        verbosity = amount if op == "set" else verbosity + amount
    return verbosity


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gpio-beacon",
        description="Broadcast GPIO input states as UDP packets",
    )
    parser.add_argument("pins", nargs="*", type=gpio_number, metavar="gpio", help="GPIO already configured as input")
    parser.add_argument("-c", "--config", default=None, help="YAML config file")
    parser.add_argument(
        "-d",
        "--debug",
        dest="verbosity_steps",
        action=VerbosityAction,
        op="set",
        amount=DEBUG_VERBOSITY,
        default=[],
        help="print debug output",
    )
    parser.add_argument(
        "-i",
        "--input",
        dest="inputs",
        action="append",
        type=gpio_number,
        default=[],
        metavar="PIN",
        help="configure and use PIN as an input pin",
    )
    parser.add_argument(
        "-p", "--port", type=port_number, default=None, help=f"broadcast to PORT instead of {DEFAULT_PORT}"
    )
    parser.add_argument(
        "-q",
        "--quiet",
        dest="verbosity_steps",
        action=VerbosityAction,
        op="set",
        amount=0,
        help="turn off all non-critical logging output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbosity_steps",
        action=VerbosityAction,
        op="add",
        amount=1,
        help="increase logging verbosity",
    )
    parser.add_argument("--heartbeat", type=int, default=None, help="transmit at least every N ticks")
    parser.add_argument("--interval", type=float, default=None, help="seconds between ticks")
    parser.add_argument("--sysfs-root", default=None, help="GPIO sysfs directory")
    parser.add_argument("--broadcast-address", default=None, help="destination address")
    return parser


def build_config(args: argparse.Namespace) -> BeaconConfig:
    """Merge the config file (if any) with command-line overrides."""
    values = load_config_mapping(args.config) if args.config else {}
    config = BeaconConfig(**values)

    if args.pins:
        config.pins = list(args.pins)
    config.inputs = list(config.inputs) + list(args.inputs)
    if args.port is not None:
        config.port = args.port
    if args.heartbeat is not None:
        config.heartbeat = args.heartbeat
    if args.interval is not None:
        config.interval = args.interval
    if args.sysfs_root is not None:
        config.sysfs_root = args.sysfs_root
    if args.broadcast_address is not None:
        config.broadcast_address = args.broadcast_address

    config.verbosity = apply_verbosity(config.verbosity, args.verbosity_steps)
    return config.validate()


def level_for_verbosity(verbosity: int) -> int:
    if verbosity >= DEBUG_VERBOSITY:
        return logging.DEBUG
    if verbosity >= 2:
        return logging.INFO
    if verbosity == 1:
        return logging.WARNING
    return logging.ERROR


def configure_logging(verbosity: int) -> None:
    """Set up basic logging for the daemon."""
    logging.basicConfig(level=level_for_verbosity(verbosity), format="%(asctime)s %(levelname)s %(message)s")


def create_runtime(config: BeaconConfig) -> BeaconRuntime:
    return BeaconRuntime(
        StateAggregator(config.pin_set),
        SysfsPinReader(config.sysfs_root),
        BroadcastTransmitter(config.port, config.broadcast_address),
        heartbeat=config.heartbeat,
        interval=config.interval,
    )


def install_signal_handlers(runtime: BeaconRuntime) -> None:
    for signum in (signal.SIGTERM, signal.SIGQUIT, signal.SIGINT):
        signal.signal(signum, runtime.request_stop)
    signal.signal(signal.SIGPIPE, signal.SIG_IGN)
    signal.signal(signal.SIGHUP, signal.SIG_IGN)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for running the daemon."""
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    try:
        config = build_config(args)
    except ConfigError as exc:
        parser.error(str(exc))
    configure_logging(config.verbosity)

    try:
        for pin in config.inputs:
            configure_input(pin, config.sysfs_root)
        runtime = create_runtime(config)
        install_signal_handlers(runtime)
        runtime.run()
    except BeaconError as exc:
        LOGGER.critical("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
