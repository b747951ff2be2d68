import argparse
import sys

from tesla_usb_formatter.domain.models import PartitionSpec, TeslaConfig
from tesla_usb_formatter.logging import LoggerFactory, setup_logging
from tesla_usb_formatter.services import commands
from tesla_usb_formatter.storage.planner import (
    recommend_partitions,
    recommend_tesla_config,
)
from tesla_usb_formatter.storage.registry import DeviceRegistry
from tesla_usb_formatter.storage.requirements import get_tesla_requirements


def parse_partition(value):
    """Parse NAME:SIZE_GB[:FILESYSTEM[:PURPOSE]] into a PartitionSpec."""
    parts = value.split(":")
    if len(parts) < 2 or len(parts) > 4:
        raise argparse.ArgumentTypeError(
            f"expected NAME:SIZE_GB[:FILESYSTEM[:PURPOSE]], got {value!r}"
        )
    data = {"name": parts[0], "size_gb": parts[1]}
    if len(parts) > 2:
        data["filesystem"] = parts[2]
    if len(parts) > 3:
        data["purpose"] = parts[3]
    try:
        return PartitionSpec.from_dict(data)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from error


def build_parser():
    parser = argparse.ArgumentParser(
        prog="tesla-usb-formatter",
        description="Partition and format a USB drive for Tesla dashcam, music and light shows",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Also log raw tool output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List removable devices")

    info = subparsers.add_parser("info", help="Show details for one device")
    info.add_argument("device", help="Device path (e.g. /dev/sdb, /dev/disk4, E:)")

    recommend = subparsers.add_parser("recommend", help="Suggest a partition layout")
    recommend.add_argument("size_gb", type=int, help="Total device size in GB")

    subparsers.add_parser("requirements", help="Show the Tesla USB requirements")

    tesla = subparsers.add_parser("format-tesla", help="Format a device for Tesla")
    tesla.add_argument("device", help="Device path")
    tesla.add_argument("--dashcam", type=int, default=None, help="Dashcam partition size in GB")
    tesla.add_argument("--sentry", type=int, default=0, help="Sentry mode size in GB")
    tesla.add_argument("--music", type=int, default=None, help="Music partition size in GB")
    tesla.add_argument("--lightshow", type=int, default=None, help="Light show partition size in GB")
    tesla.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    custom = subparsers.add_parser("partition", help="Create a custom partition layout")
    custom.add_argument("device", help="Device path")
    custom.add_argument(
        "--part",
        dest="partitions",
        action="append",
        type=parse_partition,
        required=True,
        metavar="NAME:SIZE_GB[:FS[:PURPOSE]]",
        help="Partition to create; repeat in on-disk order",
    )
    custom.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    return parser


def confirm(prompt, assume_yes=False):
    if assume_yes:
        return True
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _report(result):
    stream = sys.stdout if result.success else sys.stderr
    print(result.message, file=stream)
    return 0 if result.success else 1


def _print_requirements():
    requirements = get_tesla_requirements()
    print(f"Minimum device size:     {requirements.min_total_size_gb} GB")
    print(f"Minimum dashcam size:    {requirements.min_dashcam_size_gb} GB")
    print(f"Recommended write speed: {requirements.recommended_write_speed_mbps} MB/s")
    print(
        "Supported filesystems:   "
        + ", ".join(fs.value for fs in requirements.supported_filesystems)
    )
    print("Required folders:")
    for folder in requirements.required_folders:
        print(f"  {folder}")


def _tesla_config(args, device):
    """Fill sizes left unset on the command line from the recommended config."""
    recommended = recommend_tesla_config(device.size_gb)

    def pick(value, default):
        return default if value is None else value

    return TeslaConfig(
        dashcam_size_gb=pick(args.dashcam, recommended.dashcam_size_gb),
        sentry_size_gb=args.sentry,
        music_size_gb=pick(args.music, recommended.music_size_gb),
        lightshow_size_gb=pick(args.lightshow, recommended.lightshow_size_gb),
    )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(debug=args.debug, trace=args.trace)
    log = LoggerFactory.for_system()
    log.debug(f"Command: {args.command}")

    if args.command == "recommend":
        if args.size_gb < 0:
            parser.error("size_gb must not be negative")
        for spec in recommend_partitions(args.size_gb):
            print(f"{spec.name:<16} {spec.size_gb:>5} GB  {spec.filesystem.value}")
        return 0

    if args.command == "requirements":
        _print_requirements()
        return 0

    if args.command == "info":
        result = commands.get_device_info(args.device)
        return _report(result)

    registry = DeviceRegistry()
    listing = commands.get_usb_devices(registry)

    if args.command == "list":
        if not listing.data:
            print("No removable devices found")
        for device in listing.data:
            print(device.format_label())
        return 0

    if args.device not in registry:
        print(f"Device not found: {args.device}", file=sys.stderr)
        return 1
    device = registry.get(args.device)

    if args.command == "format-tesla":
        try:
            config = _tesla_config(args, device)
        except ValueError as error:
            parser.error(str(error))
        summary = ", ".join(
            f"{label} {size} GB"
            for label, size in (
                ("dashcam", config.dashcam_size_gb),
                ("music", config.music_size_gb),
                ("lightshow", config.lightshow_size_gb),
            )
            if size
        )
        if not confirm(
            f"ALL DATA on {device.format_label()} will be erased ({summary}). Continue?",
            args.yes,
        ):
            print("Aborted")
            return 1
        return _report(commands.format_tesla_usb(registry, device.path, config))

    if args.command == "partition":
        summary = ", ".join(f"{spec.name} {spec.size_gb} GB" for spec in args.partitions)
        if not confirm(
            f"ALL DATA on {device.format_label()} will be erased ({summary}). Continue?",
            args.yes,
        ):
            print("Aborted")
            return 1
        return _report(
            commands.create_custom_partitions(registry, device.path, args.partitions)
        )

    parser.error(f"Unknown command {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
