"""Command-line interface for Salatuk."""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from salatuk import __version__
from salatuk.domain.models import CalculationMethod, HighLatitudeRule, Madhab


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="salatuk",
        description="Prayer times, qibla direction and azan notifications",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"salatuk {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the web service")
    serve_parser.add_argument(
        "--host",
        "-H",
        default="0.0.0.0",
        help="Bind address (default: 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=8080,
        help="Port (default: 8080)",
    )
    serve_parser.add_argument(
        "--settings",
        "-s",
        type=Path,
        help="Settings file path",
    )
    serve_parser.add_argument(
        "--log-level",
        "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)",
    )

    # times command
    times_parser = subparsers.add_parser("times", help="Show prayer times")
    times_parser.add_argument("--lat", type=float, required=True, help="Latitude")
    times_parser.add_argument("--lng", type=float, required=True, help="Longitude")
    times_parser.add_argument(
        "--days",
        "-d",
        type=int,
        default=1,
        help="Number of days (default: 1)",
    )
    times_parser.add_argument(
        "--method",
        "-m",
        choices=[m.value for m in CalculationMethod],
        default=CalculationMethod.MUSLIM_WORLD_LEAGUE.value,
        help="Calculation method (default: muslim_world_league)",
    )
    times_parser.add_argument(
        "--madhab",
        choices=[m.value for m in Madhab],
        default=Madhab.SHAFI.value,
        help="Asr convention (default: shafi)",
    )
    times_parser.add_argument(
        "--high-latitude-rule",
        choices=[r.value for r in HighLatitudeRule],
        help="Fajr/isha bound at high latitudes (default: recommended for the latitude)",
    )
    times_parser.add_argument("--timezone", "-z", help="IANA time zone (default: looked up)")

    # qibla command
    qibla_parser = subparsers.add_parser("qibla", help="Show the qibla bearing")
    qibla_parser.add_argument("--lat", type=float, required=True, help="Latitude")
    qibla_parser.add_argument("--lng", type=float, required=True, help="Longitude")

    return parser


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the web server."""
    import uvicorn

    from salatuk.api.app import create_app
    from salatuk.config import setup_logging

    setup_logging(args.log_level)

    app = create_app(settings_path=args.settings)

    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


def cmd_times(args: argparse.Namespace) -> int:
    """Show prayer times."""
    from zoneinfo import ZoneInfoNotFoundError

    from salatuk.domain.errors import SalatukError
    from salatuk.domain.models import CalculationParameters, GeoCoordinate
    from salatuk.services.prayer_service import PrayerService

    try:
        location = GeoCoordinate(latitude=args.lat, longitude=args.lng)
        if args.high_latitude_rule:
            rule = HighLatitudeRule(args.high_latitude_rule)
        else:
            rule = HighLatitudeRule.recommended(location)
        parameters = CalculationParameters(
            method=CalculationMethod(args.method),
            madhab=Madhab(args.madhab),
            high_latitude_rule=rule,
        )
        service = PrayerService(location, parameters, timezone_name=args.timezone)
        now = datetime.now(service.timezone)
        times_list = service.calculate_range(now.date(), args.days)
    except SalatukError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except ZoneInfoNotFoundError:
        print(f"Error: unknown time zone {args.timezone}", file=sys.stderr)
        return 2

    print(f"\nLocation: {args.lat:.4f}, {args.lng:.4f}")
    print(f"Time zone: {service.timezone_name}")
    print(f"Method: {parameters.method.display_name} ({parameters.madhab.display_name} asr)")
    print(f"High-latitude rule: {parameters.high_latitude_rule.value}")
    print()

    print("=" * 72)
    print(
        f"{'Date':<12} {'Fajr':>8} {'Sunrise':>8} {'Dhuhr':>8} {'Asr':>8} "
        f"{'Maghrib':>8} {'Isha':>8}"
    )
    print("-" * 72)

    for times in times_list:
        print(
            f"{times.date.isoformat():<12} "
            f"{times.fajr.strftime('%H:%M'):>8} "
            f"{times.sunrise.strftime('%H:%M'):>8} "
            f"{times.dhuhr.strftime('%H:%M'):>8} "
            f"{times.asr.strftime('%H:%M'):>8} "
            f"{times.maghrib.strftime('%H:%M'):>8} "
            f"{times.isha.strftime('%H:%M'):>8}"
        )

    print("=" * 72)
    return 0


def cmd_qibla(args: argparse.Namespace) -> int:
    """Show the qibla bearing."""
    from salatuk.domain.errors import InvalidCoordinateError
    from salatuk.domain.geodesy import KAABA, qibla_bearing
    from salatuk.domain.models import GeoCoordinate

    try:
        location = GeoCoordinate(latitude=args.lat, longitude=args.lng)
    except InvalidCoordinateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"Location: {args.lat:.4f}, {args.lng:.4f}")
    print(f"Kaaba: {KAABA.latitude:.4f}, {KAABA.longitude:.4f}")
    print(f"Qibla: {qibla_bearing(location):.2f}° from true north")
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        # Serve by default
        args.command = "serve"
        args.host = "0.0.0.0"
        args.port = 8080
        args.settings = None
        args.log_level = "INFO"

    commands = {
        "serve": cmd_serve,
        "times": cmd_times,
        "qibla": cmd_qibla,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
