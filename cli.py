"""
AlphaInsight CLI - resolve insight validity windows against a trading calendar.

Usage:
    python cli.py resolve TICKER [--generated TIME] (--period SPAN | --resolution RES --bars N
                                  | --close-local TIME | --expiry NAME) [--format FORMAT]
    python cli.py period --generated TIME --close TIME
"""

import argparse
import json
import logging
import re
import sys
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv

from adapters import exchange_hours_from_config
from config import AlphaInsightConfig, ConfigError, load_config
from domain import Insight, InsightDirection, InsightType, Resolution, compute_period
from domain.expiry import EXPIRY_FUNCTIONS
from ports import InsightError
from presentation import format_insight, generate_markdown_table, to_json

logger = logging.getLogger(__name__)

_SPAN_PATTERN = re.compile(
    r"^(?:(?P<days>\d+)d)?(?:(?P<hours>\d+)h)?(?:(?P<minutes>\d+)m)?(?:(?P<seconds>\d+)s)?$"
)


def parse_period(text: str) -> timedelta:
    """
    Parse a duration.

    Accepts plain seconds ("90"), clock notation ("01:30:00") or unit
    notation ("1d6h30m").
    """
    text = text.strip().lower()
    if text.isdigit():
        return timedelta(seconds=int(text))

    if ":" in text:
        parts = [int(p) for p in text.split(":")]
        if len(parts) != 3:
            raise ValueError(f"Invalid clock duration: {text}")
        hours, minutes, seconds = parts
        return timedelta(hours=hours, minutes=minutes, seconds=seconds)

    match = _SPAN_PATTERN.match(text)
    if not text or not match:
        raise ValueError(f"Invalid duration: {text}")
    return timedelta(**{unit: int(value) for unit, value in match.groupdict().items() if value})


def parse_time(text: str) -> datetime:
    """Parse an ISO timestamp; aware values are converted to naive UTC."""
    value = datetime.fromisoformat(text)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _configure_logging(config: AlphaInsightConfig) -> None:
    logging.basicConfig(level=config.logging.level, format=config.logging.format)


def _load(args: argparse.Namespace) -> AlphaInsightConfig:
    config = load_config(args.config)
    _configure_logging(config)
    return config


def build_insight(args: argparse.Namespace, config: AlphaInsightConfig) -> Insight:
    """Create the insight described by the command-line arguments."""
    factory = Insight.price if args.type == InsightType.PRICE.value else Insight.volatility
    insight = factory(
        args.ticker,
        InsightDirection[args.direction.upper()],
        period=parse_period(args.period) if args.period else None,
        resolution=Resolution(args.resolution) if args.resolution else None,
        bar_count=args.bars,
        close_time_local=datetime.fromisoformat(args.close_local) if args.close_local else None,
        expiry=EXPIRY_FUNCTIONS[args.expiry] if args.expiry else None,
        magnitude=args.magnitude,
        confidence=args.confidence,
        source_model=args.source_model or config.defaults.source_model,
        weight=args.weight,
    )
    insight.source = config.defaults.source
    insight.generated_time_utc = (
        parse_time(args.generated) if args.generated
        else datetime.now(timezone.utc).replace(tzinfo=None)
    )
    return insight


def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve one insight's period and close time."""
    config = _load(args)
    exchange_hours = exchange_hours_from_config(config.exchange)

    insight = build_insight(args, config)
    insight.set_period_and_close_time(exchange_hours)
    logger.info(f"Resolved {insight.id.hex} against {exchange_hours!r}")

    if args.format == "json":
        print(json.dumps(to_json([insight]), indent=2, default=str))
    elif args.format == "markdown":
        print(generate_markdown_table([insight]))
    else:
        print(format_insight(insight))

    return 0


def cmd_period(args: argparse.Namespace) -> int:
    """Compute the calendar-aware period between two UTC instants."""
    config = _load(args)
    exchange_hours = exchange_hours_from_config(config.exchange)

    period = compute_period(exchange_hours, parse_time(args.generated), parse_time(args.close))
    print(period)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="alphainsight",
        description="Resolve trading insight validity windows against an exchange calendar",
    )
    parser.add_argument("-c", "--config", help="Path to TOML config file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Resolve command
    resolve_parser = subparsers.add_parser("resolve", help="Resolve an insight's close time")
    resolve_parser.add_argument("ticker", help="Instrument ticker")
    resolve_parser.add_argument("-g", "--generated", help="Generation time (ISO, UTC if naive); default now")
    resolve_parser.add_argument(
        "-d", "--direction",
        choices=[d.name.lower() for d in InsightDirection],
        default="up",
        help="Predicted direction",
    )
    resolve_parser.add_argument(
        "--type",
        choices=[t.value for t in InsightType],
        default=InsightType.PRICE.value,
        help="Insight type",
    )
    validity = resolve_parser.add_mutually_exclusive_group(required=True)
    validity.add_argument("-p", "--period", help="Duration: seconds, HH:MM:SS or 1d2h30m")
    validity.add_argument("-r", "--resolution", choices=[r.value for r in Resolution], help="Bar resolution")
    validity.add_argument("--close-local", help="Exchange-local close time (ISO)")
    validity.add_argument("--expiry", choices=sorted(EXPIRY_FUNCTIONS), help="Named expiry rule")
    resolve_parser.add_argument("-n", "--bars", type=int, help="Bar count (with --resolution)")
    resolve_parser.add_argument("--magnitude", type=float, help="Predicted change in percent")
    resolve_parser.add_argument("--confidence", type=float, help="Confidence 0-1")
    resolve_parser.add_argument("--weight", type=float, help="Portfolio weight")
    resolve_parser.add_argument("--source-model", help="Source model label")
    resolve_parser.add_argument(
        "-f", "--format",
        choices=["text", "json", "markdown"],
        default="text",
        help="Output format",
    )
    resolve_parser.set_defaults(func=cmd_resolve)

    # Period command
    period_parser = subparsers.add_parser("period", help="Compute period between two instants")
    period_parser.add_argument("-g", "--generated", required=True, help="Generation time (ISO, UTC if naive)")
    period_parser.add_argument("--close", required=True, help="Close time (ISO, UTC if naive)")
    period_parser.set_defaults(func=cmd_period)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except (InsightError, ConfigError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
