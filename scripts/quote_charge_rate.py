"""Quote a host employer charge rate from live Fair Work award data.

Resolves the award rate for a classification, applies apprentice modifiers
and prices it with the given on-costs.

Usage:
    python scripts/quote_charge_rate.py MA000025 --year 2 --adult --date 2025-07-01
    python scripts/quote_charge_rate.py MA000020 --code C10 --profit-margin 0.2
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings
from src.calculators.charge_rate import DEFAULT_COST_CONFIG, generate_quote
from src.errors import RateEngineError
from src.rate_engine import RateEngine
from src.rates.models import ClassificationSelector

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def _money(value: Decimal) -> str:
    return f"${value.quantize(_CENTS, rounding=ROUND_HALF_UP)}"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("award", help="Award code, e.g. MA000025")
    parser.add_argument("--code", help="Exact classification code")
    parser.add_argument("--parent", help="Trade classification to search under")
    parser.add_argument("--year", type=int, help="Apprentice year")
    parser.add_argument("--adult", action="store_true", help="Adult apprentice")
    parser.add_argument("--year12", action="store_true", help="Completed year 12")
    parser.add_argument("--sector", help="Sector modifier name")
    parser.add_argument("--date", type=date.fromisoformat, default=date.today(), help="As-of date (YYYY-MM-DD)")
    for field, default in DEFAULT_COST_CONFIG.model_dump().items():
        flag = "--" + field.replace("_rate", "").replace("_", "-")
        parser.add_argument(flag, dest=field, type=Decimal, default=default)
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    selector = ClassificationSelector(
        code=args.code,
        parent_code=args.parent,
        apprentice_year=args.year,
        is_adult=args.adult,
        has_completed_year12=args.year12,
        sector=args.sector,
    )
    costs = DEFAULT_COST_CONFIG.model_copy(
        update={f: getattr(args, f) for f in DEFAULT_COST_CONFIG.model_dump()}
    )

    engine = RateEngine.from_settings(settings)
    try:
        result = await engine.quote(args.award, selector, args.date, costs)
    except RateEngineError as e:
        logger.error("%s: %s", e.code, e.message)
        return 1
    finally:
        await engine.aclose()

    resolved = result.resolved
    print(f"{resolved.award_code} / {resolved.classification_code} ({resolved.classification_name})")
    print(f"  statutory rate {_money(resolved.statutory_rate.base_rate)}/hr on {resolved.as_of}")
    for adj in resolved.adjustments:
        print(f"  {adj.name:<20} {adj.kind:<8} {adj.value:>8}  {_money(adj.amount)}")
    print()
    for item in result.charge.breakdown:
        print(f"  {item.label:<24} {_money(item.amount):>10}  {item.percentage_of_charge_rate:6.2f}%")
    quote = generate_quote(result.charge)
    print(f"  {'Charge rate':<24} {_money(result.charge.charge_rate):>10}")
    print(f"  weekly {quote['weekly_charge']:,.2f}  annual {quote['annual_charge']:,.2f}")
    return 0


def main() -> None:
    sys.exit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()
