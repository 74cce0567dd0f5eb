"""Command-line entry point: price a single order on the configured market.

Market parameters, discount rules and logging come from the environment
(see tradecalc.config). The order itself is given on the command line:

    tradecalc limit buy 100 2
    tradecalc market sell 100 2 --margin --leverage 5 --hot-balance 50000000000000000000
"""

import argparse
import json
import sys
from dataclasses import asdict
from decimal import Decimal, InvalidOperation

from tradecalc.config import AppSettings
from tradecalc.logging import get_logger, setup_logging
from tradecalc.models import OrderSide, OrderType
from tradecalc.risk.validation import validate_order
from tradecalc.trade.calculator import TradeCalculator


def _decimal(text: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a decimal number: {text!r}") from None
    if not value.is_finite():
        raise argparse.ArgumentTypeError(f"not a finite number: {text!r}")
    return value


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tradecalc", description="Compute fees, totals and margin for one order"
    )
    parser.add_argument("order_type", choices=[t.value for t in OrderType])
    parser.add_argument("side", choices=[s.value for s in OrderSide])
    parser.add_argument("price", type=_decimal)
    parser.add_argument(
        "amount", type=_decimal, help="Base quantity, or quote to spend for a market buy"
    )
    parser.add_argument("--margin", action="store_true", help="Trade on margin")
    parser.add_argument("--leverage", type=_decimal, default=Decimal("1"))
    parser.add_argument(
        "--hot-balance", type=_decimal, default=None, help="Discount token balance in wei"
    )
    return parser.parse_args(argv)


def build_calculator(settings: AppSettings) -> TradeCalculator:
    """Configure logging from settings and build the calculator."""
    setup_logging(settings.log_level, settings.log_format)
    return TradeCalculator.from_settings(settings.discount)


def main(argv: list[str] | None = None) -> int:
    """Synchronous entry point. Returns 0 for a valid order, 1 otherwise."""
    args = _parse_args(argv)

    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging and calculator
    calculator = build_calculator(settings)
    logger = get_logger("tradecalc.main")

    # 3. Compute and validate
    request = settings.market.build_request(
        order_type=OrderType(args.order_type),
        side=OrderSide(args.side),
        price=args.price,
        amount=args.amount,
        hot_token_amount=args.hot_balance,
        is_margin=args.margin,
        leverage=args.leverage,
    )
    result = calculator.compute(request)
    validation = validate_order(request, result, settings.market, settings=settings.validation)

    logger.info(
        "order_priced",
        market=f"{settings.market.base_token}-{settings.market.quote_token}",
        is_valid=validation.is_valid,
    )

    output = {
        "result": {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in asdict(result).items()
        },
        "errors": validation.errors,
        "warnings": validation.warnings,
    }
    print(json.dumps(output, indent=2))
    return 0 if validation.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
