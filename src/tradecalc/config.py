"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tradecalc.exceptions import ConfigurationError, DiscountRulesError
from tradecalc.fees.discount import DiscountTier, parse_discount_rules
from tradecalc.models import OrderSide, OrderType, TradeRequest


class MarketSettings(BaseSettings):
    """Per-market trading parameters as published by the exchange.

    Defaults mirror what the order form falls back to when a market omits a
    field: zero fees, 8-decimal precision, 18-decimal tokens and a 115%
    liquidation threshold.
    """

    model_config = SettingsConfigDict(env_prefix="MARKET_")

    base_token: str = "BASE"
    quote_token: str = "QUOTE"
    as_maker_fee_rate: Decimal = Decimal("0")
    as_taker_fee_rate: Decimal = Decimal("0")
    gas_fee_amount: Decimal = Decimal("0")  # Flat fee in quote
    price_decimals: int = 8
    amount_decimals: int = 8
    base_token_decimals: int = 18
    quote_token_decimals: int = 18
    liquidation_threshold: Decimal = Decimal("1.15")  # Collateral must exceed 115% of debt
    min_order_size: Decimal = Decimal("0")  # Minimum order value in quote

    def build_request(
        self,
        order_type: OrderType,
        side: OrderSide,
        price: Decimal,
        amount: Decimal,
        hot_token_amount: Decimal | None = None,
        is_margin: bool = False,
        leverage: Decimal = Decimal("1"),
    ) -> TradeRequest:
        """Build a TradeRequest for an order on this market.

        Raises:
            ConfigurationError: If the market's own parameters violate the
                calculator's preconditions.
        """
        if self.price_decimals < 0 or self.amount_decimals < 0:
            raise ConfigurationError(
                f"Decimals must be non-negative: price={self.price_decimals} "
                f"amount={self.amount_decimals}"
            )
        if self.liquidation_threshold <= Decimal("1"):
            raise ConfigurationError(
                f"Liquidation threshold must exceed 1: {self.liquidation_threshold}"
            )
        for name in ("as_maker_fee_rate", "as_taker_fee_rate"):
            rate = getattr(self, name)
            if not Decimal("0") <= rate < Decimal("1"):
                raise ConfigurationError(f"{name} must be in [0, 1): {rate}")

        return TradeRequest(
            order_type=OrderType(order_type),
            side=OrderSide(side),
            price=price,
            amount=amount,
            price_decimals=self.price_decimals,
            amount_decimals=self.amount_decimals,
            as_maker_fee_rate=self.as_maker_fee_rate,
            as_taker_fee_rate=self.as_taker_fee_rate,
            gas_fee_amount=self.gas_fee_amount,
            hot_token_amount=hot_token_amount,
            is_margin=is_margin,
            leverage=leverage,
            market_liquidation_threshold=self.liquidation_threshold,
        )


class DiscountSettings(BaseSettings):
    """Fee discount rules for discount-token holders.

    ``rules`` is the raw table from the fee-rules provider, for example
    ``DISCOUNT_RULES='[[100, 0.7], [-1, 1]]'``. The default applies no
    discount at any balance.
    """

    model_config = SettingsConfigDict(env_prefix="DISCOUNT_")

    rules: list[tuple[Decimal, Decimal]] = [(Decimal("-1"), Decimal("1"))]

    @field_validator("rules")
    @classmethod
    def _rules_parse(
        cls, value: list[tuple[Decimal, Decimal]]
    ) -> list[tuple[Decimal, Decimal]]:
        try:
            parse_discount_rules(value)
        except DiscountRulesError as exc:
            raise ValueError(str(exc)) from exc
        return value

    def tiers(self) -> tuple[DiscountTier, ...]:
        """Parse the raw rule table into typed discount tiers."""
        return parse_discount_rules(self.rules)


class ValidationSettings(BaseSettings):
    """Order validation thresholds."""

    model_config = SettingsConfigDict(env_prefix="VALIDATION_")

    liquidation_warning_margin: Decimal = Decimal("0.02")  # Warn within 2% of entry


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    # Built per instance so MARKET_, DISCOUNT_ and VALIDATION_ variables are read at load time
    market: MarketSettings = Field(default_factory=MarketSettings)
    discount: DiscountSettings = Field(default_factory=DiscountSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
