"""Custom exceptions for the trade calculation engine.

The calculator itself never raises for well-formed numeric input. These
exceptions are raised only where raw configuration is turned into typed
inputs (discount rule tables, market settings).
"""


class TradeCalcError(Exception):
    """Base exception for all tradecalc errors."""


class DiscountRulesError(TradeCalcError):
    """Raised when a discount rule table cannot be parsed into tiers."""


class ConfigurationError(TradeCalcError):
    """Raised when market settings violate calculator preconditions."""
