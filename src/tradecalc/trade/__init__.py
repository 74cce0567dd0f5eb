"""Trade calculation -- subtotal, fees, margin split and liquidation price."""

from tradecalc.trade.calculator import TradeCalculator, compute

__all__ = ["TradeCalculator", "compute"]
