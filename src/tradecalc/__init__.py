"""Trade and margin calculation engine for a spot/margin exchange."""

__version__ = "0.1.0"
