"""ctrader-relay - HTTP to cTrader Open API trade history bridge."""

__version__ = "0.1.0"
