"""Building blocks for probing HTTP services and analysing their responses."""

__version__ = "0.1.0"