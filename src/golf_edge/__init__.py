"""golf-edge: cross-source reconciliation of golf schedule, statistics, and market feeds."""

__version__ = "0.1.0"
