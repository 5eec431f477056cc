"""relkeep — a named record with cascading, derived and restricting associations."""

__version__ = "0.1.0"
