"""encore -- concert and artist data aggregation with a local cache."""

__version__ = "0.1.0"
