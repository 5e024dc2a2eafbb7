"""helitrack – live rotorcraft telemetry proxy."""

__version__ = "1.0.0"
