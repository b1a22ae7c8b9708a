"""Grid Aware – grid-intensity-aware content delivery."""

__version__ = "1.0.0"
