"""tfaws: AWS resource handlers, tag synchronization, region sweepers and acceptance scenarios."""

__version__ = "0.1.0"
