"""rslmon - RSL link-quality monitoring, classification and reporting."""

__version__ = "0.3.0"
