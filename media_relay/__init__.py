"""Backend relay for the AI media strategist dashboard."""

__version__ = "1.0.0"
