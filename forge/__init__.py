"""NexusForge: bot and storefront configuration pipeline."""

__version__ = "0.1.0"
