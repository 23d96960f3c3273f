"""ImageVault - durable get-or-create cache for optimized copies of site images."""

__version__ = "0.1.0"
