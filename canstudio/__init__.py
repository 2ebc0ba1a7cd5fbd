"""CAN bus simulation components (device, load meter, filter, logger, player) and their node models."""

__version__ = "0.1.0"