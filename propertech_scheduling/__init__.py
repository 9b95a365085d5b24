"""Propertech scheduling core: viewing bookings and recurring maintenance."""

__version__ = "1.0.0"
