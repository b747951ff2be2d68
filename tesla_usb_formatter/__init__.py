"""Partition, format and lay out USB drives for Tesla vehicles."""

from .__version__ import __version__


__all__ = ["__version__"]
