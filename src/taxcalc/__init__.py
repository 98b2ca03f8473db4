"""Net pay calculator backed by a remote gross-to-net computation engine."""

__version__ = "0.1.0"
