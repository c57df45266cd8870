"""COMap: CO sensor map with kriging estimates at user-selected points."""

__version__ = "0.1.0"
