"""ETA Analyzer - deal screening and search scorecards for acquisition searchers."""

__version__ = "0.1.0"
