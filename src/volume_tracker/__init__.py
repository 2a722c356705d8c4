"""Rolling-interval training volume tracker."""

__version__ = "0.1.0"
