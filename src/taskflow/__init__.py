"""taskflow - a small terminal task tracker."""

__version__ = "0.1.0"
