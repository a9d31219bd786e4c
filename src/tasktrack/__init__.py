"""tasktrack - personal task tracking with a REST store and a terminal client."""

__version__ = "0.1.0"
