"""
Office Hours scheduling algorithms.

The algorithms are organized into the following subpackages:
- availability: Window arithmetic, pattern resolution and the troubleshoot engine
- optimization: Host distribution for round-robin events
"""

__version__ = "1.0.0"
