"""
Restaurant Reservation Analytics

Batch pipeline turning restaurant reservation records into ranked and
trended business metrics.
"""

__version__ = "1.0.0"
