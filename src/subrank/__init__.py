"""subrank: substitute teacher rankings.

Aggregate school-submitted substitute reviews into overall and per-city
leaderboards with category breakdowns.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
