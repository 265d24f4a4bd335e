"""
Reputation service - points and ratings.

This module handles:
    - Awarding participation points
    - Recording ride ratings
    - Keeping each user's average rating in step with their ratings
"""

from .reputation_updates import (
    award_points,
    record_rating,
    recompute_average_rating,
)

__all__ = [
    "award_points",
    "record_rating",
    "recompute_average_rating",
]
