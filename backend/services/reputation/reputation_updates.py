"""
Reputation updates.

Points are only ever added, with a single ``F()`` update so concurrent
awards never overwrite each other. The average rating is a derived value:
it is recomputed from the stored Rating rows every time one is added.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Avg, F

from reputation.models import Rating

User = get_user_model()
logger = logging.getLogger(__name__)


def award_points(user, points: int) -> None:
    """
    Add ``points`` to the user's total.

    Args:
        user: User model instance
        points: Non-negative number of points to add
    """
    if points < 0:
        raise ValueError("points must not be negative")
    if points == 0:
        return
    User.objects.filter(pk=user.pk).update(points=F('points') + points)
    logger.info("Awarded %s points to user %s", points, user.pk)


def recompute_average_rating(user) -> float:
    """Persist the mean of all ratings the user has received (0.0 when none)."""
    average = Rating.objects.filter(ratee=user).aggregate(avg=Avg('rating'))['avg'] or 0.0
    User.objects.filter(pk=user.pk).update(average_rating=average)
    user.average_rating = average
    return average


@transaction.atomic
def record_rating(ride, rater, ratee, rating: int, comment: str = "") -> Rating:
    """
    Store a rating and refresh the ratee's average.

    The (ride, rater) unique constraint rejects a second rating for the same
    ride with an IntegrityError; callers translate it.

    Returns:
        The created Rating
    """
    entry = Rating.objects.create(
        ride=ride,
        rater=rater,
        ratee=ratee,
        rating=rating,
        comment=comment or "",
    )
    average = recompute_average_rating(ratee)
    logger.info("User %s rated user %s %s/5 for ride %s (average now %.2f)",
                rater.pk, ratee.pk, rating, ride.pk, average)
    return entry
