"""
Read-mostly reporting queries for administrators, plus the two admin
mutations: toggling a user's status and deleting a ride.
"""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Count, Q

from accounts.exceptions import AccountNotFoundError
from rides.models import Ride
from services.ride_management import RideNotFoundError

User = get_user_model()
logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def _counts_by(qs, field):
    return {row[field]: row['count'] for row in qs.values(field).annotate(count=Count('id')).order_by(field)}


def get_dashboard_stats():
    """Headline counts and the most recent users and rides."""
    rides_by_status = _counts_by(Ride.objects.all(), 'status')

    return {
        'totalUsers': User.objects.filter(role=User.Role.STUDENT).count(),
        'usersByRole': _counts_by(User.objects.all(), 'role'),
        'usersByStatus': _counts_by(User.objects.all(), 'status'),
        'totalRides': sum(rides_by_status.values()),
        'ridesByStatus': rides_by_status,
        'completedRides': rides_by_status.get(Ride.Status.COMPLETED, 0),
        'scheduledRides': rides_by_status.get(Ride.Status.SCHEDULED, 0),
        'recentUsers': User.objects.order_by('-created_at')[:RECENT_LIMIT],
        'recentRides': Ride.objects.select_related('driver').order_by('-created_at')[:RECENT_LIMIT],
    }


def search_users(search=None):
    """Users newest first, optionally filtered by name, email or college ID."""
    qs = User.objects.prefetch_related('ride_history', 'ratings_received__rater').order_by('-created_at')
    if search:
        qs = qs.filter(
            Q(name__icontains=search)
            | Q(email__icontains=search)
            | Q(college_id__icontains=search)
        )
    return qs


def get_user(user_id):
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise AccountNotFoundError("User not found")


def get_user_rides(user):
    """Every ride the user drove or asked to join, newest departure first."""
    return (
        Ride.objects.filter(Q(driver=user) | Q(passengers__user=user))
        .distinct()
        .select_related('driver')
        .prefetch_related('passengers__user')
        .order_by('-departure_time')
    )


def set_user_status(user_id, status):
    """
    Activate or deactivate an account. Issued tokens stay valid but the
    authentication layer refuses inactive users.
    """
    user = get_user(user_id)
    user.status = status
    user.save(update_fields=['status', 'updated_at'])
    logger.info("User %s status set to %s", user.pk, status)
    return user


def filter_rides(status=None, start_date=None, end_date=None):
    """All rides newest departure first, filtered by status and an inclusive date range."""
    qs = Ride.objects.select_related('driver').prefetch_related('passengers__user')
    if status:
        qs = qs.filter(status=status)
    if start_date:
        qs = qs.filter(departure_time__date__gte=start_date)
    if end_date:
        qs = qs.filter(departure_time__date__lte=end_date)
    return qs.order_by('-departure_time')


def get_ride(ride_id):
    try:
        return Ride.objects.select_related('driver').prefetch_related('passengers__user').get(pk=ride_id)
    except Ride.DoesNotExist:
        raise RideNotFoundError()


def delete_ride(ride_id):
    """Delete a ride with its passenger entries and ratings. Users are untouched."""
    ride = get_ride(ride_id)
    ride.delete()
    logger.info("Ride %s deleted by an administrator", ride_id)
