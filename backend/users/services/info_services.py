# users/services/info_services.py

import logging

from django.contrib.auth import get_user_model
from django.db.models import Count, Min, Q
from django.utils import timezone

from accounts.exceptions import DuplicatePhoneError
from accounts.serializers import UserSerializer
from common.exceptions import InvalidInput
from rides.models import Ride, PassengerRequest

User = get_user_model()
logger = logging.getLogger(__name__)

PROFILE_FIELDS = {
    "name": "name",
    "phoneNumber": "phone_number",
    "profilePicture": "profile_picture",
}


def get_user_profile(user):
    """Return serialized profile data (no credential or reset fields)."""
    return UserSerializer(user).data


def update_user_profile(user, data):
    """
    Apply a validated partial profile update.

    A blank name is skipped. A phone number already used by another
    account is refused.

    Raises:
        InvalidInput: if nothing in ``data`` can be applied
        DuplicatePhoneError: if the phone number belongs to someone else
    """
    updates = {}
    for wire_name, field in PROFILE_FIELDS.items():
        if wire_name not in data:
            continue
        value = data[wire_name].strip()
        if field == "name" and not value:
            continue
        updates[field] = value

    if not updates:
        raise InvalidInput("No valid fields to update")

    phone = updates.get("phone_number")
    if phone and User.objects.filter(phone_number=phone).exclude(pk=user.pk).exists():
        raise DuplicatePhoneError()

    for field, value in updates.items():
        setattr(user, field, value)
    user.save(update_fields=list(updates) + ["updated_at"])

    logger.info("User %s updated profile fields %s", user.pk, sorted(updates))
    return UserSerializer(user).data


def get_user_stats(user):
    """Ride counts plus the reputation figures shown on the dashboard."""
    offered = Ride.objects.filter(driver=user).count()
    joined = PassengerRequest.objects.filter(
        user=user,
        status__in=[PassengerRequest.Status.ACCEPTED, PassengerRequest.Status.COMPLETED],
    ).count()

    return {
        "totalRides": offered + joined,
        "offeredRides": offered,
        "joinedRides": joined,
        "points": user.points,
        "averageRating": user.average_rating,
    }


def _plural(count):
    return "" if count == 1 else "s"


def get_user_notifications(user):
    """
    One notification per driven ride that still has pending join requests.
    Computed on every read; nothing is stored.
    """
    pending = Q(passengers__status=PassengerRequest.Status.PENDING)
    rides = (
        Ride.objects.filter(driver=user)
        .exclude(status=Ride.Status.CANCELLED)
        .annotate(
            pending_count=Count("passengers", filter=pending),
            first_requested_at=Min("passengers__requested_at", filter=pending),
        )
        .filter(pending_count__gt=0)
        .order_by("departure_time")
    )

    notifications = []
    for ride in rides:
        count = ride.pending_count
        notifications.append({
            "id": f"ride-{ride.id}-requests",
            "rideId": ride.id,
            "title": f"{count} Pending Request{_plural(count)}",
            "message": (
                f"You have {count} pending request{_plural(count)} for your ride "
                f"from {ride.start_location} to {ride.end_location} "
                f"on {timezone.localtime(ride.departure_time):%d/%m/%Y}"
            ),
            "read": False,
            "timestamp": ride.first_requested_at,
            "type": "ride-request",
        })
    return notifications
