# users/services/ride_services.py

from django.db.models import Q

from rides.models import Ride
from users.serializers import MyRideSerializer


def get_user_rides(user):
    """
    Rides the user drives or has a join request on, newest departure first.
    Each ride carries ``isDriver`` and, for passenger rides, ``hasRated``.
    """
    qs = (
        Ride.objects.filter(Q(driver=user) | Q(passengers__user=user))
        .distinct()
        .select_related("driver")
        .prefetch_related("passengers__user")
        .order_by("-departure_time")
    )
    return MyRideSerializer(qs, many=True, context={"user": user}).data
