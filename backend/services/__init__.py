"""
Services package - Business logic layer.

This package contains all business logic services that operate on Django models
but are decoupled from the HTTP layer.

Modules:
    - ride_management: Core ride lifecycle operations
    - reputation: Points and ratings
"""

# Expose commonly used functions at package level
from .reputation import (
    award_points,
    record_rating,
    recompute_average_rating,
)
from .ride_management import (
    create_ride,
    list_available_rides,
    get_ride,
    request_to_join,
    update_passenger_status,
    start_ride,
    complete_ride,
    rate_ride,
    RideNotFoundError,
    RideNotAvailableError,
    NoSeatsAvailableError,
    InvalidTransitionError,
    NotRideDriverError,
)

__all__ = [
    # Reputation
    "award_points",
    "record_rating",
    "recompute_average_rating",
    # Ride management
    "create_ride",
    "list_available_rides",
    "get_ride",
    "request_to_join",
    "update_passenger_status",
    "start_ride",
    "complete_ride",
    "rate_ride",
    # Exceptions
    "RideNotFoundError",
    "RideNotAvailableError",
    "NoSeatsAvailableError",
    "InvalidTransitionError",
    "NotRideDriverError",
]
