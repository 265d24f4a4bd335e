"""
Ride management service - Core ride lifecycle operations.

This module handles:
    - Offering and listing rides
    - Join requests and passenger acceptance/rejection
    - Starting and completing rides
    - Rating completed rides
"""

from .ride_lifecycle import (
    RideResult,
    create_ride,
    list_available_rides,
    get_ride,
    request_to_join,
    update_passenger_status,
    start_ride,
    complete_ride,
    rate_ride,
)

from .exceptions import (
    RideNotFoundError,
    PassengerNotFoundError,
    RideNotAvailableError,
    NoSeatsAvailableError,
    OwnRideError,
    AlreadyRequestedError,
    InvalidTransitionError,
    NotRideDriverError,
    NotRideParticipantError,
    AlreadyRatedError,
    InvalidDepartureError,
)

__all__ = [
    # Lifecycle operations
    "RideResult",
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
    "PassengerNotFoundError",
    "RideNotAvailableError",
    "NoSeatsAvailableError",
    "OwnRideError",
    "AlreadyRequestedError",
    "InvalidTransitionError",
    "NotRideDriverError",
    "NotRideParticipantError",
    "AlreadyRatedError",
    "InvalidDepartureError",
]
