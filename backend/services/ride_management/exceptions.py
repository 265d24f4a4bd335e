"""Custom exceptions for ride management."""

from common.exceptions import BusinessRuleViolation, Forbidden, InvalidInput, NotFound


class RideNotFoundError(NotFound):
    """Raised when a ride cannot be found."""
    default_message = "Ride not found"


class PassengerNotFoundError(NotFound):
    """Raised when the user has no entry on the ride."""
    default_message = "Passenger not found in this ride"


class RideNotAvailableError(BusinessRuleViolation):
    """Raised when a ride is not in an available state for the operation."""
    default_message = "This ride is no longer available"


class NoSeatsAvailableError(BusinessRuleViolation):
    """Raised when a ride has no seat left to give."""
    default_message = "No seats available for this ride"


class OwnRideError(BusinessRuleViolation):
    """Raised when a driver tries to join their own ride."""
    default_message = "You cannot join your own ride"


class AlreadyRequestedError(BusinessRuleViolation):
    """Raised when the user already has an entry on the ride."""
    default_message = "You have already requested to join this ride"


class InvalidTransitionError(BusinessRuleViolation):
    """Raised when a ride or passenger entry is not in the expected state."""
    default_message = "This action is not allowed in the ride's current state"


class NotRideDriverError(Forbidden):
    """Raised when someone other than the ride's driver manages it."""
    default_message = "Not authorized to manage this ride"


class NotRideParticipantError(Forbidden):
    """Raised when a user who did not complete the ride tries to rate it."""
    default_message = "You were not part of this ride"


class AlreadyRatedError(BusinessRuleViolation):
    """Raised when a passenger rates the same ride twice."""
    default_message = "You have already rated this ride"


class InvalidDepartureError(InvalidInput):
    """Raised when the departure time is not in the future."""
    default_message = "Departure time must be in the future"
