"""
Core ride lifecycle operations.

This module contains all the business logic for offering, joining,
starting, completing and rating rides.

Every mutation re-checks the state it expects and applies the change as a
compare-and-set ``UPDATE ... WHERE status = <expected>``, so a repeated or
concurrent call from the wrong state is rejected instead of applied twice.
"""

import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from common.config import get_config
from common.exceptions import InvalidInput
from rides.models import Ride, PassengerRequest
from services.reputation import award_points, record_rating
from .exceptions import (
    AlreadyRatedError,
    AlreadyRequestedError,
    InvalidDepartureError,
    InvalidTransitionError,
    NoSeatsAvailableError,
    NotRideDriverError,
    NotRideParticipantError,
    OwnRideError,
    PassengerNotFoundError,
    RideNotAvailableError,
    RideNotFoundError,
)

logger = logging.getLogger(__name__)


RIDE_TRANSITIONS = {
    Ride.Status.SCHEDULED: {Ride.Status.IN_PROGRESS, Ride.Status.COMPLETED, Ride.Status.CANCELLED},
    Ride.Status.IN_PROGRESS: {Ride.Status.COMPLETED},
    Ride.Status.COMPLETED: set(),
    Ride.Status.CANCELLED: set(),
}

PASSENGER_TRANSITIONS = {
    PassengerRequest.Status.PENDING: {PassengerRequest.Status.ACCEPTED, PassengerRequest.Status.REJECTED},
    PassengerRequest.Status.ACCEPTED: {PassengerRequest.Status.COMPLETED},
    PassengerRequest.Status.REJECTED: set(),
    PassengerRequest.Status.COMPLETED: set(),
}

# Passenger entries that can still be accepted or rejected by the driver
MANAGEABLE_RIDE_STATUSES = (Ride.Status.SCHEDULED, Ride.Status.IN_PROGRESS)


@dataclass
class RideResult:
    """Result object for ride operations."""
    success: bool
    ride: Optional[Ride] = None
    message: str = ""
    extra: Optional[Dict[str, Any]] = None


def can_transition(current, target, table=RIDE_TRANSITIONS) -> bool:
    return target in table.get(current, set())


def _sources_for(target, table=RIDE_TRANSITIONS):
    return [source for source, targets in table.items() if target in targets]


def _transition_ride(ride: Ride, target) -> bool:
    """
    Move ``ride`` to ``target`` only if its stored status allows it.

    Returns:
        True when this call performed the transition
    """
    updated = Ride.objects.filter(
        pk=ride.pk,
        status__in=_sources_for(target),
    ).update(status=target, updated_at=timezone.now())
    if updated:
        ride.status = target
    return bool(updated)


def _ride_queryset():
    return Ride.objects.select_related('driver').prefetch_related('passengers__user')


def _get_ride(ride_id: int) -> Ride:
    try:
        return _ride_queryset().get(pk=ride_id)
    except Ride.DoesNotExist:
        raise RideNotFoundError()


def _get_driver_ride(driver, ride_id: int, message: str) -> Ride:
    """Fetch a ride and make sure ``driver`` owns it."""
    ride = _get_ride(ride_id)
    if ride.driver_id != driver.pk:
        raise NotRideDriverError(message)
    return ride


# ===================== Offering & Browsing =====================

@transaction.atomic
def create_ride(
    driver,
    start_location: str,
    end_location: str,
    route: str,
    departure_time,
    total_seats: int,
    price=0,
    additional_notes: str = "",
) -> RideResult:
    """
    Offer a new ride.

    Args:
        driver: User model instance offering the ride
        start_location: Free-text pickup point
        end_location: Free-text destination
        route: Free-text route description
        departure_time: Aware datetime, strictly in the future
        total_seats: Seats offered (1-10); all start out available
        price: Non-negative price per seat
        additional_notes: Optional notes for passengers

    Returns:
        RideResult with the created ride

    Raises:
        InvalidDepartureError: If the departure time is not in the future
        InvalidInput: If the seat count or price is out of range
    """
    if departure_time <= timezone.now():
        raise InvalidDepartureError()
    if not Ride.MIN_SEATS <= total_seats <= Ride.MAX_SEATS:
        raise InvalidInput(f"Total seats must be between {Ride.MIN_SEATS} and {Ride.MAX_SEATS}")
    if price is not None and price < 0:
        raise InvalidInput("Price must be a positive number")

    ride = Ride.objects.create(
        driver=driver,
        start_location=start_location,
        end_location=end_location,
        route=route,
        departure_time=departure_time,
        total_seats=total_seats,
        available_seats=total_seats,
        price=price or 0,
        additional_notes=additional_notes or "",
    )
    driver.ride_history.add(ride)

    logger.info("Ride %s created by user %s with %s seats", ride.id, driver.pk, total_seats)
    return RideResult(success=True, ride=ride, message="Ride created successfully")


def list_available_rides(start_location=None, end_location=None, date=None):
    """
    Scheduled rides with at least one free seat, soonest first.

    Args:
        start_location: Case-insensitive substring of the start location
        end_location: Case-insensitive substring of the end location
        date: ``datetime.date``; matches the whole day in the server time zone
    """
    qs = Ride.objects.filter(
        status=Ride.Status.SCHEDULED,
        available_seats__gt=0,
    ).select_related('driver').prefetch_related('passengers__user')

    if start_location:
        qs = qs.filter(start_location__icontains=start_location)
    if end_location:
        qs = qs.filter(end_location__icontains=end_location)
    if date:
        qs = qs.filter(departure_time__date=date)

    return qs.order_by('departure_time')


def get_ride(ride_id: int) -> Ride:
    """Ride detail with its driver and passenger entries loaded."""
    return _get_ride(ride_id)


# ===================== Passenger Operations =====================

@transaction.atomic
def request_to_join(user, ride_id: int, pickup_location: str) -> RideResult:
    """
    Add a pending passenger entry to a ride. Seats are only taken on acceptance.

    Args:
        user: User model instance asking to join
        ride_id: ID of the ride
        pickup_location: Where the passenger wants to be picked up

    Returns:
        RideResult with the ride and the new entry under ``extra["request"]``

    Raises:
        RideNotFoundError: Unknown ride
        RideNotAvailableError: Ride is not scheduled
        NoSeatsAvailableError: Ride has no free seat
        OwnRideError: Requester is the driver
        AlreadyRequestedError: Requester already has an entry on the ride
    """
    ride = _get_ride(ride_id)

    if ride.status != Ride.Status.SCHEDULED:
        raise RideNotAvailableError()
    if ride.available_seats <= 0:
        raise NoSeatsAvailableError()
    if ride.driver_id == user.pk:
        raise OwnRideError()
    if ride.passengers.filter(user=user).exists():
        raise AlreadyRequestedError()

    try:
        with transaction.atomic():
            entry = PassengerRequest.objects.create(
                ride=ride,
                user=user,
                pickup_location=pickup_location,
                status=PassengerRequest.Status.PENDING,
            )
    except IntegrityError:
        # Concurrent duplicate request lost the race on the unique constraint
        raise AlreadyRequestedError()

    logger.info("User %s requested to join ride %s", user.pk, ride.id)
    return RideResult(
        success=True,
        ride=_get_ride(ride.id),
        message="Request to join ride sent successfully",
        extra={"request": entry},
    )


# ===================== Driver Operations =====================

@transaction.atomic
def update_passenger_status(driver, ride_id: int, passenger_id: int, status: str) -> RideResult:
    """
    Accept or reject a pending passenger entry.

    Accepting takes a seat with a single conditional decrement; when no seat
    is left the entry stays pending. Rejecting never gives a seat back,
    since a pending entry never held one.

    Args:
        driver: User model instance (must own the ride)
        ride_id: ID of the ride
        passenger_id: User ID of the passenger
        status: "accepted" or "rejected"

    Returns:
        RideResult with the refreshed ride

    Raises:
        InvalidInput: Status is not accepted/rejected
        RideNotFoundError / PassengerNotFoundError: Unknown ride or entry
        NotRideDriverError: Caller does not own the ride
        RideNotAvailableError: Ride is completed or cancelled
        InvalidTransitionError: Entry is no longer pending
        NoSeatsAvailableError: Acceptance with no free seat
    """
    if status not in (PassengerRequest.Status.ACCEPTED, PassengerRequest.Status.REJECTED):
        raise InvalidInput('Invalid status. Must be either "accepted" or "rejected"')

    ride = _get_driver_ride(driver, ride_id, "Not authorized to update passenger status")

    if ride.status not in MANAGEABLE_RIDE_STATUSES:
        raise RideNotAvailableError()

    try:
        entry = ride.passengers.get(user_id=passenger_id)
    except PassengerRequest.DoesNotExist:
        raise PassengerNotFoundError()

    if not can_transition(entry.status, status, PASSENGER_TRANSITIONS):
        raise InvalidTransitionError(f"Passenger request is already {entry.status}")

    if status == PassengerRequest.Status.ACCEPTED:
        seat_taken = Ride.objects.filter(
            pk=ride.pk,
            available_seats__gt=0,
        ).update(available_seats=F('available_seats') - 1, updated_at=timezone.now())
        if not seat_taken:
            raise NoSeatsAvailableError()

    updated = PassengerRequest.objects.filter(
        pk=entry.pk,
        status=PassengerRequest.Status.PENDING,
    ).update(status=status)
    if not updated:
        # Another request decided this entry first; raising rolls back the seat
        raise InvalidTransitionError("Passenger request was already handled")

    logger.info("Driver %s %s passenger %s on ride %s", driver.pk, status, passenger_id, ride.id)
    return RideResult(
        success=True,
        ride=_get_ride(ride.id),
        message=f"Passenger request {status}",
    )


@transaction.atomic
def start_ride(driver, ride_id: int) -> RideResult:
    """
    Move a scheduled ride to in-progress. New join requests are refused from then on.

    Raises:
        NotRideDriverError: Caller does not own the ride
        InvalidTransitionError: Ride is not scheduled
    """
    ride = _get_driver_ride(driver, ride_id, "Not authorized to start this ride")

    if not _transition_ride(ride, Ride.Status.IN_PROGRESS):
        raise InvalidTransitionError(f"Cannot start a ride that is {ride.status}")

    logger.info("Ride %s started", ride.id)
    return RideResult(success=True, ride=_get_ride(ride.id), message="Ride started successfully")


@transaction.atomic
def complete_ride(driver, ride_id: int) -> RideResult:
    """
    Complete a ride - called by the driver at the destination.

    All accepted passengers become completed and the driver earns the
    configured points for each of them. The status change, passenger
    updates and point award commit together.

    Returns:
        RideResult with ``extra["points_earned"]``

    Raises:
        NotRideDriverError: Caller does not own the ride
        InvalidTransitionError: Ride already completed or cancelled
    """
    ride = _get_driver_ride(driver, ride_id, "Not authorized to complete this ride")

    if not _transition_ride(ride, Ride.Status.COMPLETED):
        raise InvalidTransitionError(f"Cannot complete a ride that is {ride.status}")

    completed_passengers = PassengerRequest.objects.filter(
        ride=ride,
        status=PassengerRequest.Status.ACCEPTED,
    ).update(status=PassengerRequest.Status.COMPLETED)

    points = completed_passengers * get_config().points_per_passenger
    award_points(ride.driver, points)

    logger.info("Ride %s completed; %s passengers, %s points", ride.id, completed_passengers, points)
    return RideResult(
        success=True,
        ride=_get_ride(ride.id),
        message="Ride completed successfully",
        extra={"points_earned": points},
    )


# ===================== Rating =====================

@transaction.atomic
def rate_ride(rater, ride_id: int, rating: int, comment: str = "") -> RideResult:
    """
    Let a passenger who completed the ride rate its driver, once.

    Raises:
        RideNotAvailableError: Ride is not completed
        NotRideParticipantError: Rater neither drove nor completed the ride
        InvalidInput: Rater is the driver (rating passengers is not supported)
        AlreadyRatedError: Passenger already rated this ride
    """
    ride = _get_ride(ride_id)

    if ride.status != Ride.Status.COMPLETED:
        raise RideNotAvailableError("Cannot rate a ride that is not completed")

    is_driver = ride.driver_id == rater.pk
    entry = ride.passengers.filter(user=rater, status=PassengerRequest.Status.COMPLETED).first()

    if entry is None and not is_driver:
        raise NotRideParticipantError()

    if is_driver:
        raise InvalidInput("Driver rating passengers feature not implemented")

    marked = PassengerRequest.objects.filter(pk=entry.pk, has_rated=False).update(has_rated=True)
    if not marked:
        raise AlreadyRatedError()

    try:
        with transaction.atomic():
            record_rating(ride, rater, ride.driver, rating, comment)
    except IntegrityError:
        raise AlreadyRatedError()

    logger.info("User %s rated ride %s", rater.pk, ride.id)
    return RideResult(success=True, ride=ride, message="Rating submitted successfully")
