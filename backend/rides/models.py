from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Ride(models.Model):
    """A trip offered by a student driver with a fixed number of seats."""

    class Status(models.TextChoices):
        SCHEDULED = 'scheduled', 'Scheduled'
        IN_PROGRESS = 'in-progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    MIN_SEATS = 1
    MAX_SEATS = 10

    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='offered_rides'
    )

    # Route
    start_location = models.CharField(max_length=255)
    end_location = models.CharField(max_length=255)
    route = models.TextField()
    departure_time = models.DateTimeField()

    # Seats (total is fixed at creation)
    total_seats = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_SEATS), MaxValueValidator(MAX_SEATS)]
    )
    available_seats = models.PositiveSmallIntegerField()

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SCHEDULED)
    price = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    additional_notes = models.TextField(blank=True, default='')

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'rides'
        ordering = ['departure_time']
        indexes = [
            models.Index(fields=['status', 'departure_time'], name='ride_status_departure_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(available_seats__gte=0),
                name='ride_available_seats_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(available_seats__lte=models.F('total_seats')),
                name='ride_available_seats_within_total',
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name='ride_price_non_negative',
            ),
        ]

    def __str__(self):
        return f"Ride #{self.id} {self.start_location} -> {self.end_location} ({self.status})"

    @property
    def is_open(self):
        return self.status == self.Status.SCHEDULED and self.available_seats > 0


class PassengerRequest(models.Model):
    """A user's request to join a ride, and its outcome."""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        REJECTED = 'rejected', 'Rejected'
        COMPLETED = 'completed', 'Completed'

    ride = models.ForeignKey(
        Ride,
        on_delete=models.CASCADE,
        related_name='passengers'
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='ride_requests'
    )

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    pickup_location = models.CharField(max_length=255)
    requested_at = models.DateTimeField(auto_now_add=True)
    has_rated = models.BooleanField(default=False)

    class Meta:
        db_table = 'ride_passengers'
        ordering = ['requested_at']
        constraints = [
            models.UniqueConstraint(fields=['ride', 'user'], name='unique_passenger_per_ride'),
        ]

    def __str__(self):
        return f"{self.user} on ride #{self.ride_id} ({self.status})"
