from django.utils import timezone
from rest_framework import serializers

from accounts.models import User
from accounts.serializers import UserSummarySerializer
from .models import Ride, PassengerRequest


class PassengerUserSerializer(serializers.ModelSerializer):
    """Basic passenger representation used inside ride responses."""
    profilePicture = serializers.CharField(source='profile_picture', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'profilePicture']


class PassengerRequestSerializer(serializers.ModelSerializer):
    user = PassengerUserSerializer(read_only=True)
    pickupLocation = serializers.CharField(source='pickup_location', read_only=True)
    requestedAt = serializers.DateTimeField(source='requested_at', read_only=True)
    hasRated = serializers.BooleanField(source='has_rated', read_only=True)

    class Meta:
        model = PassengerRequest
        fields = ['id', 'user', 'status', 'pickupLocation', 'requestedAt', 'hasRated']


class RideSerializer(serializers.ModelSerializer):
    """Full ride payload with driver card and passenger entries."""
    driver = UserSummarySerializer(read_only=True)
    passengers = PassengerRequestSerializer(many=True, read_only=True)
    startLocation = serializers.CharField(source='start_location', read_only=True)
    endLocation = serializers.CharField(source='end_location', read_only=True)
    departureTime = serializers.DateTimeField(source='departure_time', read_only=True)
    totalSeats = serializers.IntegerField(source='total_seats', read_only=True)
    availableSeats = serializers.IntegerField(source='available_seats', read_only=True)
    price = serializers.DecimalField(max_digits=8, decimal_places=2, coerce_to_string=False, read_only=True)
    additionalNotes = serializers.CharField(source='additional_notes', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Ride
        fields = [
            'id', 'driver', 'startLocation', 'endLocation', 'route',
            'departureTime', 'totalSeats', 'availableSeats', 'status',
            'price', 'additionalNotes', 'passengers', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class RideCreateSerializer(serializers.Serializer):
    """
    Validates a new ride offer.

    Expected body:
    {
        "startLocation": "GEU Main Gate",
        "endLocation": "ISBT Dehradun",
        "route": "Clement Town -> ISBT",
        "departureTime": "2026-11-02T09:30:00+05:30",
        "totalSeats": 3,
        "price": 40,            // optional
        "additionalNotes": ""   // optional
    }
    """
    startLocation = serializers.CharField(max_length=255)
    endLocation = serializers.CharField(max_length=255)
    route = serializers.CharField()
    departureTime = serializers.DateTimeField()
    totalSeats = serializers.IntegerField(min_value=Ride.MIN_SEATS, max_value=Ride.MAX_SEATS)
    price = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, required=False, default=0)
    additionalNotes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_departureTime(self, value):
        if value <= timezone.now():
            raise serializers.ValidationError("Departure time must be in the future")
        return value


class RideFilterSerializer(serializers.Serializer):
    """Query parameters accepted by the ride listing."""
    startLocation = serializers.CharField(required=False, allow_blank=True)
    endLocation = serializers.CharField(required=False, allow_blank=True)
    date = serializers.DateField(required=False)


class JoinRideSerializer(serializers.Serializer):
    pickupLocation = serializers.CharField(max_length=255)


class PassengerStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[PassengerRequest.Status.ACCEPTED, PassengerRequest.Status.REJECTED],
        error_messages={'invalid_choice': 'Invalid status. Must be either "accepted" or "rejected"'},
    )


class RateRideSerializer(serializers.Serializer):
    rating = serializers.IntegerField(
        min_value=1,
        max_value=5,
        error_messages={
            'min_value': 'Rating must be between 1 and 5',
            'max_value': 'Rating must be between 1 and 5',
        },
    )
    comment = serializers.CharField(required=False, allow_blank=True, default='')
