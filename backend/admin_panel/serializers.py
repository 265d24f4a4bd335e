from rest_framework import serializers

from accounts.models import User
from rides.models import Ride


class UserStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=User.Status.choices,
        error_messages={'invalid_choice': 'Invalid status value'},
    )


class UserSearchSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)


class RideFilterSerializer(serializers.Serializer):
    """Query parameters of the admin ride listing; dates are inclusive."""
    status = serializers.ChoiceField(choices=Ride.Status.choices, required=False)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get('startDate'), attrs.get('endDate')
        if start and end and start > end:
            raise serializers.ValidationError({'endDate': 'End date must not be before start date'})
        return attrs


class RecentUserSerializer(serializers.ModelSerializer):
    profilePicture = serializers.CharField(source='profile_picture', read_only=True)
    joinedDate = serializers.DateTimeField(source='date_joined', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'profilePicture', 'joinedDate']


class RecentRideSerializer(serializers.ModelSerializer):
    driver = serializers.SerializerMethodField()
    startLocation = serializers.CharField(source='start_location', read_only=True)
    endLocation = serializers.CharField(source='end_location', read_only=True)
    departureTime = serializers.DateTimeField(source='departure_time', read_only=True)

    class Meta:
        model = Ride
        fields = ['id', 'driver', 'startLocation', 'endLocation', 'departureTime', 'status']

    def get_driver(self, obj):
        return {'id': obj.driver_id, 'name': obj.driver.name, 'email': obj.driver.email}
