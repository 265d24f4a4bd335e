from rest_framework import serializers

from accounts.validators import validate_phone_number
from rides.serializers import RideSerializer


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Validates a self-service profile update. Every field is optional; a
    blank name is ignored rather than stored.

    Expected body:
    {
        "name": "Asha Rawat",
        "phoneNumber": "+919876543210",
        "profilePicture": "https://cdn.example.com/asha.png"
    }
    """
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phoneNumber = serializers.CharField(max_length=20, required=False, allow_blank=True)
    profilePicture = serializers.URLField(max_length=500, required=False, allow_blank=True)

    def validate_phoneNumber(self, value):
        value = value.strip()
        if value:
            validate_phone_number(value)
        return value


class MyRideSerializer(RideSerializer):
    """
    Ride as seen from the requesting user's side: whether they drive it and,
    as a passenger, whether they already rated it.
    """
    isDriver = serializers.SerializerMethodField()
    hasRated = serializers.SerializerMethodField()

    class Meta(RideSerializer.Meta):
        fields = RideSerializer.Meta.fields + ['isDriver', 'hasRated']
        read_only_fields = fields

    def _user_id(self):
        return self.context['user'].pk

    def get_isDriver(self, obj):
        return obj.driver_id == self._user_id()

    def get_hasRated(self, obj):
        if obj.driver_id == self._user_id():
            return None
        for entry in obj.passengers.all():
            if entry.user_id == self._user_id():
                return entry.has_rated
        return False
