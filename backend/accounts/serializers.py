from rest_framework import serializers

from common.config import get_config
from reputation.models import Rating
from .models import User
from .validators import is_campus_email, validate_password_strength, validate_phone_number


class RatingReceivedSerializer(serializers.ModelSerializer):
    """A rating left on a user's profile by a ride participant."""
    rater = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Rating
        fields = ["id", "rating", "comment", "rater", "createdAt"]
        read_only_fields = fields

    def get_rater(self, obj):
        return {"id": obj.rater_id, "name": obj.rater.name}


class UserSerializer(serializers.ModelSerializer):
    """Full profile of a user, without credential or reset fields."""
    collegeID = serializers.CharField(source='college_id', read_only=True)
    phoneNumber = serializers.CharField(source='phone_number', read_only=True)
    profilePicture = serializers.CharField(source='profile_picture', read_only=True)
    averageRating = serializers.FloatField(source='average_rating', read_only=True)
    joinedDate = serializers.DateTimeField(source='date_joined', read_only=True)
    rideHistory = serializers.PrimaryKeyRelatedField(source='ride_history', many=True, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    ratings = RatingReceivedSerializer(source='ratings_received', many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "collegeID",
            "phoneNumber",
            "profilePicture",
            "role",
            "status",
            "points",
            "averageRating",
            "joinedDate",
            "rideHistory",
            "ratings",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class SessionUserSerializer(serializers.ModelSerializer):
    """Compact user payload returned alongside a fresh session."""
    collegeID = serializers.CharField(source='college_id', read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "collegeID", "role", "points"]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Lite version of user info embedded in ride payloads
    (driver card, passenger entries, admin listings).
    """
    profilePicture = serializers.CharField(source='profile_picture', read_only=True)
    averageRating = serializers.FloatField(source='average_rating', read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "profilePicture", "averageRating"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """Serializer for user registration"""
    name = serializers.CharField(max_length=150, trim_whitespace=True)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False, validators=[validate_password_strength])
    collegeID = serializers.CharField(max_length=50, trim_whitespace=True)
    phoneNumber = serializers.CharField(
        max_length=20, required=False, allow_blank=True, validators=[validate_phone_number]
    )

    def validate_email(self, value):
        value = value.lower()
        domains = get_config().allowed_email_domains
        if not is_campus_email(value, domains):
            raise serializers.ValidationError(
                "Email must be from {} domain".format(" or ".join(domains))
            )
        return value


class LoginSerializer(serializers.Serializer):
    """Serializer for login (email/password)"""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, trim_whitespace=False, validators=[validate_password_strength])
