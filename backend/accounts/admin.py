from django.contrib import admin
from accounts.models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin panel for the email-keyed User model"""

    list_display = [
        "email",
        "name",
        "college_id",
        "role",
        "status",
        "points",
        "average_rating",
        "created_at",
    ]

    list_filter = [
        "role",
        "status",
        "created_at",
    ]

    search_fields = [
        "email",
        "name",
        "college_id",
        "phone_number",
    ]

    ordering = ("-created_at",)

    # Credentials and reset bookkeeping are never edited by hand
    exclude = ("password", "reset_password_token", "reset_password_expire")
    readonly_fields = ("points", "average_rating", "last_login", "date_joined", "created_at", "updated_at")
    filter_horizontal = ("ride_history", "groups", "user_permissions")
