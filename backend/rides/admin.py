"""Tells what to show in the Django admin interface for rides app"""

from django.contrib import admin
from .models import Ride, PassengerRequest


class PassengerRequestInline(admin.TabularInline):
    model = PassengerRequest
    extra = 0
    readonly_fields = ['requested_at']


@admin.register(Ride)
class RideAdmin(admin.ModelAdmin):
    """Ride admin"""
    list_display = ['id', 'driver', 'start_location', 'end_location', 'departure_time',
                    'available_seats', 'total_seats', 'status']
    list_filter = ['status', 'departure_time']
    search_fields = ['driver__email', 'driver__name', 'start_location', 'end_location']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'departure_time'
    inlines = [PassengerRequestInline]


@admin.register(PassengerRequest)
class PassengerRequestAdmin(admin.ModelAdmin):
    list_display = ("ride", "user", "status", "pickup_location", "requested_at", "has_rated")
    list_filter = ("status",)
    search_fields = ("ride__id", "user__email")
