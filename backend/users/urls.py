# users/urls.py

from django.urls import path

from .views.info import (
    UserProfileView,
    UserStatsView,
    UserNotificationsView,
)

from .views.rides import UserRidesView

app_name = "users"

urlpatterns = [
    # INFO
    path("users/me", UserProfileView.as_view(), name="me"),
    path("users/me/stats", UserStatsView.as_view(), name="stats"),
    path("users/me/notifications", UserNotificationsView.as_view(), name="notifications"),

    # RIDES
    path("users/me/rides", UserRidesView.as_view(), name="rides"),
]
