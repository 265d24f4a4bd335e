from django.urls import path
from . import views

app_name = 'rides'

urlpatterns = [
    # Browsing & offering
    path('rides', views.rides, name='rides'),
    path('rides/<int:ride_id>', views.ride_detail, name='ride-detail'),

    # Passenger APIs
    path('rides/<int:ride_id>/join', views.join_ride, name='join-ride'),
    path('rides/<int:ride_id>/rate', views.rate_ride, name='rate-ride'),

    # Driver Ride Actions
    path('rides/<int:ride_id>/passengers/<int:user_id>', views.update_passenger_status, name='passenger-status'),
    path('rides/<int:ride_id>/start', views.start_ride, name='start-ride'),
    path('rides/<int:ride_id>/complete', views.complete_ride, name='complete-ride'),
]
