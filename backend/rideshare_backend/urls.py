from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health", health_check, name="health"),  # Health check endpoint

    # Authentication endpoints (at /api/auth/)
    path('api/', include('accounts.urls')),

    # Rides endpoints (at /api/rides/)
    path('api/', include('rides.urls')),

    # Self-service user endpoints (at /api/users/me/)
    path('api/', include('users.urls')),

    # Admin reporting APIs (at /api/admin/)
    path('api/', include('admin_panel.urls')),
]
