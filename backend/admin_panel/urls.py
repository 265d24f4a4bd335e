from django.urls import path

from . import views

app_name = 'admin_panel'

urlpatterns = [
    path('admin/stats', views.DashboardStatsView.as_view(), name='stats'),
    path('admin/users', views.UserListView.as_view(), name='users'),
    path('admin/users/<int:user_id>', views.UserDetailView.as_view(), name='user-detail'),
    path('admin/users/<int:user_id>/status', views.UserStatusView.as_view(), name='user-status'),
    path('admin/rides', views.RideListView.as_view(), name='rides'),
    path('admin/rides/<int:ride_id>', views.RideDetailView.as_view(), name='ride-detail'),
]
