from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsAdminRole
from accounts.serializers import UserSerializer
from common.pagination import PagePagination
from rides.serializers import RideSerializer

from . import services
from .serializers import (
    RecentRideSerializer,
    RecentUserSerializer,
    RideFilterSerializer,
    UserSearchSerializer,
    UserStatusSerializer,
)


class AdminAPIView(APIView):
    """Base view for every admin endpoint."""
    permission_classes = [IsAuthenticated, IsAdminRole]


class DashboardStatsView(AdminAPIView):
    """GET -> headline counts plus the five newest users and rides"""

    def get(self, request):
        stats = services.get_dashboard_stats()
        stats['recentUsers'] = RecentUserSerializer(stats['recentUsers'], many=True).data
        stats['recentRides'] = RecentRideSerializer(stats['recentRides'], many=True).data
        return Response({'success': True, 'stats': stats})


class UserListView(AdminAPIView):
    """GET -> paginated users; ?search= matches name, email or college ID"""

    def get(self, request):
        params = UserSearchSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        paginator = PagePagination()
        page = paginator.paginate_queryset(
            services.search_users(params.validated_data.get('search')), request, view=self
        )
        return paginator.get_paginated_response(UserSerializer(page, many=True).data, key='users')


class UserDetailView(AdminAPIView):
    """GET -> a user and every ride they drove or joined"""

    def get(self, request, user_id):
        user = services.get_user(user_id)
        rides = services.get_user_rides(user)
        return Response({
            'success': True,
            'user': UserSerializer(user).data,
            'rides': RideSerializer(rides, many=True).data,
        })


class UserStatusView(AdminAPIView):
    """
    PATCH -> activate or deactivate an account

    PATCH Body:
    {
        "status": "inactive"   // or "active"
    }
    """

    def patch(self, request, user_id):
        serializer = UserStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = services.set_user_status(user_id, serializer.validated_data['status'])
        return Response({'success': True, 'user': UserSerializer(user).data})


class RideListView(AdminAPIView):
    """GET -> paginated rides; ?status=&startDate=&endDate= (YYYY-MM-DD, inclusive)"""

    def get(self, request):
        filters = RideFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data

        paginator = PagePagination()
        page = paginator.paginate_queryset(
            services.filter_rides(
                status=data.get('status'),
                start_date=data.get('startDate'),
                end_date=data.get('endDate'),
            ),
            request,
            view=self,
        )
        return paginator.get_paginated_response(RideSerializer(page, many=True).data, key='rides')


class RideDetailView(AdminAPIView):
    """
    GET    -> ride detail
    DELETE -> remove the ride with its passenger entries and ratings
    """

    def get(self, request, ride_id):
        ride = services.get_ride(ride_id)
        return Response({'success': True, 'ride': RideSerializer(ride).data})

    def delete(self, request, ride_id):
        services.delete_ride(ride_id)
        return Response({'success': True, 'message': 'Ride deleted successfully'})
