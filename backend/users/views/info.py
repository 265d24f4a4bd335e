from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from ..serializers import ProfileUpdateSerializer
from ..services import info_services


class UserProfileView(APIView):
    """
    GET -> Retrieve authenticated user's profile
    PUT -> Partially update name, phoneNumber and profilePicture
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        data = info_services.get_user_profile(request.user)
        return Response({"success": True, "user": data})

    def put(self, request):
        ser = ProfileUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        data = info_services.update_user_profile(request.user, ser.validated_data)
        return Response({"success": True, "user": data})


class UserStatsView(APIView):
    """
    GET: Offered, joined and total ride counts for the authenticated user
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        stats = info_services.get_user_stats(request.user)
        return Response({"success": True, "stats": stats})


class UserNotificationsView(APIView):
    """
    GET: Pending join requests on rides the user drives, one entry per ride
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        notifications = info_services.get_user_notifications(request.user)
        return Response({"success": True, "notifications": notifications})
