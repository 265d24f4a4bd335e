from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from ..services import ride_services


class UserRidesView(APIView):
    """
    GET: Rides the user offered or asked to join, newest departure first
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        rides = ride_services.get_user_rides(request.user)
        return Response({"success": True, "count": len(rides), "rides": rides})
