from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from .serializers import (
    JoinRideSerializer,
    PassengerStatusSerializer,
    RateRideSerializer,
    RideCreateSerializer,
    RideFilterSerializer,
    RideSerializer,
)

# Import from services layer
from services.ride_management import (
    complete_ride as complete_ride_service,
    create_ride as create_ride_service,
    get_ride as get_ride_service,
    list_available_rides,
    rate_ride as rate_ride_service,
    request_to_join,
    start_ride as start_ride_service,
    update_passenger_status as update_passenger_status_service,
)


# ==================== Browsing & Offering ====================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def rides(request):
    """
    GET  -> Available rides (scheduled, with free seats), soonest first.
            Optional query: startLocation, endLocation, date (YYYY-MM-DD)
    POST -> Offer a new ride as its driver
    """
    if request.method == 'POST':
        return _create_ride(request)

    filters = RideFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    qs = list_available_rides(
        start_location=filters.validated_data.get('startLocation'),
        end_location=filters.validated_data.get('endLocation'),
        date=filters.validated_data.get('date'),
    )
    data = RideSerializer(qs, many=True).data
    return Response({
        'success': True,
        'count': len(data),
        'rides': data,
    })


def _create_ride(request):
    serializer = RideCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = create_ride_service(
        request.user,
        start_location=data['startLocation'],
        end_location=data['endLocation'],
        route=data['route'],
        departure_time=data['departureTime'],
        total_seats=data['totalSeats'],
        price=data.get('price', 0),
        additional_notes=data.get('additionalNotes', ''),
    )
    return Response({
        'success': True,
        'ride': RideSerializer(result.ride).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ride_detail(request, ride_id):
    """Ride detail with driver card and passenger entries"""
    ride = get_ride_service(ride_id)
    return Response({'success': True, 'ride': RideSerializer(ride).data})


# ==================== Passenger Ride APIs ====================

@api_view(['POST'])
@permission_classes([IsAuthenticated])
def join_ride(request, ride_id):
    """Ask the driver for a seat; the entry stays pending until they decide"""
    serializer = JoinRideSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = request_to_join(request.user, ride_id, serializer.validated_data['pickupLocation'])
    return Response({
        'success': True,
        'message': result.message,
        'ride': RideSerializer(result.ride).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def rate_ride(request, ride_id):
    """Rate the driver of a completed ride (once per passenger)"""
    serializer = RateRideSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = rate_ride_service(
        request.user,
        ride_id,
        serializer.validated_data['rating'],
        serializer.validated_data.get('comment', ''),
    )
    return Response({'success': True, 'message': result.message})


# ==================== Driver Ride Actions ====================

@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def update_passenger_status(request, ride_id, user_id):
    """Accept or reject a pending passenger (ride driver only)"""
    serializer = PassengerStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = update_passenger_status_service(
        request.user, ride_id, user_id, serializer.validated_data['status']
    )
    return Response({
        'success': True,
        'message': result.message,
        'ride': RideSerializer(result.ride).data,
    })


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def start_ride(request, ride_id):
    """Mark a scheduled ride as in progress (ride driver only)"""
    result = start_ride_service(request.user, ride_id)
    return Response({
        'success': True,
        'message': result.message,
        'ride': RideSerializer(result.ride).data,
    })


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def complete_ride(request, ride_id):
    """Complete the ride and award the driver points (ride driver only)"""
    result = complete_ride_service(request.user, ride_id)
    return Response({
        'success': True,
        'message': result.message,
        'pointsEarned': result.extra['points_earned'],
        'ride': RideSerializer(result.ride).data,
    })
