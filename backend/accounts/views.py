from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated

from . import services
from .serializers import (
    ForgotPasswordSerializer,
    LoginSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    SessionUserSerializer,
    UserSerializer,
)
from .throttling import LoginRateThrottle
from .tokens import expire_session_cookie, issue_session_token, set_session_cookie

THROTTLED_MESSAGE = "Too many login attempts. Please try again after 15 minutes."


def _session_response(user, status_code=status.HTTP_200_OK):
    """Issue a fresh session token, return it in the body and set it as a cookie."""
    token = issue_session_token(user)
    response = Response({
        'success': True,
        'user': SessionUserSerializer(user).data,
        'token': token,
    }, status=status_code)
    return set_session_cookie(response, token)


class RegisterView(APIView):
    """
    Register a new student account

    POST Body:
    {
        "name": "Asha Rawat",
        "email": "asha@geu.ac.in",
        "password": "Secret123",
        "collegeID": "GEU2021001",
        "phoneNumber": "+919876543210"  // optional
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = services.register_user(
            name=data['name'],
            email=data['email'],
            password=data['password'],
            college_id=data['collegeID'],
            phone_number=data.get('phoneNumber', ''),
        )
        return _session_response(user, status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    Login with email and password

    POST Body:
    {
        "email": "asha@geu.ac.in",
        "password": "Secret123"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []
    throttle_classes = [LoginRateThrottle]
    throttled_message = THROTTLED_MESSAGE

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = services.login_user(
            request,
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )
        return _session_response(user)


class LogoutView(APIView):
    """Overwrite the session cookie with a short-lived placeholder."""
    permission_classes = (AllowAny,)
    authentication_classes = []

    def get(self, request):
        response = Response({'success': True, 'message': 'Logged out successfully'})
        return expire_session_cookie(response)


class MeView(APIView):
    """GET -> profile of the authenticated user"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({'success': True, 'user': UserSerializer(request.user).data})


class ForgotPasswordView(APIView):
    """
    Email a one-time password reset link

    POST Body:
    {
        "email": "asha@geu.ac.in"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        services.request_password_reset(serializer.validated_data['email'])
        return Response({'success': True, 'message': 'Password reset email sent'})


class ResetPasswordView(APIView):
    """
    Redeem a reset token and start a new session

    PUT Body:
    {
        "password": "NewSecret123"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def put(self, request, token):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = services.reset_password(token, serializer.validated_data['password'])
        return _session_response(user)
