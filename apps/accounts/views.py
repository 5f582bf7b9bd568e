import logging

from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema

from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
    UserTeamSerializer,
    ProfileUpdateSerializer,
)
from .services import (
    authenticate_user,
    get_user_memberships,
    register_user,
    update_profile,
)

logger = logging.getLogger(__name__)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class LoginResponseSerializer(AuthResponseSerializer):
    teams = UserTeamSerializer(many=True)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    message = serializers.CharField()


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new user account and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    user = register_user(**data)
    logger.info("Registered user %s", user.id)

    return Response({
        'message': 'Registration successful',
        'user': UserSerializer(user).data,
        'tokens': _tokens_for(user),
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: LoginResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = authenticate_user(
        email=serializer.validated_data['email'],
        password=serializer.validated_data['password'],
    )

    return Response({
        'message': 'Login successful',
        **_profile(user),
        'tokens': _tokens_for(user),
    })


class ProfileResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    teams = UserTeamSerializer(many=True)


def _profile(user):
    return {
        'user': UserSerializer(user).data,
        'teams': UserTeamSerializer(get_user_memberships(user=user), many=True).data,
    }


@extend_schema(
    methods=['GET'],
    responses={200: ProfileResponseSerializer},
    description="The current user with every team they belong to, their role and credit.",
    tags=['auth'],
)
@extend_schema(
    methods=['PATCH'],
    request=ProfileUpdateSerializer,
    responses={200: ProfileResponseSerializer},
    description="Change the current user's display name.",
    tags=['auth'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def current_user(request):
    if request.method == 'PATCH':
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        update_profile(user=request.user, display_name=serializer.validated_data['display_name'])

    return Response(_profile(request.user))
