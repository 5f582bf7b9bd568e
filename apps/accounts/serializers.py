from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'created_at',
            'last_login',
        ]
        read_only_fields = ['id', 'email', 'created_at', 'last_login']


class UserTeamSerializer(serializers.Serializer):
    """One of the user's teams, with their role and banked credit."""

    team_id = serializers.UUIDField(source='team.id')
    team_name = serializers.CharField(source='team.name')
    role = serializers.CharField()
    credit = serializers.DecimalField(max_digits=10, decimal_places=2)
    joined_at = serializers.DateTimeField()


class ProfileUpdateSerializer(serializers.Serializer):
    display_name = serializers.CharField(max_length=100)


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class UserRegistrationSerializer(serializers.ModelSerializer):
    """Serializer for user registration."""

    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['email', 'password', 'password_confirm', 'display_name']
        extra_kwargs = {
            # Uniqueness is checked by the registration service
            'email': {'validators': []},
        }

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
