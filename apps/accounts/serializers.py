from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'phone',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    """
    Serializer for user sign-up.

    Only checks presence; format rules live in the registration service so
    every reason is reported together.
    """

    username = serializers.CharField(required=True, trim_whitespace=True)
    phone = serializers.CharField(required=True, trim_whitespace=True)
    password = serializers.CharField(
        write_only=True,
        required=True,
        trim_whitespace=False,
        style={'input_type': 'password'}
    )


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login with username or phone."""

    identifier = serializers.CharField(
        required=True,
        help_text="Username or 10-digit phone number"
    )
    password = serializers.CharField(
        required=True,
        write_only=True,
        trim_whitespace=False,
        style={'input_type': 'password'}
    )


class ProfileUpdateSerializer(serializers.Serializer):
    """Serializer for profile updates. Both fields are optional."""

    username = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for password change."""

    current_password = serializers.CharField(
        required=True,
        trim_whitespace=False,
        style={'input_type': 'password'}
    )
    new_password = serializers.CharField(
        required=True,
        trim_whitespace=False,
        style={'input_type': 'password'}
    )
