from rest_framework import serializers

from users.models import OneTimePassword, User
from users.serializers import InterestsField


def _clean_email(value):
    return value.strip().lower()


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6, trim_whitespace=False)
    role = serializers.ChoiceField(
        choices=[User.ROLE_USER, User.ROLE_ORGANIZER],
        default=User.ROLE_USER,
    )
    interests = InterestsField(required=False, default=list)
    profileImage = serializers.ImageField(required=False)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_email(self, value):
        return _clean_email(value)


class VerifyOTPSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.RegexField(r"^\d{4,10}$", error_messages={"invalid": "OTP must be numeric"})

    def validate_email(self, value):
        return _clean_email(value)


class ResendOTPSerializer(serializers.Serializer):
    email = serializers.EmailField()
    purpose = serializers.ChoiceField(
        choices=[OneTimePassword.PURPOSE_SIGNUP, OneTimePassword.PURPOSE_FORGOT_PASSWORD],
        default=OneTimePassword.PURPOSE_SIGNUP,
    )

    def validate_email(self, value):
        return _clean_email(value)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_email(self, value):
        return _clean_email(value)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value):
        return _clean_email(value)


class ResetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.RegexField(r"^\d{4,10}$", error_messages={"invalid": "OTP must be numeric"})
    newPassword = serializers.CharField(write_only=True, min_length=6, trim_whitespace=False)

    def validate_email(self, value):
        return _clean_email(value)
