from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from clinic.models import User
from .common import CleanCharField, PageQuerySerializer


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        login = (attrs.get('email') or attrs.get('username') or '').strip()
        if not login:
            raise serializers.ValidationError('Email is required')
        attrs['login'] = login
        return attrs


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    firstName = CleanCharField(max_length=150)
    lastName = CleanCharField(max_length=150)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)

    def validate_email(self, v):
        v = v.strip().lower()
        if User.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError('A user with this email already exists')
        return v

    def validate(self, attrs):
        probe = User(email=attrs['email'], first_name=attrs['firstName'], last_name=attrs['lastName'])
        validate_password(attrs['password'], user=probe)
        return attrs


class ProfileUpdateSerializer(serializers.Serializer):
    firstName = CleanCharField(required=False, max_length=150)
    lastName = CleanCharField(required=False, max_length=150)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(trim_whitespace=False)
    newPassword = serializers.CharField(trim_whitespace=False)

    def validate_newPassword(self, v):
        validate_password(v, user=self.context.get('user'))
        return v


class UserListQuerySerializer(PageQuerySerializer):
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False)


class UserAdminUpdateSerializer(ProfileUpdateSerializer):
    email = serializers.EmailField(required=False)
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False)
    isActive = serializers.BooleanField(required=False)

    def validate_email(self, v):
        v = v.strip().lower()
        instance = self.context.get('instance')
        qs = User.objects.filter(email__iexact=v)
        if instance is not None:
            qs = qs.exclude(pk=instance.pk)
        if qs.exists():
            raise serializers.ValidationError('A user with this email already exists')
        return v
