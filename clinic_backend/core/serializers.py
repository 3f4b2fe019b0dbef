"""Staff, clinic and authentication serializers."""

from django.contrib.auth import authenticate

from rest_framework import serializers
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from clinic_backend.core.models import AuditLog, Clinic, Role, User


class RoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ['id', 'name', 'label']
        read_only_fields = fields


class ClinicSerializer(serializers.ModelSerializer):
    class Meta:
        model = Clinic
        fields = ['id', 'name', 'address', 'phone', 'email', 'hfr_id', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


# -----------------------------------------------------------------------------
# Staff accounts
# -----------------------------------------------------------------------------

STAFF_FIELDS = [
    'id',
    'username',
    'email',
    'first_name',
    'last_name',
    'display_name',
    'phone',
    'specialization',
    'calendar_color',
    'is_active',
    'clinic',
    'role',
]


class UserSerializer(serializers.ModelSerializer):
    """Staff account as shown in the user admin screen."""

    role = RoleSerializer(read_only=True)
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = STAFF_FIELDS + ['date_joined', 'last_login']
        read_only_fields = fields


class UserMeSerializer(UserSerializer):
    """The signed-in user, with the clinic expanded for the header bar."""

    clinic = ClinicSerializer(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = STAFF_FIELDS
        read_only_fields = fields


class DoctorListSerializer(serializers.ModelSerializer):
    """Doctor picker row: ``Dr. <full name>`` plus calendar colour."""

    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'specialization', 'clinic', 'calendar_color']
        read_only_fields = fields


class UserCreateSerializer(serializers.ModelSerializer):
    role = serializers.SlugRelatedField(slug_field='name', queryset=Role.objects.all(), required=False, allow_null=True)
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = [
            'username',
            'email',
            'first_name',
            'last_name',
            'phone',
            'specialization',
            'calendar_color',
            'clinic',
            'role',
            'password',
        ]

    def validate_email(self, value):
        if value and User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('A user with this email already exists.')
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class AuditLogSerializer(serializers.ModelSerializer):
    user_display = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'user_display', 'role_name', 'action', 'patient_id', 'timestamp', 'meta']
        read_only_fields = fields

    def get_user_display(self, obj):
        return obj.user.username if obj.user_id else 'System'


# -----------------------------------------------------------------------------
# Authentication
# -----------------------------------------------------------------------------


class LoginSerializer(serializers.Serializer):
    """Staff sign in with ``username`` or ``email`` plus ``password``."""

    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        username = (attrs.get('username') or '').strip()
        email = (attrs.get('email') or '').strip()
        if not username and email:
            account = User.objects.filter(email__iexact=email).only('username').first()
            username = account.username if account is not None else email
        if not username:
            raise serializers.ValidationError('Username or email is required.')

        # ModelBackend returns None for inactive users as well
        user = authenticate(username=username, password=attrs['password'])
        if user is None:
            if User.objects.filter(username=username, is_active=False).exists():
                raise serializers.ValidationError('User account is disabled.')
            raise serializers.ValidationError('Invalid credentials.')

        attrs['user'] = user
        return attrs


class RefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()

    def validate_refresh(self, value):
        try:
            RefreshToken(value)
        except TokenError as exc:
            raise serializers.ValidationError(f'Invalid or expired refresh token: {exc}')
        return value
