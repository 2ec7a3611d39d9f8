from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Setting, AuditLog


class UserSerializer(serializers.ModelSerializer):
    effective_role = serializers.CharField(read_only=True)
    society_name = serializers.CharField(source='society.name', read_only=True, default=None)
    unit_label = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role', 'effective_role',
                  'society', 'society_name', 'unit', 'unit_label', 'resident_type',
                  'is_active', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['is_staff', 'is_superuser', 'created_at', 'updated_at']

    def get_unit_label(self, obj):
        return obj.unit.label if obj.unit_id else None

    def validate(self, attrs):
        society = attrs['society'] if 'society' in attrs else getattr(self.instance, 'society', None)
        unit = attrs['unit'] if 'unit' in attrs else getattr(self.instance, 'unit', None)
        if unit is not None and (society is None or unit.society_id != society.id):
            raise serializers.ValidationError({"unit": "Unit does not belong to this society"})
        return attrs


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone',
                  'role', 'society', 'unit', 'resident_type']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        unit = attrs.get('unit')
        society = attrs.get('society')
        if unit and society and unit.society_id != society.id:
            raise serializers.ValidationError({"unit": "Unit does not belong to this society"})
        if unit and not society:
            attrs['society'] = unit.society
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User.objects.create(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class RegisterSerializer(UserCreateSerializer):
    """
    Self sign-up: only individuals and residents can register themselves.

    A resident joins a society without a unit; an admin links the unit
    through the member directory.
    """
    SELF_SERVICE_ROLES = [User.ROLE_INDIVIDUAL, User.ROLE_RESIDENT]

    role = serializers.ChoiceField(choices=SELF_SERVICE_ROLES, default=User.ROLE_INDIVIDUAL)

    class Meta(UserCreateSerializer.Meta):
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone',
                  'role', 'society', 'resident_type']

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if attrs.get('role') == User.ROLE_RESIDENT and not attrs.get('society'):
            raise serializers.ValidationError({"society": "Residents must register with a society"})
        return attrs


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'society', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
