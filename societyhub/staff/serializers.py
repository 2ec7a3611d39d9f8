from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers
from societyhub.core.utils import normalize_weekdays
from .models import Staff

User = get_user_model()


class StaffSerializer(serializers.ModelSerializer):
    """Staff record; a password on create also sets up a guard login"""
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, min_length=6)
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = Staff
        fields = ['id', 'society', 'user', 'username', 'password', 'role', 'name', 'phone', 'email', 'shift',
                  'gate', 'status', 'rating', 'joining_date', 'address', 'emergency_contact', 'id_proof',
                  'id_number', 'working_days', 'check_in_time', 'created_at', 'updated_at']
        read_only_fields = ['society', 'user', 'status', 'check_in_time', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Name is required')
        return value

    def validate_phone(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Phone is required')
        return value

    def validate_rating(self, value):
        if value < 0 or value > 5:
            raise serializers.ValidationError('Rating must be between 0 and 5')
        return value

    def validate_working_days(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Expected a list of weekdays')
        try:
            return normalize_weekdays(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))

    def validate(self, attrs):
        password = attrs.get('password')
        if password:
            if self.instance is not None:
                raise serializers.ValidationError({'password': 'Use the users endpoint to change a login password'})
            if attrs.get('role', Staff.ROLE_GUARD) != Staff.ROLE_GUARD:
                raise serializers.ValidationError({'password': 'Only guards get a login'})
            username = attrs.get('email') or attrs.get('phone')
            if User.objects.filter(username=username).exists():
                raise serializers.ValidationError({'password': f"A user with username '{username}' already exists"})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password', None)
        with transaction.atomic():
            if password:
                name_parts = validated_data['name'].split(' ', 1)
                user = User(
                    username=validated_data.get('email') or validated_data['phone'],
                    email=validated_data.get('email', ''),
                    first_name=name_parts[0],
                    last_name=name_parts[1] if len(name_parts) > 1 else '',
                    phone=validated_data['phone'],
                    role=User.ROLE_GUARD,
                    society=validated_data['society'],
                )
                user.set_password(password)
                user.save()
                validated_data['user'] = user
            return super().create(validated_data)


class StaffStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Staff.STATUS_CHOICES)

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('status'), str):
            data = data.copy()
            data['status'] = data['status'].strip().upper().replace('-', '_').replace(' ', '_')
        return super().to_internal_value(data)
