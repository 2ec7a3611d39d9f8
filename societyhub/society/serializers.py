from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from .models import Society, Unit

User = get_user_model()


class SocietySerializer(serializers.ModelSerializer):
    units_count = serializers.SerializerMethodField()

    class Meta:
        model = Society
        fields = ['id', 'name', 'code', 'address', 'city', 'state', 'pincode', 'contact_email',
                  'contact_phone', 'guard_positions', 'status', 'units_count', 'created_at', 'updated_at']
        read_only_fields = ['status', 'created_at', 'updated_at']

    def get_units_count(self, obj):
        return obj.units.count()


def _resident_summary(user):
    if user is None:
        return None
    return {
        'id': user.id,
        'name': user.display_name,
        'email': user.email,
        'phone': user.phone,
    }


class UnitSerializer(serializers.ModelSerializer):
    label = serializers.CharField(read_only=True)
    owner = serializers.SerializerMethodField()
    tenant = serializers.SerializerMethodField()
    occupancy = serializers.CharField(read_only=True)

    class Meta:
        model = Unit
        fields = ['id', 'society', 'block', 'number', 'label', 'type', 'floor', 'area_sqft', 'status',
                  'owner', 'tenant', 'occupancy', 'created_at', 'updated_at']
        read_only_fields = ['society', 'created_at', 'updated_at']

    def get_owner(self, obj):
        return _resident_summary(obj.owner)

    def get_tenant(self, obj):
        return _resident_summary(obj.tenant)

    def validate(self, attrs):
        society = self.context.get('society') or getattr(self.instance, 'society', None)
        block = attrs.get('block', getattr(self.instance, 'block', None))
        number = attrs.get('number', getattr(self.instance, 'number', None))
        if society and block and number:
            clash = Unit.objects.filter(society=society, block__iexact=block, number__iexact=number)
            if self.instance:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError({'number': f'Unit {block}-{number} already exists'})
        return attrs


class MemberSerializer(serializers.ModelSerializer):
    """Residents as listed in the society directory"""
    name = serializers.CharField(max_length=150, write_only=True)
    block = serializers.CharField(max_length=20, write_only=True, required=False)
    number = serializers.CharField(max_length=20, write_only=True, required=False)
    password = serializers.CharField(write_only=True, required=False, validators=[validate_password])
    unit = serializers.PrimaryKeyRelatedField(queryset=Unit.objects.all(), required=False, allow_null=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'username', 'email', 'phone', 'resident_type', 'unit', 'block', 'number',
                  'password', 'is_active', 'created_at']
        read_only_fields = ['username', 'is_active', 'created_at']
        extra_kwargs = {
            'email': {'required': True, 'allow_blank': False},
            'phone': {'required': True, 'allow_null': False, 'allow_blank': False},
            'resident_type': {'required': True, 'allow_null': False, 'allow_blank': False},
        }

    def to_representation(self, instance):
        data = super().to_representation(instance)
        unit = instance.unit
        data['name'] = instance.display_name
        data['block'] = unit.block if unit else None
        data['number'] = unit.number if unit else None
        data['unit_label'] = unit.label if unit else None
        data['status'] = 'active' if instance.is_active else 'inactive'
        return data

    def validate_email(self, value):
        clash = User.objects.filter(username__iexact=value) | User.objects.filter(email__iexact=value)
        if self.instance:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError('A user with this email already exists')
        return value

    def validate(self, attrs):
        society = self.context['society']
        unit = attrs.get('unit')
        block = attrs.get('block', '').strip()
        number = attrs.get('number', '').strip()

        if unit is not None and unit.society_id != society.id:
            raise serializers.ValidationError({'unit': 'Unit does not belong to this society'})
        if unit is None and bool(block) != bool(number):
            raise serializers.ValidationError({'unit': 'Both block and number are required'})
        if self.instance is None and unit is None and not block:
            raise serializers.ValidationError({'unit': 'Provide a unit or a block and number'})
        return attrs

    def _resolve_unit(self, validated_data):
        society = self.context['society']
        unit = validated_data.pop('unit', None)
        block = validated_data.pop('block', '').strip()
        number = validated_data.pop('number', '').strip()
        if unit is None and block and number:
            unit = Unit.objects.filter(society=society, block__iexact=block, number__iexact=number).first()
            if unit is None:
                unit = Unit.objects.create(society=society, block=block, number=number)
        return unit

    def create(self, validated_data):
        society = self.context['society']
        name = validated_data.pop('name').strip()
        password = validated_data.pop('password', None)
        unit = self._resolve_unit(validated_data)
        first_name, _, last_name = name.partition(' ')

        user = User(
            username=validated_data['email'],
            first_name=first_name,
            last_name=last_name.strip(),
            role=User.ROLE_RESIDENT,
            society=society,
            unit=unit,
            **validated_data
        )
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()
        return user

    def update(self, instance, validated_data):
        name = validated_data.pop('name', None)
        password = validated_data.pop('password', None)
        unit = self._resolve_unit(validated_data)
        if name:
            first_name, _, last_name = name.strip().partition(' ')
            instance.first_name = first_name
            instance.last_name = last_name.strip()
        if unit is not None:
            instance.unit = unit
        if password:
            instance.set_password(password)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        return instance
