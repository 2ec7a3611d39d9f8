from decimal import Decimal
from rest_framework import serializers
from .booking import BookingError, check_booking
from societyhub.core.utils import normalize_weekdays
from .models import Amenity, AmenityBooking


class AmenitySerializer(serializers.ModelSerializer):
    class Meta:
        model = Amenity
        fields = ['id', 'society', 'name', 'type', 'description', 'capacity', 'charges_per_hour',
                  'available_days', 'open_time', 'close_time', 'status', 'created_at', 'updated_at']
        read_only_fields = ['society', 'created_at', 'updated_at']

    def validate_available_days(self, value):
        """Accept 'monday', 'MON' etc. and store the short names in weekday order"""
        if not isinstance(value, list):
            raise serializers.ValidationError('Expected a list of weekdays')
        try:
            return normalize_weekdays(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))

    def validate_charges_per_hour(self, value):
        if value < 0:
            raise serializers.ValidationError('Charges cannot be negative')
        return value

    def validate(self, attrs):
        open_time = attrs.get('open_time', getattr(self.instance, 'open_time', None))
        close_time = attrs.get('close_time', getattr(self.instance, 'close_time', None))
        if open_time and close_time and close_time <= open_time:
            raise serializers.ValidationError({'close_time': 'Closing time must be after opening time'})
        return attrs


class BookingRequestSerializer(serializers.Serializer):
    """Slot requested for an amenity; used for quotes and as the base of bookings"""
    date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    guests = serializers.IntegerField(min_value=1, default=1)

    def validate(self, attrs):
        amenity = self.context['amenity']
        try:
            hours, amount = check_booking(
                amenity, attrs['date'], attrs['start_time'], attrs['end_time'], attrs.get('guests', 1)
            )
        except BookingError as e:
            raise serializers.ValidationError({e.field: e.message})
        attrs['hours'] = hours
        attrs['amount'] = amount
        return attrs


class AmenityBookingSerializer(serializers.ModelSerializer):
    amenity_name = serializers.CharField(source='amenity.name', read_only=True)
    user_name = serializers.CharField(source='user.display_name', read_only=True)
    unit_label = serializers.CharField(source='user.unit.label', read_only=True, default=None)

    class Meta:
        model = AmenityBooking
        fields = ['id', 'amenity', 'amenity_name', 'user', 'user_name', 'unit_label', 'date', 'start_time',
                  'end_time', 'purpose', 'guests', 'hours', 'amount', 'status', 'created_at', 'updated_at']
        read_only_fields = ['user', 'hours', 'amount', 'status', 'created_at', 'updated_at']

    def validate_guests(self, value):
        if value < 1:
            raise serializers.ValidationError('At least one guest is required')
        return value

    def validate(self, attrs):
        amenity = attrs.get('amenity')
        society = self.context.get('society')
        if society is not None and amenity.society_id != society.id:
            raise serializers.ValidationError({'amenity': 'Amenity does not belong to this society'})
        try:
            hours, amount = check_booking(
                amenity, attrs['date'], attrs['start_time'], attrs['end_time'], attrs.get('guests', 1)
            )
        except BookingError as e:
            raise serializers.ValidationError({e.field: e.message})
        attrs['hours'] = hours
        attrs['amount'] = amount
        return attrs


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AmenityBooking.STATUS_CHOICES)

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('status'), str):
            data = data.copy()
            data['status'] = data['status'].strip().upper()
        return super().to_internal_value(data)


def quote_payload(amenity, validated):
    return {
        'amenity': amenity.id,
        'amenity_name': amenity.name,
        'date': validated['date'].isoformat(),
        'start_time': validated['start_time'].strftime('%H:%M'),
        'end_time': validated['end_time'].strftime('%H:%M'),
        'guests': validated.get('guests', 1),
        'charges_per_hour': str(amenity.charges_per_hour),
        'hours': str(validated['hours']),
        'amount': str(validated['amount'] or Decimal('0.00')),
    }
