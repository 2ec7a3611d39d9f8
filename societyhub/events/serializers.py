from rest_framework import serializers
from .models import Event, EventRSVP


class EventSerializer(serializers.ModelSerializer):
    attendees = serializers.SerializerMethodField()
    is_rsvp = serializers.SerializerMethodField()
    is_full = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = ['id', 'society', 'title', 'description', 'date', 'time', 'location', 'category',
                  'max_attendees', 'organizer', 'status', 'attendees', 'is_rsvp', 'is_full',
                  'created_by', 'created_at', 'updated_at']
        read_only_fields = ['society', 'created_by', 'created_at', 'updated_at']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['status'] = instance.get_effective_status()
        return data

    def get_attendees(self, obj):
        return obj.get_attendee_count()

    def get_is_full(self, obj):
        return obj.is_full()

    def get_is_rsvp(self, obj):
        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            return False
        return obj.rsvps.filter(user=request.user, status=EventRSVP.STATUS_RSVP).exists()

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Title is required')
        return value

    def validate_location(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Location is required')
        return value


class RSVPSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=EventRSVP.STATUS_CHOICES, default=EventRSVP.STATUS_RSVP)

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('status'), str):
            data = data.copy()
            data['status'] = data['status'].strip().upper()
        return super().to_internal_value(data)


class AttendeeSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source='user.id', read_only=True)
    name = serializers.CharField(source='user.display_name', read_only=True)
    phone = serializers.CharField(source='user.phone', read_only=True)
    unit_label = serializers.CharField(source='user.unit.label', read_only=True, default=None)

    class Meta:
        model = EventRSVP
        fields = ['id', 'user_id', 'name', 'phone', 'unit_label', 'status', 'created_at']
