from rest_framework import serializers
from societyhub.society.models import Unit
from .models import Visitor


class VisitorSerializer(serializers.ModelSerializer):
    visiting_unit = serializers.PrimaryKeyRelatedField(
        queryset=Unit.objects.all(), required=False, allow_null=True
    )
    unit_label = serializers.CharField(source='visiting_unit.label', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.display_name', read_only=True, default=None)

    class Meta:
        model = Visitor
        fields = ['id', 'society', 'visiting_unit', 'unit_label', 'name', 'phone', 'vehicle_no', 'purpose',
                  'id_type', 'id_number', 'pass_code', 'status', 'expected_at', 'entry_time', 'exit_time',
                  'created_by', 'created_by_name', 'approved_by', 'approved_by_name', 'created_at', 'updated_at']
        read_only_fields = ['society', 'pass_code', 'status', 'entry_time', 'exit_time',
                            'created_by', 'approved_by', 'created_at', 'updated_at']

    def validate_phone(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Phone is required')
        return value

    def validate_vehicle_no(self, value):
        return value.strip().upper()

    def validate(self, attrs):
        society = self.context.get('society') or getattr(self.instance, 'society', None)
        unit = attrs.get('visiting_unit')
        if unit is not None and society is not None and unit.society_id != society.id:
            raise serializers.ValidationError({'visiting_unit': 'Unit does not belong to this society'})
        return attrs


class VisitorStatusSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value):
        value = Visitor.normalize_status(value)
        if value not in dict(Visitor.STATUS_CHOICES):
            raise serializers.ValidationError(f"Invalid status '{value}'")
        return value
