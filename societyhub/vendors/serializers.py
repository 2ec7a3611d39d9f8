from decimal import Decimal
from rest_framework import serializers
from societyhub.core.utils import format_amount
from .models import Vendor, VendorPayment


class VendorSerializer(serializers.ModelSerializer):
    contract_status = serializers.SerializerMethodField()
    days_remaining = serializers.SerializerMethodField()
    pending_amount = serializers.SerializerMethodField()

    class Meta:
        model = Vendor
        fields = ['id', 'society', 'name', 'company', 'service_type', 'contact_person', 'phone', 'email',
                  'emergency_contact', 'address', 'gst', 'pan', 'rating', 'rating_count', 'status',
                  'contract_start', 'contract_end', 'contract_value', 'payment_terms',
                  'contract_status', 'days_remaining', 'pending_amount', 'created_at', 'updated_at']
        read_only_fields = ['society', 'rating', 'rating_count', 'created_at', 'updated_at']

    def get_contract_status(self, obj):
        return obj.get_contract_status(warning_days=self.context.get('warning_days'))

    def get_days_remaining(self, obj):
        return obj.get_days_remaining()

    def get_pending_amount(self, obj):
        # Annotated by the list view, computed per vendor elsewhere
        pending = getattr(obj, 'pending_total', None)
        if pending is None:
            pending = obj.get_pending_amount() if obj.pk else Decimal('0.00')
        return format_amount(pending)

    def to_internal_value(self, data):
        # Accept 'Active' / 'INACTIVE' from older clients
        if hasattr(data, 'get') and isinstance(data.get('status'), str):
            data = data.copy()
            data['status'] = data['status'].lower()
        return super().to_internal_value(data)

    def validate(self, attrs):
        start = attrs.get('contract_start', getattr(self.instance, 'contract_start', None))
        end = attrs.get('contract_end', getattr(self.instance, 'contract_end', None))
        if start and end and end < start:
            raise serializers.ValidationError({'contract_end': 'Contract end date must be on or after the start date'})
        return attrs


class VendorStatusSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value):
        value = value.strip().lower()
        if value not in dict(Vendor.STATUS_CHOICES):
            raise serializers.ValidationError('Status must be active or inactive')
        return value


class VendorRenewSerializer(serializers.Serializer):
    contract_end = serializers.DateField(required=False, allow_null=True)
    contract_value = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=Decimal('0.00'))
    payment_terms = serializers.CharField(max_length=100, required=False, allow_blank=True)


class VendorRatingSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)


class VendorPaymentSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source='vendor.name', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = VendorPayment
        fields = ['id', 'vendor', 'vendor_name', 'amount', 'status', 'reference', 'due_date', 'paid_at',
                  'notes', 'created_by', 'created_by_username', 'created_at']
        read_only_fields = ['vendor', 'paid_at', 'created_by', 'created_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero')
        return value
