from decimal import Decimal
from rest_framework import serializers
from django.db import transaction
from django.utils import timezone
from societyhub.society.models import Unit
from .models import BillingConfig, Invoice, InvoiceItem
from .services import is_valid_month, month_of, new_invoice_number, primary_resident


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = ['id', 'name', 'amount']

    def validate_amount(self, value):
        if value < 0:
            raise serializers.ValidationError('Amount cannot be negative')
        return value


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, required=False)
    unit = serializers.PrimaryKeyRelatedField(queryset=Unit.objects.all())
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=Decimal('0.00'))
    unit_label = serializers.CharField(source='unit.label', read_only=True)
    block = serializers.CharField(source='unit.block', read_only=True)
    unit_number = serializers.CharField(source='unit.number', read_only=True)
    resident_name = serializers.SerializerMethodField()
    resident_phone = serializers.CharField(source='resident.phone', read_only=True, default=None)
    days_overdue = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = ['id', 'society', 'invoice_number', 'unit', 'unit_label', 'block', 'unit_number',
                  'resident', 'resident_name', 'resident_phone', 'month', 'maintenance', 'utilities',
                  'penalty', 'amount', 'description', 'issue_date', 'due_date', 'status', 'days_overdue',
                  'paid_date', 'payment_mode', 'items', 'created_at', 'updated_at']
        read_only_fields = ['society', 'invoice_number', 'status', 'paid_date', 'payment_mode',
                            'created_at', 'updated_at']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['status'] = instance.get_effective_status()
        return data

    def get_resident_name(self, obj):
        return obj.resident.display_name if obj.resident_id else None

    def get_days_overdue(self, obj):
        return obj.get_days_overdue()

    def validate_month(self, value):
        if value and not is_valid_month(value):
            raise serializers.ValidationError('Month must be in YYYY-MM format')
        return value

    def validate(self, attrs):
        society = self.context.get('society') or getattr(self.instance, 'society', None)
        unit = attrs.get('unit')
        if unit is not None and society is not None and unit.society_id != society.id:
            raise serializers.ValidationError({'unit': 'Unit does not belong to this society'})

        resident = attrs.get('resident')
        if resident is not None and society is not None and resident.society_id != society.id:
            raise serializers.ValidationError({'resident': 'Resident does not belong to this society'})

        issue_date = attrs.get('issue_date', getattr(self.instance, 'issue_date', None)) or timezone.localdate()
        due_date = attrs.get('due_date', getattr(self.instance, 'due_date', None))
        if due_date and due_date < issue_date:
            raise serializers.ValidationError({'due_date': 'Due date must be on or after the issue date'})

        if self.instance is None:
            items = attrs.get('items') or []
            parts = attrs.get('maintenance', Decimal('0.00')) + attrs.get('utilities', Decimal('0.00'))
            if not items and parts <= 0 and not attrs.get('amount'):
                raise serializers.ValidationError({'amount': 'Provide an amount, charges or line items'})
        return attrs

    def create(self, validated_data):
        items = validated_data.pop('items', [])
        amount = validated_data.pop('amount', None)
        maintenance = validated_data.get('maintenance', Decimal('0.00'))
        utilities = validated_data.get('utilities', Decimal('0.00'))
        # A bare amount is billed as maintenance so amount always equals its parts
        if not items and amount and maintenance + utilities == 0:
            validated_data['maintenance'] = amount

        unit = validated_data['unit']
        validated_data.setdefault('resident', primary_resident(unit))
        validated_data.setdefault('issue_date', timezone.localdate())
        if not validated_data.get('month'):
            validated_data['month'] = month_of(validated_data['issue_date'])

        with transaction.atomic():
            invoice = Invoice.objects.create(invoice_number=new_invoice_number(), **validated_data)
            for item in items:
                InvoiceItem.objects.create(invoice=invoice, **item)
            invoice.amount = invoice.calculate_amount()
            invoice.save(update_fields=['amount'])
        return invoice

    def update(self, instance, validated_data):
        items = validated_data.pop('items', None)
        validated_data.pop('amount', None)
        with transaction.atomic():
            for attr, value in validated_data.items():
                setattr(instance, attr, value)
            instance.save()
            if items is not None:
                instance.items.all().delete()
                for item in items:
                    InvoiceItem.objects.create(invoice=instance, **item)
            instance.amount = instance.calculate_amount()
            instance.save(update_fields=['amount', 'updated_at'])
        return instance


class GenerateInvoicesSerializer(serializers.Serializer):
    month = serializers.CharField(max_length=7)
    due_date = serializers.DateField(required=False)
    issue_date = serializers.DateField(required=False)
    block = serializers.CharField(max_length=20, required=False, allow_blank=True)
    maintenance_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=Decimal('0.00'))
    utility_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=Decimal('0.00'))
    description = serializers.CharField(required=False, allow_blank=True)

    def validate_month(self, value):
        if not is_valid_month(value):
            raise serializers.ValidationError('Month must be in YYYY-MM format')
        return value

    def validate(self, attrs):
        issue_date = attrs.get('issue_date') or timezone.localdate()
        due_date = attrs.get('due_date')
        if due_date and due_date < issue_date:
            raise serializers.ValidationError({'due_date': 'Due date must be on or after the issue date'})
        return attrs


class PayInvoiceSerializer(serializers.Serializer):
    payment_mode = serializers.ChoiceField(choices=Invoice.PAYMENT_MODE_CHOICES, default='CASH')
    paid_date = serializers.DateField(required=False)

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('payment_mode'), str):
            data = data.copy()
            data['payment_mode'] = data['payment_mode'].strip().upper().replace(' ', '_')
        return super().to_internal_value(data)


class BillingConfigSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillingConfig
        fields = ['id', 'society', 'maintenance_amount', 'utility_amount', 'late_fee',
                  'grace_period_days', 'due_day', 'updated_at']
        read_only_fields = ['society', 'updated_at']

    def validate_due_day(self, value):
        if not 1 <= value <= 31:
            raise serializers.ValidationError('Due day must be between 1 and 31')
        return value

    def validate(self, attrs):
        for field in ('maintenance_amount', 'utility_amount', 'late_fee'):
            if field in attrs and attrs[field] < 0:
                raise serializers.ValidationError({field: 'Amount cannot be negative'})
        return attrs
