from rest_framework import serializers
from donors.models import BLOOD_GROUP_CHOICES, normalize_blood_group
from .models import InventoryUnit, BloodRequest, InventoryTransaction, Notification


class BloodGroupField(serializers.ChoiceField):
    """ChoiceField that tolerates lower case and a '+' decoded to a space"""

    def __init__(self, **kwargs):
        super().__init__(choices=BLOOD_GROUP_CHOICES, **kwargs)

    def to_internal_value(self, data):
        return super().to_internal_value(normalize_blood_group(data))


class InventoryUnitSerializer(serializers.ModelSerializer):
    hospital_id = serializers.IntegerField(read_only=True)
    hospital_name = serializers.CharField(source='hospital.name', read_only=True)

    class Meta:
        model = InventoryUnit
        fields = ['id', 'hospital_id', 'hospital_name', 'blood_group', 'units', 'expiry_date', 'created_at']
        read_only_fields = fields


class InventoryIntakeSerializer(serializers.Serializer):
    """Input for a donation intake; range checks are done by MatchingService"""
    hospital_id = serializers.IntegerField()
    blood_group = BloodGroupField()
    units = serializers.IntegerField()
    expiry_date = serializers.DateField()


class BloodRequestSerializer(serializers.ModelSerializer):
    hospital_id = serializers.IntegerField(read_only=True)
    donor_id = serializers.IntegerField(read_only=True, allow_null=True)
    hospital_name = serializers.CharField(source='hospital.name', read_only=True)

    class Meta:
        model = BloodRequest
        fields = ['id', 'hospital_id', 'hospital_name', 'donor_id', 'blood_group', 'units',
                  'status', 'shortfall', 'created_at', 'action_date']
        read_only_fields = fields


class BloodRequestCreateSerializer(serializers.Serializer):
    hospital_id = serializers.IntegerField()
    donor_id = serializers.IntegerField(required=False, allow_null=True)
    blood_group = BloodGroupField()
    units = serializers.IntegerField()

    def to_internal_value(self, data):
        # The request form posts an empty string when no donor is selected
        if hasattr(data, 'get') and data.get('donor_id') == '':
            data = data.copy()
            data['donor_id'] = None
        return super().to_internal_value(data)


class BloodRequestActionSerializer(serializers.Serializer):
    """Serializer for approving or declining requests"""
    status = serializers.ChoiceField(choices=BloodRequest.TERMINAL_STATUSES)


class InventoryTransactionSerializer(serializers.ModelSerializer):
    inventory_unit_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryTransaction
        fields = ['id', 'inventory_unit_id', 'transaction_type', 'units', 'blood_group',
                  'reference_id', 'timestamp', 'notes']
        read_only_fields = fields  # All fields read-only - created by intake/approval/expiry


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'recipient_email', 'recipient_phone', 'subject', 'message', 'meta', 'created_at']
        read_only_fields = fields
