from rest_framework import serializers
from donations.serializers import BloodGroupField


class ReportParametersSerializer(serializers.Serializer):
    """Serializer for validating inventory report parameters."""
    format = serializers.ChoiceField(choices=['json', 'pdf', 'excel'], default='json')
    hospital_id = serializers.IntegerField(required=False)
    blood_groups = serializers.ListField(
        child=BloodGroupField(),
        required=False
    )
    as_of = serializers.DateField(required=False)


class DashboardMetricsSerializer(serializers.Serializer):
    """Serializer for dashboard overview metrics."""
    donors_total = serializers.IntegerField()
    donors_eligible = serializers.IntegerField()
    hospitals_total = serializers.IntegerField()
    requests = serializers.DictField(child=serializers.IntegerField())  # count per status
    stock = serializers.DictField(child=serializers.IntegerField())  # usable units per blood group
    low_stock = serializers.DictField(child=serializers.IntegerField())  # groups below LOW_STOCK_THRESHOLD
    expiring_soon = serializers.DictField(child=serializers.IntegerField())  # units expiring within EXPIRING_SOON_DAYS
    expired_pending = serializers.DictField(child=serializers.IntegerField())  # past expiry, not yet written off
