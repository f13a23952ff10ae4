from rest_framework import serializers
from donations.serializers import BloodGroupField
from .models import Donor


class DonorSerializer(serializers.ModelSerializer):
    blood_group = BloodGroupField()

    class Meta:
        model = Donor
        fields = ['id', 'name', 'email', 'phone', 'age', 'blood_group', 'health_ok',
                  'city', 'eligible', 'created_at']
        read_only_fields = ['eligible', 'created_at']
