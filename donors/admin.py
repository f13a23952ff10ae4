from django.contrib import admin
from donations.services import MatchingService
from .models import Donor

DONOR_FIELDS = ('name', 'email', 'phone', 'age', 'blood_group', 'health_ok', 'city')


@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display = ('name', 'blood_group', 'age', 'health_ok', 'eligible', 'city', 'created_at')
    list_filter = ('blood_group', 'eligible', 'city')
    search_fields = ('name', 'email', 'phone', 'city')
    readonly_fields = ('eligible', 'created_at')

    def get_readonly_fields(self, request, obj=None):
        # Donor records are immutable once registered
        if obj is not None:
            return DONOR_FIELDS + self.readonly_fields
        return self.readonly_fields

    def save_model(self, request, obj, form, change):
        if not change:
            obj.eligible = MatchingService().evaluate_donor_eligibility(obj)
        super().save_model(request, obj, form, change)
