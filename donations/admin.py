from django.contrib import admin
from .models import InventoryUnit, BloodRequest, InventoryTransaction, Notification


@admin.register(InventoryUnit)
class InventoryUnitAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'blood_group', 'units', 'expiry_date', 'created_at')
    list_filter = ('blood_group', 'hospital', 'expiry_date')
    search_fields = ('hospital__name', 'blood_group')
    # Intake, consumption and write-offs go through MatchingService so every change is audited
    readonly_fields = ('hospital', 'blood_group', 'units', 'expiry_date', 'created_at')

    def has_add_permission(self, request):
        return False


@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'donor', 'blood_group', 'units', 'status', 'shortfall',
                    'created_at', 'action_date')
    list_filter = ('status', 'blood_group', 'created_at')
    search_fields = ('hospital__name', 'donor__name')
    # Status changes go through MatchingService so inventory stays consistent
    readonly_fields = ('status', 'shortfall', 'created_at', 'action_date')


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_type', 'blood_group', 'units', 'reference_id', 'timestamp')
    list_filter = ('transaction_type', 'blood_group', 'timestamp')
    search_fields = ('blood_group', 'notes')
    readonly_fields = ('timestamp',)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('subject', 'recipient_email', 'recipient_phone', 'created_at')
    search_fields = ('subject', 'recipient_email', 'message')
    readonly_fields = ('created_at',)
