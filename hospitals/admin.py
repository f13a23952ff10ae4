from django.contrib import admin
from .models import Hospital


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'phone', 'city', 'created_at')
    list_filter = ('city',)
    search_fields = ('name', 'email', 'city')
    readonly_fields = ('created_at',)
