from django.urls import path
from .views import (
    DashboardMetricsView,
    InventoryReportView,
)

app_name = 'analytics'

urlpatterns = [
    # Dashboard metrics
    path('dashboard', DashboardMetricsView.as_view(), name='dashboard_metrics'),

    # Report generation
    path('reports/inventory', InventoryReportView.as_view(), name='inventory_report'),
]
