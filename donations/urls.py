from django.urls import path
from . import views

urlpatterns = [
    # Inventory
    path('inventory', views.InventoryListCreateView.as_view(), name='inventory-list'),
    path('inventory/transactions', views.InventoryTransactionListView.as_view(), name='inventory-transactions'),

    # Blood Requests
    path('requests', views.BloodRequestListCreateView.as_view(), name='request-list'),
    path('requests/<int:pk>', views.BloodRequestDetailView.as_view(), name='request-detail'),
    path('requests/<int:pk>/status', views.BloodRequestStatusView.as_view(), name='request-status'),

    # Notifications
    path('notifications', views.NotificationListView.as_view(), name='notification-list'),
]
