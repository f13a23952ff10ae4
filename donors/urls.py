from django.urls import path
from . import views

urlpatterns = [
    path('donors', views.DonorListCreateView.as_view(), name='donor-list'),
]
