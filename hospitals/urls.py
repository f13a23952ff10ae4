from django.urls import path
from . import views

urlpatterns = [
    path('hospitals', views.HospitalListCreateView.as_view(), name='hospital-list'),
]
