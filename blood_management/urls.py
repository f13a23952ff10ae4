from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('donors.urls')),
    path('', include('hospitals.urls')),
    path('', include('donations.urls')),
    path('analytics/', include('analytics.urls')),
]
