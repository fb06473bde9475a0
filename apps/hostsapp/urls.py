# apps/hostsapp/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.hostsapp.views import AvailabilityPatternViewSet

router = DefaultRouter()
router.register(r"availability/patterns", AvailabilityPatternViewSet)

urlpatterns = [
    path("", include(router.urls)),
]
