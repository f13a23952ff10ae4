from rest_framework import generics, status
from rest_framework.response import Response
from core.utils import error_response
from donations.services import MatchingService
from .models import Hospital
from .serializers import HospitalSerializer


class HospitalListCreateView(generics.ListCreateAPIView):
    """List hospitals or add a new one"""
    queryset = Hospital.objects.all()
    serializer_class = HospitalSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "Unable to add hospital",
                errors=serializer.errors,
                status_code=status.HTTP_400_BAD_REQUEST
            )

        hospital = MatchingService().register_hospital(**serializer.validated_data)
        return Response(HospitalSerializer(hospital).data, status=status.HTTP_201_CREATED)
