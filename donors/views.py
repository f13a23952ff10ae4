from rest_framework import generics, status
from rest_framework.response import Response
from core.exceptions import BloodBankError
from core.utils import error_response, domain_error_response, parse_bool
from donations.services import MatchingService
from .models import Donor
from .serializers import DonorSerializer


class DonorListCreateView(generics.ListCreateAPIView):
    """Register a donor or search donors by blood group"""
    queryset = Donor.objects.all()
    serializer_class = DonorSerializer

    def list(self, request, *args, **kwargs):
        service = MatchingService()
        eligible_only = parse_bool(request.query_params.get('eligible_only'))
        blood_group = request.query_params.get('blood_group')

        try:
            if blood_group and blood_group != 'all':
                donors = service.find_compatible_donors(blood_group, eligible_only=eligible_only)
            else:
                donors = service.repository.list_donors(eligible_only=eligible_only)
        except BloodBankError as e:
            return domain_error_response(e)

        serializer = self.get_serializer(donors, many=True)
        return Response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "Unable to register donor",
                errors=serializer.errors,
                status_code=status.HTTP_400_BAD_REQUEST
            )

        try:
            donor = MatchingService().register_donor(**serializer.validated_data)
        except BloodBankError as e:
            return domain_error_response(e)
        return Response(self.get_serializer(donor).data, status=status.HTTP_201_CREATED)
