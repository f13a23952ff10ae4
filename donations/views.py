from rest_framework import generics, status
from rest_framework.response import Response
from core.exceptions import BloodBankError
from core.utils import error_response, domain_error_response
from donors.models import normalize_blood_group
from .models import InventoryUnit, BloodRequest, InventoryTransaction, Notification
from .serializers import (
    InventoryUnitSerializer,
    InventoryIntakeSerializer,
    BloodRequestSerializer,
    BloodRequestCreateSerializer,
    BloodRequestActionSerializer,
    InventoryTransactionSerializer,
    NotificationSerializer,
)
from .services import MatchingService


class InventoryListCreateView(generics.ListCreateAPIView):
    """List inventory rows or record a donation intake"""
    serializer_class = InventoryUnitSerializer

    def get_queryset(self):
        queryset = InventoryUnit.objects.select_related('hospital')

        # Filter by hospital / blood group if provided
        hospital_id = self.request.query_params.get('hospital_id')
        if hospital_id:
            queryset = queryset.filter(hospital_id=hospital_id)
        blood_group = self.request.query_params.get('blood_group')
        if blood_group:
            queryset = queryset.filter(blood_group=normalize_blood_group(blood_group))

        return queryset.order_by('id')

    def create(self, request, *args, **kwargs):
        serializer = InventoryIntakeSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "Unable to record donation",
                errors=serializer.errors,
                status_code=status.HTTP_400_BAD_REQUEST
            )

        try:
            unit = MatchingService().receive_inventory(**serializer.validated_data)
        except BloodBankError as e:
            return domain_error_response(e)
        return Response(InventoryUnitSerializer(unit).data, status=status.HTTP_201_CREATED)


class BloodRequestListCreateView(generics.ListCreateAPIView):
    """List blood requests or open a new one"""
    serializer_class = BloodRequestSerializer

    def get_queryset(self):
        queryset = BloodRequest.objects.select_related('hospital')

        # Filter by status if provided
        request_status = self.request.query_params.get('status')
        if request_status:
            queryset = queryset.filter(status=request_status)

        return queryset.order_by('id')

    def create(self, request, *args, **kwargs):
        serializer = BloodRequestCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "Unable to create blood request",
                errors=serializer.errors,
                status_code=status.HTTP_400_BAD_REQUEST
            )

        try:
            blood_request = MatchingService().create_request(**serializer.validated_data)
        except BloodBankError as e:
            return domain_error_response(e)
        return Response(BloodRequestSerializer(blood_request).data, status=status.HTTP_201_CREATED)


class BloodRequestDetailView(generics.RetrieveAPIView):
    queryset = BloodRequest.objects.select_related('hospital')
    serializer_class = BloodRequestSerializer

    def retrieve(self, request, *args, **kwargs):
        blood_request = self.get_queryset().filter(pk=kwargs['pk']).first()
        if blood_request is None:
            return error_response(
                "Blood request not found",
                status_code=status.HTTP_404_NOT_FOUND
            )
        return Response(self.get_serializer(blood_request).data)


class BloodRequestStatusView(generics.GenericAPIView):
    """Approve or decline a pending blood request"""
    serializer_class = BloodRequestActionSerializer

    def post(self, request, pk):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "Invalid data provided",
                errors=serializer.errors,
                status_code=status.HTTP_400_BAD_REQUEST
            )

        try:
            blood_request = MatchingService().transition_request_status(pk, serializer.validated_data['status'])
        except BloodBankError as e:
            return domain_error_response(e)
        return Response(BloodRequestSerializer(blood_request).data)


class InventoryTransactionListView(generics.ListAPIView):
    """Audit log of inventory changes, newest first"""
    queryset = InventoryTransaction.objects.all()
    serializer_class = InventoryTransactionSerializer

    def get_queryset(self):
        queryset = InventoryTransaction.objects.all()
        transaction_type = self.request.query_params.get('type')
        if transaction_type:
            queryset = queryset.filter(transaction_type=transaction_type)
        return queryset


class NotificationListView(generics.ListAPIView):
    queryset = Notification.objects.all()
    serializer_class = NotificationSerializer
