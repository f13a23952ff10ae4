from datetime import datetime
from rest_framework import views, status
from django.http import FileResponse

from core.utils import success_response, error_response
from .serializers import (
    ReportParametersSerializer,
    DashboardMetricsSerializer,
)
from .services import AnalyticsService, ReportService

EXPORT_CONTENT_TYPES = {
    'excel': ('xlsx', 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'),
    'pdf': ('pdf', 'application/pdf'),
}


class DashboardMetricsView(views.APIView):
    """Get current dashboard metrics."""

    def get(self, request):
        metrics = AnalyticsService.dashboard_metrics()

        serializer = DashboardMetricsSerializer(data=metrics)
        if not serializer.is_valid():
            return error_response(
                "Invalid metrics data",
                errors=serializer.errors,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return success_response(
            "Dashboard data retrieved successfully",
            data=serializer.data
        )


class InventoryReportView(views.APIView):
    """Inventory summary as JSON, or as an Excel/PDF download."""

    def get(self, request):
        params = {'format': request.query_params.get('format', 'json')}
        if request.query_params.get('hospital_id'):
            params['hospital_id'] = request.query_params.get('hospital_id')
        blood_groups = request.query_params.getlist('blood_group')
        if blood_groups:
            params['blood_groups'] = blood_groups
        if request.query_params.get('as_of'):
            params['as_of'] = request.query_params.get('as_of')

        serializer = ReportParametersSerializer(data=params)
        if not serializer.is_valid():
            return error_response(
                "Invalid report parameters",
                errors=serializer.errors,
                status_code=status.HTTP_400_BAD_REQUEST
            )

        options = serializer.validated_data
        report_format = options['format']
        report_data = ReportService.inventory_summary(
            hospital_id=options.get('hospital_id'),
            blood_groups=options.get('blood_groups'),
            as_of=options.get('as_of'),
        )

        if report_format == 'json':
            return success_response(
                "Inventory report generated successfully",
                data=report_data
            )

        extension, content_type = EXPORT_CONTENT_TYPES[report_format]
        exported_file = ReportService.export_report(report_data, report_format)
        filename = f"inventory_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{extension}"
        return FileResponse(
            exported_file,
            as_attachment=True,
            filename=filename,
            content_type=content_type
        )
