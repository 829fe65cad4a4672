from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .exceptions import InvalidExportFormatError
from .exporters import build_export
from .serializers import ExportQuerySerializer, ShareLinkResponseSerializer


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='First day (YYYY-MM-DD)'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='Last day (YYYY-MM-DD)'),
        OpenApiParameter('format', OpenApiTypes.STR, description="'text' or 'csv'", default='text'),
    ],
    responses={(200, 'text/plain'): OpenApiTypes.STR, (200, 'text/csv'): OpenApiTypes.STR},
    description="Download the user's records as a text summary or CSV file.",
    tags=['export'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_records(request):
    """Export records as an attachment."""
    query_serializer = ExportQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        export = build_export(
            user=request.user,
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            export_format=params['format'],
        )
    except InvalidExportFormatError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    response = HttpResponse(export.data, content_type=export.content_type)
    response['Content-Disposition'] = f'attachment; filename="{export.filename}"'
    return response


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='First day (YYYY-MM-DD)'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='Last day (YYYY-MM-DD)'),
    ],
    responses={200: ShareLinkResponseSerializer},
    description="Text summary ready to paste into a chat or message.",
    tags=['export'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def share_link(request):
    """Shareable text summary."""
    query_serializer = ExportQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    export = build_export(
        user=request.user,
        start_date=params.get('start_date'),
        end_date=params.get('end_date'),
        export_format='text',
    )

    return Response({
        'summary': export.data,
        'share_text': f"Check out my milk delivery summary:\n\n{export.data}",
        'filename': export.filename,
    })
