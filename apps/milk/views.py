from rest_framework import status, serializers as drf_serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .serializers import (
    # Input serializers
    RecordUpsertSerializer,
    BulkCreateSerializer,
    RecordRangeQuerySerializer,
    RecordListQuerySerializer,
    # Response serializers
    MilkRecordSerializer,
    RecordStatisticsSerializer,
    RecordListResponseSerializer,
    MonthlyBreakdownSerializer,
    BulkItemSerializer,
    BulkCreateResponseSerializer,
)
from .services import (
    upsert_record_for_date,
    get_or_create_today_record,
    get_record,
    confirm_record,
    delete_record,
    bulk_create_records,
    get_range_statistics,
    list_records,
    get_monthly_breakdown,
    RecordValidationError,
    BulkValidationError,
    RecordNotFoundError,
    DuplicateRecordError,
    InvalidPeriodError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()
    details = drf_serializers.JSONField(required=False)


class RecordMessageResponseSerializer(drf_serializers.Serializer):
    message = drf_serializers.CharField()
    record = MilkRecordSerializer()


class TodayRecordResponseSerializer(drf_serializers.Serializer):
    record = MilkRecordSerializer()
    is_new = drf_serializers.BooleanField()
    message = drf_serializers.CharField(required=False)


class DeletedRecordResponseSerializer(drf_serializers.Serializer):
    message = drf_serializers.CharField()
    deleted_record = MilkRecordSerializer()


def _error(message, http_status, details=None):
    body = {'error': message}
    if details is not None:
        body['details'] = details
    return Response(body, status=http_status)


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='First day (YYYY-MM-DD)'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='Last day (YYYY-MM-DD)'),
        OpenApiParameter('page', OpenApiTypes.INT, description='Page number', default=1),
        OpenApiParameter('page_size', OpenApiTypes.INT, description='Records per page (1-100)', default=50),
    ],
    responses={
        200: RecordListResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="List the user's milk records (newest first) with range statistics.",
    tags=['milk'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def record_list(request):
    """Paginated records plus statistics for the same range."""
    query_serializer = RecordListQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    page = list_records(
        user=request.user,
        start_date=params.get('start_date'),
        end_date=params.get('end_date'),
        page=params['page'],
        page_size=params.get('page_size'),
    )
    statistics = get_range_statistics(
        user=request.user,
        start_date=params.get('start_date'),
        end_date=params.get('end_date'),
    )

    return Response({
        'records': MilkRecordSerializer(page['records'], many=True).data,
        'pagination': page['pagination'],
        'statistics': statistics,
    })


@extend_schema(
    request=RecordUpsertSerializer,
    responses={
        200: RecordMessageResponseSerializer,
        201: RecordMessageResponseSerializer,
        400: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Add a record for a date, or update the existing one with the provided fields.",
    tags=['milk'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def add_record(request):
    """Create or update the record for a given date."""
    serializer = RecordUpsertSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        record, created = upsert_record_for_date(
            user=request.user,
            **serializer.validated_data
        )
    except RecordValidationError as e:
        return _error(str(e), status.HTTP_400_BAD_REQUEST, e.errors)
    except DuplicateRecordError as e:
        return _error(str(e), status.HTTP_409_CONFLICT)

    if created:
        return Response({
            'message': 'Milk record created successfully',
            'record': MilkRecordSerializer(record).data,
        }, status=status.HTTP_201_CREATED)

    return Response({
        'message': 'Milk record updated successfully',
        'record': MilkRecordSerializer(record).data,
    })


@extend_schema(
    responses={200: TodayRecordResponseSerializer},
    description="Get today's record, auto-creating a 'received' guess if none exists yet.",
    tags=['milk'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def today_record(request):
    """Today's record (auto-marked when freshly created)."""
    record, is_new = get_or_create_today_record(user=request.user)

    data = {
        'record': MilkRecordSerializer(record).data,
        'is_new': is_new,
    }
    if is_new:
        data['message'] = "Auto-created today's record"

    return Response(data)


@extend_schema(
    methods=['GET'],
    responses={200: MilkRecordSerializer, 404: ErrorResponseSerializer},
    description="Get one of the user's records.",
    tags=['milk'],
)
@extend_schema(
    methods=['DELETE'],
    responses={200: DeletedRecordResponseSerializer, 404: ErrorResponseSerializer},
    description="Delete one of the user's records.",
    tags=['milk'],
)
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def record_detail(request, record_id):
    """Retrieve or delete a record owned by the current user."""
    try:
        if request.method == 'DELETE':
            snapshot = delete_record(user=request.user, record_id=record_id)
            return Response({
                'message': 'Record deleted successfully',
                'deleted_record': MilkRecordSerializer(snapshot).data,
            })

        record = get_record(user=request.user, record_id=record_id)
    except RecordNotFoundError as e:
        return _error(str(e), status.HTTP_404_NOT_FOUND)

    return Response(MilkRecordSerializer(record).data)


@extend_schema(
    request=None,
    responses={200: RecordMessageResponseSerializer, 404: ErrorResponseSerializer},
    description="Confirm an auto-marked record. Safe to repeat.",
    tags=['milk'],
)
@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated])
def confirm(request, record_id):
    """Clear the auto-marked flag on a record."""
    try:
        record = confirm_record(user=request.user, record_id=record_id)
    except RecordNotFoundError as e:
        return _error(str(e), status.HTTP_404_NOT_FOUND)

    return Response({
        'message': 'Record confirmed successfully',
        'record': MilkRecordSerializer(record).data,
    })


@extend_schema(
    request=BulkCreateSerializer,
    responses={
        201: BulkCreateResponseSerializer,
        207: BulkCreateResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description=(
        "Create up to 100 records. Any invalid entry rejects the whole batch; "
        "entries for dates that already have a record are reported as conflicted "
        "while the others are kept (207)."
    ),
    tags=['milk'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def bulk_create(request):
    """Create many records with per-entry outcomes."""
    serializer = BulkCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = bulk_create_records(
            user=request.user,
            entries=serializer.validated_data.get('records'),
        )
    except BulkValidationError as e:
        return _error(str(e), status.HTTP_400_BAD_REQUEST, e.errors)
    except RecordValidationError as e:
        return _error(str(e), status.HTTP_400_BAD_REQUEST, e.errors or None)

    body = {
        'created_records': result.created_count,
        'conflicted_records': result.conflicted_count,
        'total_requested': result.total_requested,
        'results': BulkItemSerializer(result.items, many=True).data,
    }

    if result.is_partial:
        body['message'] = f"Partially successful: {result.created_count} records created"
        body['error'] = "Some records already exist for the specified dates"
        return Response(body, status=status.HTTP_207_MULTI_STATUS)

    body['message'] = f"Successfully created {result.created_count} records"
    return Response(body, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='First day (YYYY-MM-DD)'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='Last day (YYYY-MM-DD)'),
    ],
    responses={
        200: RecordStatisticsSerializer,
        400: ErrorResponseSerializer,
    },
    description="Totals, average and per-status counts for a date range.",
    tags=['milk'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def range_statistics(request):
    """Statistics for a date range - thin HTTP handler."""
    query_serializer = RecordRangeQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = get_range_statistics(
        user=request.user,
        start_date=params.get('start_date'),
        end_date=params.get('end_date'),
    )

    return Response(data)


@extend_schema(
    responses={
        200: MonthlyBreakdownSerializer,
        400: ErrorResponseSerializer,
    },
    description="Per-day status breakdown and month summary for one calendar month.",
    tags=['milk'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def monthly_stats(request, year, month):
    """Monthly breakdown - thin HTTP handler."""
    try:
        data = get_monthly_breakdown(user=request.user, year=year, month=month)
    except InvalidPeriodError as e:
        return _error(str(e), status.HTTP_400_BAD_REQUEST)

    return Response(data)
