from rest_framework import serializers
from .models import MilkRecord


# =============================================================================
# Input Serializers
# =============================================================================

class RecordUpsertSerializer(serializers.Serializer):
    """
    Shape of POST /api/milk/add/.

    Fields are accepted loosely here; range and format rules are enforced by
    the reconciliation service so that every reason is reported at once.
    """

    date = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    liters = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    status = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    notes = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
        trim_whitespace=False
    )
    milk_type = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def validate_liters(self, value):
        # Blank means "not provided"
        return value if value not in ('', None) else None


class BulkCreateSerializer(serializers.Serializer):
    """Shape of POST /api/milk/bulk-create/."""

    records = serializers.ListField(
        child=serializers.JSONField(),
        required=False,
        allow_empty=True,
        help_text="Up to 100 objects with date, liters and optional status, notes, milk_type, is_auto_marked"
    )


class RecordRangeQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for date-range filtering.

    Query Parameters:
        start_date (date): First day included
        end_date (date): Last day included
    """

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be on or after start date'
            })

        return attrs


class RecordListQuerySerializer(RecordRangeQuerySerializer):
    """
    Query parameters for the paginated record list.

    Query Parameters:
        page (int): 1-based page number
        page_size (int): Records per page (clamped to 1-100)
    """

    page = serializers.IntegerField(required=False, default=1)
    page_size = serializers.IntegerField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class MilkRecordSerializer(serializers.ModelSerializer):
    """Milk record as returned by the API."""

    class Meta:
        model = MilkRecord
        fields = [
            'id',
            'date',
            'liters',
            'status',
            'milk_type',
            'notes',
            'is_auto_marked',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class RecordStatisticsSerializer(serializers.Serializer):
    total_liters = serializers.DecimalField(max_digits=12, decimal_places=2)
    average_liters = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_records = serializers.IntegerField()
    received_count = serializers.IntegerField()
    not_received_count = serializers.IntegerField()
    partial_count = serializers.IntegerField()
    auto_marked_count = serializers.IntegerField()


class PaginationSerializer(serializers.Serializer):
    current_page = serializers.IntegerField()
    page_size = serializers.IntegerField()
    total_pages = serializers.IntegerField()
    total_records = serializers.IntegerField()
    has_next = serializers.BooleanField()
    has_prev = serializers.BooleanField()


class RecordListResponseSerializer(serializers.Serializer):
    records = MilkRecordSerializer(many=True)
    pagination = PaginationSerializer()
    statistics = RecordStatisticsSerializer()


class StatusBreakdownSerializer(serializers.Serializer):
    status = serializers.CharField()
    count = serializers.IntegerField()
    total_liters = serializers.DecimalField(max_digits=12, decimal_places=2)


class DailyStatsSerializer(serializers.Serializer):
    day = serializers.IntegerField()
    statuses = StatusBreakdownSerializer(many=True)
    daily_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class MonthlyOverviewSerializer(serializers.Serializer):
    total_liters = serializers.DecimalField(max_digits=12, decimal_places=2)
    average_liters = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_days = serializers.IntegerField()
    received_days = serializers.IntegerField()
    missed_days = serializers.IntegerField()
    partial_days = serializers.IntegerField()


class MonthlyBreakdownSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    daily_stats = DailyStatsSerializer(many=True)
    monthly_overview = MonthlyOverviewSerializer()


class BulkItemSerializer(serializers.Serializer):
    index = serializers.IntegerField()
    outcome = serializers.ChoiceField(choices=['created', 'conflicted', 'rejected'])
    date = serializers.DateField(allow_null=True)
    record_id = serializers.UUIDField(source='record.id', allow_null=True, default=None)
    errors = serializers.ListField(child=serializers.CharField())


class BulkCreateResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    created_records = serializers.IntegerField()
    conflicted_records = serializers.IntegerField()
    total_requested = serializers.IntegerField()
    results = BulkItemSerializer(many=True)
