from rest_framework import serializers

from apps.milk.serializers import RecordRangeQuerySerializer


class ExportQuerySerializer(RecordRangeQuerySerializer):
    """
    Query parameters for record export.

    Query Parameters:
        start_date (date): First day included
        end_date (date): Last day included
        format (str): 'text' (default) or 'csv'
    """

    format = serializers.CharField(required=False, default='text')


class ShareLinkResponseSerializer(serializers.Serializer):
    summary = serializers.CharField()
    share_text = serializers.CharField()
    filename = serializers.CharField()
