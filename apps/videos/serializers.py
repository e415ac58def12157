# apps/videos/serializers.py
from rest_framework import serializers

from apps.accounts.serializers import ChannelSummarySerializer
from .models import Video


class VideoSummarySerializer(serializers.ModelSerializer):
    """Video card used by the liked-videos list and the subscription feed."""
    owner = ChannelSummarySerializer(read_only=True)

    class Meta:
        model = Video
        fields = [
            "id",
            "title",
            "thumbnail_url",
            "duration",
            "views",
            "likes",
            "dislikes",
            "published_at",
            "owner",
        ]
        read_only_fields = fields
