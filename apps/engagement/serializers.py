# apps/engagement/serializers.py
from rest_framework import serializers

from .models import LikeKind


class ToggleLikeRequestSerializer(serializers.Serializer):
    # Validated by LikeService.clean_kind so bad values get the standard error code
    type = serializers.CharField(help_text="like or dislike")


class ToggleLikeResponseSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["added", "removed", "switched"])
    kind = serializers.ChoiceField(choices=LikeKind.choices)
    previous_kind = serializers.ChoiceField(choices=LikeKind.choices, required=False)
    likes = serializers.IntegerField()
    dislikes = serializers.IntegerField()


class EngagementStateSerializer(serializers.Serializer):
    liked = serializers.BooleanField()
    disliked = serializers.BooleanField()
    kind = serializers.ChoiceField(choices=LikeKind.choices, allow_null=True)


class SubscriptionStateSerializer(serializers.Serializer):
    subscribed = serializers.BooleanField()
    subscriber_count = serializers.IntegerField()


class SubscriptionStatsSerializer(serializers.Serializer):
    total_subscriptions = serializers.IntegerField()
    total_subscribers = serializers.IntegerField()
