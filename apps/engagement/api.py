# apps/engagement/api.py
"""
Like and subscription endpoints.

Every view is a thin wrapper around LikeService / SubscriptionService;
errors raised by the services are rendered by
apps.common.utils.custom_exception_handler.
"""

import logging

from django.db import transaction
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from apps.accounts.serializers import ChannelSummarySerializer
from apps.common.pagination import page_params
from apps.videos.serializers import VideoSummarySerializer
from .serializers import (
    EngagementStateSerializer,
    SubscriptionStatsSerializer,
    SubscriptionStateSerializer,
    ToggleLikeRequestSerializer,
    ToggleLikeResponseSerializer,
)
from .services import LikeService, SubscriptionService

logger = logging.getLogger(__name__)

PAGE_PARAMS = [
    openapi.Parameter("page", openapi.IN_QUERY, type=openapi.TYPE_INTEGER, default=1),
    openapi.Parameter("limit", openapi.IN_QUERY, type=openapi.TYPE_INTEGER, default=20, maximum=100),
]


def paginated(key, items, pagination, serializer_class):
    return Response({key: serializer_class(items, many=True).data, "pagination": pagination})


# --------------------------------------------------
# Likes
# --------------------------------------------------


@swagger_auto_schema(
    method="post",
    tags=["Likes"],
    request_body=ToggleLikeRequestSerializer,
    responses={200: ToggleLikeResponseSerializer, 400: "Invalid type", 404: "Video not found"},
    operation_description=(
        "Toggle like/dislike. Same type again removes it; the other type switches."
    ),
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def toggle_like_api(request, video_id):
    serializer = ToggleLikeRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    # Counters are read under the row lock the toggle took
    with transaction.atomic():
        result = LikeService.toggle_like(request.user.pk, video_id, serializer.validated_data["type"])
        counters = LikeService.get_video_counters(video_id)
    logger.debug(f"Like toggle by user {request.user.pk} on video {video_id}: {result['action']}")
    return Response({**result, **counters})


@swagger_auto_schema(method="get", tags=["Likes"], responses={200: EngagementStateSerializer})
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def like_status_api(request, video_id):
    return Response(LikeService.get_engagement_state(request.user.pk, video_id))


@swagger_auto_schema(method="get", tags=["Likes"], manual_parameters=PAGE_PARAMS)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def liked_videos_api(request):
    page, limit = page_params(request)
    videos, pagination = LikeService.get_user_likes(request.user.pk, page, limit)
    return paginated("videos", videos, pagination, VideoSummarySerializer)


# --------------------------------------------------
# Subscriptions
# --------------------------------------------------


@swagger_auto_schema(
    method="post",
    tags=["Subscriptions"],
    responses={
        200: SubscriptionStateSerializer,
        400: "Cannot subscribe to your own channel",
        404: "Channel not found",
    },
    operation_description="Subscribe to a channel, or unsubscribe if already subscribed.",
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def toggle_subscription_api(request, channel_id):
    with transaction.atomic():
        result = SubscriptionService.toggle_subscription(request.user.pk, channel_id)
        subscriber_count = SubscriptionService.get_subscriber_count(channel_id)
    logger.debug(f"Subscription toggle by user {request.user.pk} on channel {channel_id}: {result}")
    return Response({**result, "subscriber_count": subscriber_count})


@swagger_auto_schema(method="get", tags=["Subscriptions"])
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def subscription_status_api(request, channel_id):
    return Response({"subscribed": SubscriptionService.is_subscribed(request.user.pk, channel_id)})


@swagger_auto_schema(method="get", tags=["Subscriptions"], manual_parameters=PAGE_PARAMS)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def subscriptions_api(request):
    page, limit = page_params(request)
    channels, pagination = SubscriptionService.get_user_subscriptions(request.user.pk, page, limit)
    return paginated("channels", channels, pagination, ChannelSummarySerializer)


@swagger_auto_schema(method="get", tags=["Subscriptions"], manual_parameters=PAGE_PARAMS)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def channel_subscribers_api(request, channel_id):
    page, limit = page_params(request)
    subscribers, pagination = SubscriptionService.get_channel_subscribers(channel_id, page, limit)
    return paginated("subscribers", subscribers, pagination, ChannelSummarySerializer)


@swagger_auto_schema(
    method="get",
    tags=["Subscriptions"],
    manual_parameters=PAGE_PARAMS,
    operation_description="Public, ready videos from subscribed channels, newest first.",
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def subscription_feed_api(request):
    page, limit = page_params(request)
    videos, pagination = SubscriptionService.get_subscription_feed(request.user.pk, page, limit)
    return paginated("videos", videos, pagination, VideoSummarySerializer)


@swagger_auto_schema(method="get", tags=["Subscriptions"], responses={200: SubscriptionStatsSerializer})
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def subscription_stats_api(request):
    return Response(SubscriptionService.get_subscription_stats(request.user.pk))
