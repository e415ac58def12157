# apps/engagement/urls.py
from django.urls import path

from . import api

urlpatterns = [
    # Likes
    path("videos/<int:video_id>/like/", api.toggle_like_api, name="video_like"),
    path("videos/<int:video_id>/like-status/", api.like_status_api, name="video_like_status"),
    path("likes/", api.liked_videos_api, name="liked_videos"),
    # Subscriptions
    path("channels/<int:channel_id>/subscribe/", api.toggle_subscription_api, name="channel_subscribe"),
    path(
        "channels/<int:channel_id>/subscription-status/",
        api.subscription_status_api,
        name="channel_subscription_status",
    ),
    path("channels/<int:channel_id>/subscribers/", api.channel_subscribers_api, name="channel_subscribers"),
    path("subscriptions/", api.subscriptions_api, name="subscriptions"),
    path("subscriptions/feed/", api.subscription_feed_api, name="subscription_feed"),
    path("subscriptions/stats/", api.subscription_stats_api, name="subscription_stats"),
]
