# apps/engagement/services.py
"""
Engagement ledger: likes, dislikes and channel subscriptions.

Provides:
- Like/dislike toggling with denormalized counters on Video
- Subscription toggling with the denormalized counter on the channel User
- Listing helpers (liked videos, subscriptions, subscribers, feed)
- Counter reconciliation from the fact tables
- Releasing a deleted account's likes and subscriptions

Every toggle runs the fact write and the counter update in one transaction
with the counter owner's row locked, so concurrent toggles on the same video
or channel are serialized. Decrements never go below zero.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q, Value
from django.db.models.functions import Greatest

from apps.common.exceptions import InvalidInputError, NotFoundError, SelfSubscriptionError
from apps.common.pagination import DEFAULT_LIMIT, paginate_queryset
from apps.common.validators import parse_id
from apps.videos.models import Video, VideoPrivacy, VideoStatus
from .models import Like, LikeKind, Subscription

logger = logging.getLogger(__name__)

User = get_user_model()

# Like kind -> Video counter column
COUNTER_FIELDS = {
    LikeKind.LIKE: "likes",
    LikeKind.DISLIKE: "dislikes",
}


def _increment(field):
    return {field: F(field) + 1}


def _decrement(field, amount=1):
    return {field: Greatest(F(field) - amount, Value(0))}


class LikeService:
    """
    Three-state like machine per (user, video): none, like, dislike.

    toggle_like(kind) transitions:
        none        → kind          action=added
        kind        → none          action=removed
        other kind  → kind          action=switched
    """

    @staticmethod
    def clean_kind(kind):
        try:
            return LikeKind(kind)
        except ValueError:
            raise InvalidInputError(
                "Type must be either 'like' or 'dislike'",
                details={"field": "type"},
            )

    @staticmethod
    def _find_like(user_id, video_id):
        return Like.objects.filter(user_id=user_id, video_id=video_id).first()

    @staticmethod
    def _lock_video(video_id):
        video = Video.objects.select_for_update().filter(pk=video_id).first()
        if video is None:
            raise NotFoundError("Video not found")
        return video

    @classmethod
    @transaction.atomic
    def toggle_like(cls, user_id, video_id, kind):
        """
        Apply one like/dislike click.

        Not idempotent: the same call twice adds then removes.

        Raises:
            NotFoundError: user or video does not exist
            InvalidInputError: kind is not like or dislike

        Returns:
            dict: {"action": "added"|"removed"|"switched", "kind": ...,
                   "previous_kind": ... (switched only)}
        """
        user_id = parse_id(user_id, "User ID")
        video_id = parse_id(video_id, "Video ID")
        kind = cls.clean_kind(kind)

        if not User.objects.filter(pk=user_id).exists():
            raise NotFoundError("User not found")
        cls._lock_video(video_id)
        videos = Video.objects.filter(pk=video_id)

        existing = cls._find_like(user_id, video_id)
        if existing is None:
            try:
                with transaction.atomic():
                    Like.objects.create(user_id=user_id, video_id=video_id, kind=kind)
            except IntegrityError:
                # Fact appeared after the lookup; apply the click to it instead
                existing = cls._find_like(user_id, video_id)
                if existing is None:
                    raise
                logger.warning(f"Like race on user={user_id} video={video_id}, re-read existing fact")
            else:
                videos.update(**_increment(COUNTER_FIELDS[kind]))
                logger.info(f"User {user_id} {kind} video {video_id}: added")
                return {"action": "added", "kind": kind.value}

        previous_kind = LikeKind(existing.kind)
        if previous_kind == kind:
            existing.delete()
            videos.update(**_decrement(COUNTER_FIELDS[kind]))
            logger.info(f"User {user_id} {kind} video {video_id}: removed")
            return {"action": "removed", "kind": kind.value}

        existing.kind = kind
        existing.save(update_fields=["kind"])
        videos.update(
            **_decrement(COUNTER_FIELDS[previous_kind]),
            **_increment(COUNTER_FIELDS[kind]),
        )
        logger.info(f"User {user_id} {kind} video {video_id}: switched from {previous_kind}")
        return {"action": "switched", "kind": kind.value, "previous_kind": previous_kind.value}

    @classmethod
    def get_engagement_state(cls, user_id, video_id):
        """Read-only view of one user's like state on one video."""
        user_id = parse_id(user_id, "User ID")
        video_id = parse_id(video_id, "Video ID")
        like = cls._find_like(user_id, video_id)
        kind = like.kind if like else None
        return {
            "liked": kind == LikeKind.LIKE,
            "disliked": kind == LikeKind.DISLIKE,
            "kind": kind,
        }

    @staticmethod
    def get_video_counters(video_id):
        """Cached like/dislike counters as stored on the video row."""
        return Video.objects.filter(pk=video_id).values("likes", "dislikes").first()

    @staticmethod
    def get_user_likes(user_id, page=1, limit=DEFAULT_LIMIT):
        """Videos the user liked, most recent like first."""
        user_id = parse_id(user_id, "User ID")
        queryset = (
            Like.objects.filter(user_id=user_id, kind=LikeKind.LIKE)
            .select_related("video", "video__owner")
            .order_by("-created_at", "-id")
        )
        likes, pagination = paginate_queryset(queryset, page, limit)
        return [like.video for like in likes], pagination

    @staticmethod
    def get_video_like_counts(video_id):
        """Counts straight from the fact table, ignoring the cached counters."""
        video_id = parse_id(video_id, "Video ID")
        return Like.objects.filter(video_id=video_id).aggregate(
            likes=Count("id", filter=Q(kind=LikeKind.LIKE)),
            dislikes=Count("id", filter=Q(kind=LikeKind.DISLIKE)),
        )

    @classmethod
    @transaction.atomic
    def remove_all_video_likes(cls, video_id):
        """Drop every like fact for a video and zero its counters."""
        video_id = parse_id(video_id, "Video ID")
        video = cls._lock_video(video_id)
        deleted, _ = Like.objects.filter(video_id=video_id).delete()
        video.likes = 0
        video.dislikes = 0
        video.save(update_fields=["likes", "dislikes"])
        logger.info(f"Removed {deleted} like facts from video {video_id}")
        return deleted

    @classmethod
    @transaction.atomic
    def release_user_likes(cls, user_id):
        """
        Delete every like fact a user holds and take them back out of the
        video counters. Called before an account is deleted.

        Returns:
            int: number of like facts removed
        """
        per_video = {}
        rows = (
            Like.objects.filter(user_id=user_id)
            .values("video_id", "kind")
            .annotate(total=Count("id"))
        )
        for row in rows:
            field = COUNTER_FIELDS[LikeKind(row["kind"])]
            per_video.setdefault(row["video_id"], {}).update(_decrement(field, row["total"]))
        if not per_video:
            return 0

        # Lock in pk order so two releases touching the same videos cannot deadlock
        list(Video.objects.select_for_update().filter(pk__in=per_video).order_by("pk").values_list("pk", flat=True))
        for video_id, updates in per_video.items():
            Video.objects.filter(pk=video_id).update(**updates)

        deleted, _ = Like.objects.filter(user_id=user_id).delete()
        logger.info(f"Released {deleted} like facts of user {user_id} across {len(per_video)} videos")
        return deleted

    @classmethod
    @transaction.atomic
    def reconcile_video_counters(cls, video_id, dry_run=False):
        """
        Rewrite Video.likes/dislikes from the fact table.

        Returns:
            dict: {"likes": (old, new), "dislikes": (old, new)} for drifted
            counters only; empty when nothing drifted
        """
        video = cls._lock_video(parse_id(video_id, "Video ID"))
        counts = cls.get_video_like_counts(video.pk)

        drift = {}
        for field in ("likes", "dislikes"):
            if getattr(video, field) != counts[field]:
                drift[field] = (getattr(video, field), counts[field])
                setattr(video, field, counts[field])

        if drift and not dry_run:
            video.save(update_fields=list(drift))
            logger.warning(f"Reconciled counters on video {video.pk}: {drift}")
        return drift


class SubscriptionService:
    """
    Subscriber → channel edges; a channel is a User.

    User.subscriber_count mirrors the number of Subscription rows pointing at
    the channel and is only changed here.
    """

    @staticmethod
    def _find_subscription(subscriber_id, channel_id):
        return Subscription.objects.filter(subscriber_id=subscriber_id, channel_id=channel_id).first()

    @staticmethod
    def _lock_channel(channel_id):
        channel = User.objects.select_for_update().filter(pk=channel_id).first()
        if channel is None:
            raise NotFoundError("Channel not found")
        return channel

    @classmethod
    @transaction.atomic
    def toggle_subscription(cls, subscriber_id, channel_id):
        """
        Subscribe if not subscribed, unsubscribe otherwise.

        Raises:
            SelfSubscriptionError: subscriber and channel are the same account
            NotFoundError: subscriber or channel does not exist

        Returns:
            dict: {"subscribed": bool} reflecting the state after the call
        """
        subscriber_id = parse_id(subscriber_id, "User ID")
        channel_id = parse_id(channel_id, "Channel ID")
        if subscriber_id == channel_id:
            raise SelfSubscriptionError()

        if not User.objects.filter(pk=subscriber_id).exists():
            raise NotFoundError("User not found")
        cls._lock_channel(channel_id)
        channels = User.objects.filter(pk=channel_id)

        existing = cls._find_subscription(subscriber_id, channel_id)
        if existing is not None:
            existing.delete()
            channels.update(**_decrement("subscriber_count"))
            logger.info(f"User {subscriber_id} unsubscribed from channel {channel_id}")
            return {"subscribed": False}

        try:
            with transaction.atomic():
                Subscription.objects.create(subscriber_id=subscriber_id, channel_id=channel_id)
        except IntegrityError:
            # Another request already recorded this subscription and counted it
            logger.warning(f"Duplicate subscription {subscriber_id} -> {channel_id} ignored")
            return {"subscribed": True}

        channels.update(**_increment("subscriber_count"))
        logger.info(f"User {subscriber_id} subscribed to channel {channel_id}")
        return {"subscribed": True}

    @staticmethod
    def get_subscriber_count(channel_id):
        return User.objects.filter(pk=channel_id).values_list("subscriber_count", flat=True).first()

    @classmethod
    def is_subscribed(cls, subscriber_id, channel_id):
        subscriber_id = parse_id(subscriber_id, "User ID")
        channel_id = parse_id(channel_id, "Channel ID")
        return cls._find_subscription(subscriber_id, channel_id) is not None

    @staticmethod
    def get_user_subscriptions(user_id, page=1, limit=DEFAULT_LIMIT):
        """Channels the user subscribes to, most recent first."""
        user_id = parse_id(user_id, "User ID")
        queryset = (
            Subscription.objects.filter(subscriber_id=user_id)
            .select_related("channel")
            .order_by("-created_at", "-id")
        )
        subscriptions, pagination = paginate_queryset(queryset, page, limit)
        return [s.channel for s in subscriptions], pagination

    @staticmethod
    def get_channel_subscribers(channel_id, page=1, limit=DEFAULT_LIMIT):
        channel_id = parse_id(channel_id, "Channel ID")
        if not User.objects.filter(pk=channel_id).exists():
            raise NotFoundError("Channel not found")
        queryset = (
            Subscription.objects.filter(channel_id=channel_id)
            .select_related("subscriber")
            .order_by("-created_at", "-id")
        )
        subscriptions, pagination = paginate_queryset(queryset, page, limit)
        return [s.subscriber for s in subscriptions], pagination

    @staticmethod
    def get_subscription_feed(user_id, page=1, limit=DEFAULT_LIMIT):
        """Public, ready videos from subscribed channels, newest published first."""
        user_id = parse_id(user_id, "User ID")
        channel_ids = Subscription.objects.filter(subscriber_id=user_id).values("channel_id")
        queryset = (
            Video.objects.filter(
                owner_id__in=channel_ids,
                privacy=VideoPrivacy.PUBLIC,
                status=VideoStatus.READY,
            )
            .select_related("owner")
            .order_by(F("published_at").desc(nulls_last=True), "-id")
        )
        return paginate_queryset(queryset, page, limit)

    @staticmethod
    def get_subscription_stats(user_id):
        user_id = parse_id(user_id, "User ID")
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        return {
            "total_subscriptions": Subscription.objects.filter(subscriber_id=user_id).count(),
            "total_subscribers": user.subscriber_count,
        }

    @classmethod
    @transaction.atomic
    def reconcile_subscriber_count(cls, channel_id, dry_run=False):
        """
        Rewrite User.subscriber_count from the fact table.

        Returns:
            tuple (old, new) when the counter drifted, otherwise None
        """
        channel = cls._lock_channel(parse_id(channel_id, "Channel ID"))
        actual = Subscription.objects.filter(channel_id=channel.pk).count()
        if channel.subscriber_count == actual:
            return None

        drift = (channel.subscriber_count, actual)
        if not dry_run:
            channel.subscriber_count = actual
            channel.save(update_fields=["subscriber_count"])
            logger.warning(f"Reconciled subscriber_count on channel {channel.pk}: {drift}")
        return drift

    @classmethod
    @transaction.atomic
    def release_user_subscriptions(cls, user_id):
        """
        Delete the subscriptions a user holds and decrement each channel.
        Called before an account is deleted.

        Returns:
            int: number of subscriptions removed
        """
        channel_ids = list(
            Subscription.objects.filter(subscriber_id=user_id)
            .order_by("channel_id")
            .values_list("channel_id", flat=True)
        )
        if not channel_ids:
            return 0

        list(User.objects.select_for_update().filter(pk__in=channel_ids).order_by("pk").values_list("pk", flat=True))
        User.objects.filter(pk__in=channel_ids).update(**_decrement("subscriber_count"))

        deleted, _ = Subscription.objects.filter(subscriber_id=user_id).delete()
        logger.info(f"Released {deleted} subscriptions of user {user_id}")
        return deleted
