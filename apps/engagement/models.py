# apps/engagement/models.py
"""
Engagement fact tables.

Models:
- Like: one row per (user, video), kind is like or dislike
- Subscription: one row per (subscriber, channel); presence means subscribed

These rows are the source of truth for Video.likes, Video.dislikes and
User.subscriber_count. The unique constraints below are what serializes
concurrent toggles on the same pair; never drop them.
"""

from django.conf import settings
from django.db import models
from django.db.models import F, Q

User = settings.AUTH_USER_MODEL


class LikeKind(models.TextChoices):
    LIKE = "like", "Like"
    DISLIKE = "dislike", "Dislike"


class Like(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="likes")
    video = models.ForeignKey("videos.Video", on_delete=models.CASCADE, related_name="engagements")
    kind = models.CharField(max_length=10, choices=LikeKind.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "video"], name="uq_like_user_video"),
        ]
        indexes = [
            models.Index(fields=["video", "kind"], name="like_video_kind_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} {self.kind} {self.video_id}"


class Subscription(models.Model):
    subscriber = models.ForeignKey(User, on_delete=models.CASCADE, related_name="subscriptions")
    channel = models.ForeignKey(User, on_delete=models.CASCADE, related_name="subscribers")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["subscriber", "channel"], name="uq_subscription_pair"),
            models.CheckConstraint(condition=~Q(subscriber=F("channel")), name="ck_subscription_not_self"),
        ]

    def __str__(self):
        return f"{self.subscriber_id} -> {self.channel_id}"
