# apps/videos/models.py
"""
Video model.

Only the parts the engagement ledger depends on live here: ownership, the
public/ready flags used by the subscription feed, and the denormalized
like/dislike counters. Upload, transcoding and thumbnail extraction happen
elsewhere and only write the url/duration fields.

Counter rules:
- likes/dislikes mirror apps.engagement.models.Like
- They are changed exclusively by apps.engagement.services.LikeService
"""

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class VideoPrivacy(models.TextChoices):
    PUBLIC = "public", "Public"
    UNLISTED = "unlisted", "Unlisted"
    PRIVATE = "private", "Private"


class VideoStatus(models.TextChoices):
    PROCESSING = "processing", "Processing"
    READY = "ready", "Ready"
    FAILED = "failed", "Failed"


class Video(models.Model):
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="videos")

    title = models.CharField(max_length=100)
    description = models.TextField(max_length=5000, blank=True, default="")
    video_url = models.CharField(max_length=500)
    thumbnail_url = models.CharField(max_length=500)
    duration = models.PositiveIntegerField(default=0, help_text="Duration in seconds")
    category = models.CharField(max_length=50, blank=True, default="")

    views = models.PositiveIntegerField(default=0)
    likes = models.PositiveIntegerField(default=0)
    dislikes = models.PositiveIntegerField(default=0)

    privacy = models.CharField(max_length=10, choices=VideoPrivacy.choices, default=VideoPrivacy.PUBLIC)
    status = models.CharField(max_length=12, choices=VideoStatus.choices, default=VideoStatus.PROCESSING)

    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "-published_at"], name="video_owner_published_idx"),
        ]

    def __str__(self):
        return self.title
