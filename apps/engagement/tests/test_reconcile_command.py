# apps/engagement/tests/test_reconcile_command.py
"""
Tests for the reconcile_counters management command.
"""

from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from apps.engagement.services import LikeService, SubscriptionService
from apps.videos.models import Video

User = get_user_model()


class ReconcileCountersCommandTestCase(TestCase):

    def setUp(self):
        self.creator = User.objects.create_user(
            username="creator", email="creator@example.com", password="secret123", channel_name="Creator"
        )
        self.fan = User.objects.create_user(
            username="fan", email="fan@example.com", password="secret123", channel_name="Fan"
        )
        self.video = Video.objects.create(
            owner=self.creator,
            title="Clip",
            video_url="https://cdn.example.com/v.mp4",
            thumbnail_url="https://cdn.example.com/t.jpg",
        )
        LikeService.toggle_like(self.fan.pk, self.video.pk, "like")
        SubscriptionService.toggle_subscription(self.fan.pk, self.creator.pk)

        # Simulate drift
        Video.objects.filter(pk=self.video.pk).update(likes=5, dislikes=2)
        User.objects.filter(pk=self.creator.pk).update(subscriber_count=0)

    def run_command(self, *args):
        out = StringIO()
        call_command("reconcile_counters", *args, stdout=out, stderr=StringIO())
        return out.getvalue()

    def test_dry_run_reports_without_fixing(self):
        output = self.run_command("--dry-run")

        self.assertIn(f"VIDEO {self.video.pk}", output)
        self.assertIn(f"CHANNEL {self.creator.pk}: subscriber_count 0 -> 1", output)
        self.assertIn("Dry run", output)
        self.video.refresh_from_db()
        self.assertEqual(self.video.likes, 5)

    def test_fixes_drift(self):
        output = self.run_command()

        self.assertIn("Videos with drift: 1", output)
        self.assertIn("Channels with drift: 1", output)
        self.video.refresh_from_db()
        self.creator.refresh_from_db()
        self.assertEqual((self.video.likes, self.video.dislikes), (1, 0))
        self.assertEqual(self.creator.subscriber_count, 1)

    def test_second_run_is_clean(self):
        self.run_command()
        output = self.run_command()

        self.assertIn("Videos with drift: 0", output)
        self.assertIn("Channels with drift: 0", output)
