from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from apps.engagement.services import LikeService, SubscriptionService
from apps.videos.models import Video
import logging

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Recompute video like/dislike counters and channel subscriber counts from the engagement tables.'

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Report drifted counters without fixing them')

    def handle(self, *args, **options):
        dry_run = options.get('dry_run')
        User = get_user_model()

        videos_scanned = 0
        videos_fixed = 0
        for video_id in list(Video.objects.order_by('pk').values_list('pk', flat=True)):
            videos_scanned += 1
            try:
                drift = LikeService.reconcile_video_counters(video_id, dry_run=dry_run)
            except Exception as e:
                logger.exception(f"Failed to reconcile video {video_id}: {e}")
                self.stderr.write(f"ERROR video {video_id}: {e}")
                continue
            if drift:
                videos_fixed += 1
                changes = ", ".join(f"{field} {old} -> {new}" for field, (old, new) in drift.items())
                self.stdout.write(f"VIDEO {video_id}: {changes}")

        channels_scanned = 0
        channels_fixed = 0
        for channel_id in list(User.objects.order_by('pk').values_list('pk', flat=True)):
            channels_scanned += 1
            try:
                drift = SubscriptionService.reconcile_subscriber_count(channel_id, dry_run=dry_run)
            except Exception as e:
                logger.exception(f"Failed to reconcile channel {channel_id}: {e}")
                self.stderr.write(f"ERROR channel {channel_id}: {e}")
                continue
            if drift:
                channels_fixed += 1
                self.stdout.write(f"CHANNEL {channel_id}: subscriber_count {drift[0]} -> {drift[1]}")

        self.stdout.write("")
        if dry_run:
            self.stdout.write("Dry run: no counters were changed")
        self.stdout.write(f"Videos scanned: {videos_scanned}")
        self.stdout.write(f"Videos with drift: {videos_fixed}")
        self.stdout.write(f"Channels scanned: {channels_scanned}")
        self.stdout.write(f"Channels with drift: {channels_fixed}")
