# apps/engagement/tests/test_like_service.py
"""
Tests for LikeService.

Tests cover:
1. The none/like/dislike transition table and the counters it drives
2. Counter floor at zero
3. Engagement state reads
4. Liked-video listing, fact-table counts, bulk removal, reconciliation
"""

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase

from apps.common.exceptions import InvalidInputError, NotFoundError
from apps.engagement.models import Like
from apps.engagement.services import LikeService
from apps.videos.models import Video

User = get_user_model()


def make_user(username):
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="secret123",
        channel_name=username.title(),
    )


def make_video(owner, title="Clip", **extra):
    return Video.objects.create(
        owner=owner,
        title=title,
        video_url="https://cdn.example.com/v.mp4",
        thumbnail_url="https://cdn.example.com/t.jpg",
        **extra,
    )


class ToggleLikeTestCase(TestCase):
    """Transition table for one (user, video) pair."""

    def setUp(self):
        self.owner = make_user("owner")
        self.viewer = make_user("viewer")
        self.video = make_video(self.owner)

    def counters(self):
        self.video.refresh_from_db()
        return self.video.likes, self.video.dislikes

    def test_like_from_none(self):
        result = LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")

        self.assertEqual(result, {"action": "added", "kind": "like"})
        self.assertEqual(self.counters(), (1, 0))
        self.assertEqual(Like.objects.get().kind, "like")

    def test_like_twice_removes(self):
        LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")
        result = LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")

        self.assertEqual(result, {"action": "removed", "kind": "like"})
        self.assertEqual(self.counters(), (0, 0))
        self.assertFalse(Like.objects.exists())

    def test_dislike_from_none(self):
        result = LikeService.toggle_like(self.viewer.pk, self.video.pk, "dislike")

        self.assertEqual(result["action"], "added")
        self.assertEqual(self.counters(), (0, 1))

    def test_switch_like_to_dislike(self):
        LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")
        result = LikeService.toggle_like(self.viewer.pk, self.video.pk, "dislike")

        self.assertEqual(
            result,
            {"action": "switched", "kind": "dislike", "previous_kind": "like"},
        )
        self.assertEqual(self.counters(), (0, 1))
        self.assertEqual(Like.objects.count(), 1)

    def test_switch_dislike_to_like(self):
        LikeService.toggle_like(self.viewer.pk, self.video.pk, "dislike")
        result = LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")

        self.assertEqual(result["previous_kind"], "dislike")
        self.assertEqual(self.counters(), (1, 0))

    def test_full_cycle_returns_to_start(self):
        for kind in ["like", "dislike", "dislike"]:
            LikeService.toggle_like(self.viewer.pk, self.video.pk, kind)

        self.assertEqual(self.counters(), (0, 0))
        self.assertFalse(Like.objects.exists())

    def test_counters_track_many_users(self):
        others = [make_user(f"fan{i}") for i in range(3)]
        for user in others:
            LikeService.toggle_like(user.pk, self.video.pk, "like")
        LikeService.toggle_like(self.viewer.pk, self.video.pk, "dislike")
        LikeService.toggle_like(others[0].pk, self.video.pk, "dislike")

        self.assertEqual(self.counters(), (2, 2))
        self.assertEqual(LikeService.get_video_like_counts(self.video.pk), {"likes": 2, "dislikes": 2})

    def test_counter_never_negative(self):
        Like.objects.create(user=self.viewer, video=self.video, kind="like")
        # Counter already drifted to zero
        self.assertEqual(self.counters(), (0, 0))

        result = LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")

        self.assertEqual(result["action"], "removed")
        self.assertEqual(self.counters(), (0, 0))

    def test_invalid_kind(self):
        with self.assertRaises(InvalidInputError):
            LikeService.toggle_like(self.viewer.pk, self.video.pk, "love")

        self.assertFalse(Like.objects.exists())

    def test_missing_video(self):
        with self.assertRaises(NotFoundError):
            LikeService.toggle_like(self.viewer.pk, 999999, "like")

    def test_missing_user(self):
        with self.assertRaises(NotFoundError):
            LikeService.toggle_like(999999, self.video.pk, "like")

        self.assertEqual(self.counters(), (0, 0))
        self.assertFalse(Like.objects.exists())

    def test_invalid_ids(self):
        with self.assertRaises(InvalidInputError):
            LikeService.toggle_like(self.viewer.pk, "not-an-id", "like")
        with self.assertRaises(InvalidInputError):
            LikeService.toggle_like(0, self.video.pk, "like")

    def test_insert_race_applies_click_to_existing_fact(self):
        """A concurrent request inserted the fact between lookup and insert."""
        existing = Like.objects.create(user=self.viewer, video=self.video, kind="like")
        Video.objects.filter(pk=self.video.pk).update(likes=1)

        with patch.object(LikeService, "_find_like", side_effect=[None, existing]):
            result = LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")

        self.assertEqual(result["action"], "removed")
        self.assertEqual(self.counters(), (0, 0))
        self.assertFalse(Like.objects.exists())


class EngagementStateTestCase(TestCase):

    def setUp(self):
        self.owner = make_user("owner")
        self.viewer = make_user("viewer")
        self.video = make_video(self.owner)

    def test_state_none(self):
        self.assertEqual(
            LikeService.get_engagement_state(self.viewer.pk, self.video.pk),
            {"liked": False, "disliked": False, "kind": None},
        )

    def test_state_follows_toggles(self):
        LikeService.toggle_like(self.viewer.pk, self.video.pk, "dislike")
        self.assertEqual(
            LikeService.get_engagement_state(self.viewer.pk, self.video.pk),
            {"liked": False, "disliked": True, "kind": "dislike"},
        )

        LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")
        self.assertEqual(
            LikeService.get_engagement_state(self.viewer.pk, self.video.pk),
            {"liked": True, "disliked": False, "kind": "like"},
        )

    def test_state_is_per_user(self):
        LikeService.toggle_like(self.viewer.pk, self.video.pk, "like")

        state = LikeService.get_engagement_state(self.owner.pk, self.video.pk)

        self.assertFalse(state["liked"])


class LikeListingTestCase(TestCase):

    def setUp(self):
        self.owner = make_user("owner")
        self.viewer = make_user("viewer")
        self.videos = [make_video(self.owner, title=f"Clip {i}") for i in range(3)]

    def test_user_likes_newest_first_and_excludes_dislikes(self):
        LikeService.toggle_like(self.viewer.pk, self.videos[0].pk, "like")
        LikeService.toggle_like(self.viewer.pk, self.videos[1].pk, "dislike")
        LikeService.toggle_like(self.viewer.pk, self.videos[2].pk, "like")

        videos, pagination = LikeService.get_user_likes(self.viewer.pk)

        self.assertEqual([v.pk for v in videos], [self.videos[2].pk, self.videos[0].pk])
        self.assertEqual(pagination, {"page": 1, "limit": 20, "total": 2, "pages": 1})

    def test_user_likes_pagination(self):
        for video in self.videos:
            LikeService.toggle_like(self.viewer.pk, video.pk, "like")

        videos, pagination = LikeService.get_user_likes(self.viewer.pk, page=2, limit=2)

        self.assertEqual(len(videos), 1)
        self.assertEqual(pagination["pages"], 2)
        self.assertEqual(pagination["total"], 3)

    def test_remove_all_video_likes(self):
        video = self.videos[0]
        LikeService.toggle_like(self.viewer.pk, video.pk, "like")
        LikeService.toggle_like(self.owner.pk, video.pk, "dislike")

        deleted = LikeService.remove_all_video_likes(video.pk)

        video.refresh_from_db()
        self.assertEqual(deleted, 2)
        self.assertEqual((video.likes, video.dislikes), (0, 0))
        self.assertFalse(Like.objects.filter(video=video).exists())

    def test_reconcile_video_counters(self):
        video = self.videos[0]
        LikeService.toggle_like(self.viewer.pk, video.pk, "like")
        Video.objects.filter(pk=video.pk).update(likes=7, dislikes=3)

        self.assertEqual(
            LikeService.reconcile_video_counters(video.pk, dry_run=True),
            {"likes": (7, 1), "dislikes": (3, 0)},
        )
        video.refresh_from_db()
        self.assertEqual(video.likes, 7)

        LikeService.reconcile_video_counters(video.pk)
        video.refresh_from_db()
        self.assertEqual((video.likes, video.dislikes), (1, 0))
        self.assertEqual(LikeService.reconcile_video_counters(video.pk), {})
