# apps/engagement/signals.py
"""
Django signals for the engagement ledger.

Signals handle:
1. Account deletion: the CASCADE on Like and Subscription would drop the
   facts without touching Video.likes/dislikes or the channels'
   subscriber_count, so the departing user's engagement is released through
   the services first, inside the deletion transaction.
"""

import logging

from django.conf import settings
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .services import LikeService, SubscriptionService

logger = logging.getLogger(__name__)


@receiver(pre_delete, sender=settings.AUTH_USER_MODEL)
def release_engagement_on_account_delete(sender, instance, **kwargs):
    likes = LikeService.release_user_likes(instance.pk)
    subscriptions = SubscriptionService.release_user_subscriptions(instance.pk)
    if likes or subscriptions:
        logger.info(
            f"Account {instance.pk} deleted: released {likes} likes and {subscriptions} subscriptions"
        )
