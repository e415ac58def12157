# apps/engagement/admin.py
"""
Django admin configuration for likes and subscriptions.

Fact rows are read-only here: editing them would bypass the counter updates
in apps.engagement.services.
"""
from django.contrib import admin
from .models import Like, Subscription


@admin.register(Like)
class LikeAdmin(admin.ModelAdmin):
    """Admin configuration for Like model."""

    list_display = ['id', 'user', 'video', 'kind', 'created_at']
    list_filter = ['kind', 'created_at']
    search_fields = ['user__email', 'user__username', 'video__title']
    readonly_fields = ['id', 'user', 'video', 'kind', 'created_at']
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    """Admin configuration for Subscription model."""

    list_display = ['id', 'subscriber', 'channel', 'created_at']
    search_fields = ['subscriber__email', 'channel__email', 'channel__channel_name']
    readonly_fields = ['id', 'subscriber', 'channel', 'created_at']
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False
