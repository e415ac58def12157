# apps/videos/admin.py
from django.contrib import admin
from .models import Video


@admin.register(Video)
class VideoAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'owner', 'privacy', 'status', 'likes', 'dislikes', 'published_at']
    list_filter = ['privacy', 'status', 'category']
    search_fields = ['title', 'owner__email', 'owner__channel_name']
    # Counters are owned by the engagement services
    readonly_fields = ['views', 'likes', 'dislikes', 'created_at', 'updated_at']
    ordering = ['-created_at']
