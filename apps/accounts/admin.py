# apps/accounts/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .forms import AccountChangeForm, AccountCreationForm
from .models import User


@admin.register(User)
class AccountAdmin(UserAdmin):
    form = AccountChangeForm
    add_form = AccountCreationForm

    list_display = ['id', 'email', 'username', 'auth_provider', 'channel_name', 'subscriber_count', 'is_active']
    list_filter = ['auth_provider', 'is_active', 'is_staff']
    search_fields = ['email', 'username', 'channel_name', 'social_id']
    ordering = ['-date_joined']
    readonly_fields = ['auth_provider', 'social_id', 'subscriber_count', 'last_login', 'date_joined']

    fieldsets = (
        (None, {
            'fields': ('email', 'username', 'password')
        }),
        ('Sign-in provider', {
            'fields': ('auth_provider', 'social_id')
        }),
        ('Channel', {
            'fields': ('channel_name', 'channel_description', 'avatar', 'subscriber_count')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('last_login', 'date_joined'),
            'classes': ('collapse',)
        }),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'username', 'channel_name', 'password1', 'password2'),
        }),
    )
