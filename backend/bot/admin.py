from django.contrib import admin
from .models import BotUser


@admin.register(BotUser)
class BotUserAdmin(admin.ModelAdmin):
    list_display = ['telegram_id', 'username', 'credits', 'generations_count', 'language', 'is_banned', 'created_at']
    list_filter = ['language', 'is_banned']
    search_fields = ['telegram_id', 'username', 'email']
    ordering = ['-created_at']
