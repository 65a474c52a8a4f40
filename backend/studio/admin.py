from django.contrib import admin
from .models import AIGeneration


@admin.register(AIGeneration)
class AIGenerationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'category', 'product', 'created_at']
    list_filter = ['category', 'created_at']
    search_fields = ['user__username', 'prompt']
    raw_id_fields = ['user', 'product']
    ordering = ['-created_at']
