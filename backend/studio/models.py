from django.conf import settings
from django.db import models


class AIGeneration(models.Model):
    """History entry for an AI generated product photo or video"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='ai_generations')
    # Absolute CDN URL or a /media/ path of a locally saved copy
    image_url = models.CharField(max_length=1000)
    download_url = models.CharField(max_length=1000, blank=True)
    category = models.CharField(max_length=50, default='clothes')
    prompt = models.TextField(blank=True)
    product = models.ForeignKey(
        'catalog.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='ai_generations'
    )
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"Generation {self.id} ({self.category})"

    class Meta:
        db_table = 'ai_generations'
        ordering = ['-created_at', '-id']
