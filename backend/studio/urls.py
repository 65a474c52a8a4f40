from django.urls import path
from .views import (
    health, studio_config, studio_credits, generate, generate_video, generate_ad_creative, download_image,
    generations_me, generation_create, generation_detail
)

urlpatterns = [
    path('studio/health/', health, name='studio-health'),
    path('studio/config/', studio_config, name='studio-config'),
    path('studio/credits/', studio_credits, name='studio-credits'),
    path('studio/generate/', generate, name='studio-generate'),
    path('studio/generate-video/', generate_video, name='studio-generate-video'),
    path('studio/generate-ad-creative/', generate_ad_creative, name='studio-generate-ad-creative'),
    path('studio/download-image/', download_image, name='studio-download-image'),
    path('ai-generations/', generation_create, name='ai-generation-create'),
    path('ai-generations/me/', generations_me, name='ai-generations-me'),
    path('ai-generations/<int:pk>/', generation_detail, name='ai-generation-detail'),
]
