"""
URL configuration for the shop platform backend.

Every app mounts its routes under `api/v1/`.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Shop Platform Admin Panel"
admin.site.site_title = "Shop Platform Admin Portal"
admin.site.index_title = "Welcome to the Shop Platform Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    # orders first: storefront/orders/ must win over storefront/<subdomain>/
    path('api/v1/', include('backend.orders.urls')),
    path('api/v1/', include('backend.shops.urls')),
    path('api/v1/', include('backend.catalog.urls')),
    path('api/v1/', include('backend.credits.urls')),
    path('api/v1/', include('backend.studio.urls')),
    path('api/v1/', include('backend.bot.urls')),
    path('api/v1/', include('backend.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
