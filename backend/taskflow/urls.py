"""
URL configuration for the taskflow project.
"""

import time

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from django.utils import timezone
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView


STARTED_AT = time.monotonic()


def health_view(request):
    """Liveness probe; needs no authentication."""
    return JsonResponse({
        'status': 'OK',
        'timestamp': timezone.now().isoformat(),
        'uptime': time.monotonic() - STARTED_AT,
    })


def not_found_view(request, exception=None):
    return JsonResponse({'message': 'Route not found'}, status=404)


urlpatterns = [
    path('health', health_view, name='health'),
    path('admin/', admin.site.urls),
    path('api/', include('tasks.urls')),
    # OpenAPI/Swagger Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]

handler404 = not_found_view
