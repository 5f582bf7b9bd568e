"""
URL configuration for the Fine Pot API.

    /api/auth/      accounts (register, login, token refresh, me)
    /api/teams/     teams, membership, balances, stats
    /api/           team-scoped ledger routes, disputes and notifications
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from config.views import health_check

urlpatterns = [
    # Health check (for Render)
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # Authentication
    path('api/auth/', include('apps.accounts.urls')),

    # API endpoints
    path('api/teams/', include('apps.teams.urls')),
    path('api/', include('apps.fines.urls')),
    path('api/', include('apps.disputes.urls')),
    path('api/', include('apps.notifications.urls')),
]

# Static files (development only)
if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
