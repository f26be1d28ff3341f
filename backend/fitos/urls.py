from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from users.tokens import CustomTokenObtainPairView, CustomTokenRefreshView


urlpatterns = [
    path('admin/', admin.site.urls),

    # Auth routes
    path('api/auth/token/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/auth/token/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),

    # API schema and docs
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # FitOS APIs
    path('api/', include('tenants.urls')),
    path('api/', include('users.urls')),
    path('api/', include('plans.urls')),
    path('api/', include('notifications.urls')),
    path('api/', include('marketplace.urls')),
    path('api/', include('scheduling.urls')),
    path('api/', include('integrations.urls')),
    path('api/', include('analytics.urls')),
    path('api/', include('crm.urls')),
]
