from django.urls import path

from .views import PlatformAnalyticsViewSet, UserAnalyticsViewSet

urlpatterns = [
    path(
        'admin/users/analytics/',
        UserAnalyticsViewSet.as_view({'get': 'list'}),
        name='user-analytics',
    ),
    path(
        'admin/analytics/overview/',
        PlatformAnalyticsViewSet.as_view({'get': 'overview'}),
        name='analytics-overview',
    ),
    path(
        'admin/analytics/refresh/',
        PlatformAnalyticsViewSet.as_view({'post': 'refresh'}),
        name='analytics-refresh',
    ),
]
