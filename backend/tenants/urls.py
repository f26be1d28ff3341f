from rest_framework.routers import DefaultRouter

from .views import TenantRegistrationViewSet, TenantViewSet

router = DefaultRouter()
router.register(r'tenants/register', TenantRegistrationViewSet, basename='tenant-register')
router.register(r'super-admin/tenants', TenantViewSet, basename='super-admin-tenant')

urlpatterns = router.urls
