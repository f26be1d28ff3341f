from rest_framework.routers import DefaultRouter

from .views import UserRoleViewSet, UserViewSet

router = DefaultRouter()
router.register(r'users', UserViewSet, basename='user')
router.register(r'user-roles', UserRoleViewSet, basename='user-role')

urlpatterns = router.urls
