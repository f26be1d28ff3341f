from rest_framework.routers import DefaultRouter

from .views import CategoryViewSet, ProductViewSet

router = DefaultRouter()
router.register(r'marketplace/categories', CategoryViewSet, basename='marketplace-category')
router.register(r'marketplace/products', ProductViewSet, basename='marketplace-product')

urlpatterns = router.urls
