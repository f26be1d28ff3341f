from rest_framework.routers import DefaultRouter

from .views import CustomPlanViewSet, PlanConfigViewSet, PlanLimitsViewSet

router = DefaultRouter()
router.register(r'super-admin/plan-configs', PlanConfigViewSet, basename='plan-config')
router.register(r'super-admin/custom-plans', CustomPlanViewSet, basename='custom-plan')
router.register(r'plan-limits', PlanLimitsViewSet, basename='plan-limits')

urlpatterns = router.urls
