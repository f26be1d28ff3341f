from rest_framework.routers import DefaultRouter

from .views import (
    BioimpedanceMeasurementViewSet,
    ClientProfileViewSet,
    CRMAutomationViewSet,
    CRMTaskViewSet,
)

router = DefaultRouter()
router.register(r'crm/clients', ClientProfileViewSet, basename='crm-client')
router.register(r'crm/tasks', CRMTaskViewSet, basename='crm-task')
router.register(r'crm/automations', CRMAutomationViewSet, basename='crm-automation')
router.register(r'crm/bioimpedance', BioimpedanceMeasurementViewSet, basename='bioimpedance')

urlpatterns = router.urls
