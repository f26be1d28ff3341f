from rest_framework.routers import DefaultRouter

from .views import IntegrationViewSet, MessageTemplateViewSet

router = DefaultRouter()
router.register(r'integrations/providers', IntegrationViewSet, basename='integration')
router.register(r'integrations/whatsapp-templates', MessageTemplateViewSet, basename='message-template')

urlpatterns = router.urls
