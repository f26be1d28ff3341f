from rest_framework.routers import DefaultRouter

from .views import AppointmentReminderViewSet, AppointmentViewSet, AvailabilitySlotViewSet

router = DefaultRouter()
router.register(r'scheduling/appointments', AppointmentViewSet, basename='appointment')
router.register(r'scheduling/availability', AvailabilitySlotViewSet, basename='availability')
router.register(r'scheduling/reminders', AppointmentReminderViewSet, basename='appointment-reminder')

urlpatterns = router.urls
