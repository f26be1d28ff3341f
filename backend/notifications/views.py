from django.utils import timezone
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.mixins import EnvelopeMixin, ListQueryMixin
from .models import Notification
from .serializers import NotificationSerializer


class NotificationViewSet(
    EnvelopeMixin,
    ListQueryMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    The signed-in user's own notifications. They are created by the system;
    users only read them and mark them read.
    """

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    search_fields = ("title", "message")
    filter_fields = ("is_read", "type")
    filter_lookups = {"type": "notification_type"}
    sort_options = {"newest": ("created_at", True), "oldest": ("created_at", False)}
    default_sort = "newest"
    items_per_page = 20

    def get_queryset(self):
        return Notification.objects.filter(recipient=self.request.user)

    @action(detail=True, methods=["post"])
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_read()
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=["post"])
    def mark_all_read(self, request):
        updated = self.get_queryset().filter(is_read=False).update(is_read=True, read_at=timezone.now())
        return Response({"updated": updated})

    @action(detail=False, methods=["get"])
    def unread_count(self, request):
        return Response({"unread": self.get_queryset().filter(is_read=False).count()})
