from rest_framework import serializers

from .models import DashboardSnapshot


class DashboardSnapshotSerializer(serializers.ModelSerializer):
    class Meta:
        model = DashboardSnapshot
        fields = ['key', 'generated_at', 'duration_ms']
