from django.contrib import admin


class TenantSafeAdmin(admin.ModelAdmin):
    """Admin for tenant-owned rows: platform staff see every tenant, tenant staff only their own."""

    def get_queryset(self, request):
        qs = self.model.all_objects.get_queryset()
        ordering = self.get_ordering(request)
        if ordering:
            qs = qs.order_by(*ordering)

        # ✅ Platform superuser sees all tenant data
        if request.user.is_superuser and not getattr(request.user, "tenant_id", None):
            return qs

        tenant_id = getattr(request.user, "tenant_id", None)
        if tenant_id:
            return qs.filter(tenant_id=tenant_id)

        return qs.none()

    def save_model(self, request, obj, form, change):
        tenant = getattr(request.user, "tenant", None)
        if tenant is not None and not obj.tenant_id:
            obj.tenant = tenant
        super().save_model(request, obj, form, change)
