from dataclasses import replace

from rest_framework import viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from core.query import ListQuery, apply_to_queryset, paginate
from tenants.middleware import header_tenant_mismatch
from tenants.permissions import IsTenantActiveOrReadOnly, acting_tenant


class EnvelopeMixin:
    """Wrap successful payloads as {"success": true, "data": ...}."""

    def finalize_response(self, request, response, *args, **kwargs):
        if (
            isinstance(response, Response)
            and not response.exception
            and response.data is not None
            and not (isinstance(response.data, dict) and "success" in response.data)
        ):
            response.data = {"success": True, "data": response.data}
        return super().finalize_response(request, response, *args, **kwargs)


class ListQueryMixin:
    """
    List action backed by core.query: declare search_fields, filter_fields,
    sort_options (sort key -> (field, descending)) and default_sort.
    """

    search_fields = ()
    filter_fields = ()
    sort_options = {}
    default_sort = None
    items_per_page = 10
    # query parameter -> field lookup, for filters whose lookup differs from the parameter
    filter_lookups = {}

    def get_list_query(self):
        query = ListQuery.from_params(
            self.request.query_params,
            filter_fields=self.filter_fields,
            default_sort=self.default_sort,
            per_page=self.items_per_page,
        )
        if self.filter_lookups:
            filters = {self.filter_lookups.get(name, name): value for name, value in query.filters.items()}
            query = replace(query, filters=filters)
        return query

    def list(self, request, *args, **kwargs):
        query = self.get_list_query()
        queryset = apply_to_queryset(
            self.filter_queryset(self.get_queryset()),
            query,
            search_fields=self.search_fields,
            sorters=self.sort_options,
            params={lookup: name for name, lookup in self.filter_lookups.items()},
        )
        page = paginate(queryset, query.page, query.per_page)
        serializer = self.get_serializer(page.items, many=True)
        return Response({"success": True, "data": serializer.data, "pagination": page.meta()})


class TenantFilteredViewSet(EnvelopeMixin, ListQueryMixin, viewsets.ModelViewSet):
    """Base ViewSet that scopes data to the user's tenant,
    but allows super-admins to see all data.
    """

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        if header_tenant_mismatch(request.user, getattr(request, "tenant", None)):
            self.permission_denied(request, message="X-Tenant does not match your tenant.")
        guard = IsTenantActiveOrReadOnly()
        if not guard.has_permission(request, self):
            self.permission_denied(request, message=guard.message)

    def get_queryset(self):
        qs = super().get_queryset()
        user = self.request.user

        # Super-admin (no tenant) sees everything
        if user.is_authenticated and user.is_superuser and not user.tenant_id:
            return qs

        if user.is_authenticated and user.tenant_id:
            return qs.filter(tenant_id=user.tenant_id)

        return qs.none()

    def get_tenant(self):
        return acting_tenant(self.request)

    def perform_create(self, serializer):
        tenant = self.get_tenant()
        if tenant is None:
            raise PermissionDenied("No tenant selected. Send the X-Tenant header to act on behalf of a tenant.")
        serializer.save(tenant=tenant)
