import logging

from django.db.models import Avg, Count, FloatField, Q, Value
from django.db.models.functions import Coalesce
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.mixins import EnvelopeMixin, TenantFilteredViewSet
from core.query import ListQuery, filter_items, paginate, sort_items
from plans.limits import require_feature
from users.permissions import IsSuperAdmin, IsTrainerOrAbove
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer

logger = logging.getLogger(__name__)


# ============================================================
# CATEGORY VIEWSET
# ============================================================
class CategoryViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    """
    - Everyone signed in: browse, search and sort
    - Super-admin: full CRUD
    The category tree is small, so listing filters and sorts in memory.
    """
    serializer_class = CategorySerializer
    lookup_field = "slug"

    search_fields = ("name", "description", "subcategories")
    sort_options = {
        "name": ("name", False),
        "products": ("product_count", True),
        "rating": ("average_rating", True),
        "trending": ("product_count", True),
    }

    def get_queryset(self):
        active = Q(products__status="active")
        return Category.objects.annotate(
            product_count=Count("products", filter=active),
            average_rating=Coalesce(Avg("products__rating", filter=active), Value(0.0), output_field=FloatField()),
        ).order_by("name")

    def get_permissions(self):
        if self.action in ["list", "retrieve", "featured"]:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsSuperAdmin()]

    def list(self, request, *args, **kwargs):
        query = ListQuery.from_params(request.query_params, filter_fields=("featured",), default_sort="name", per_page=12)
        items = filter_items(self.get_queryset(), query, search_fields=self.search_fields)
        items = sort_items(items, query.sort_by, self.sort_options)
        page = paginate(items, query.page, query.per_page)
        return Response({
            "success": True,
            "data": self.get_serializer(page.items, many=True).data,
            "pagination": page.meta(),
        })

    @action(detail=False, methods=["get"])
    def featured(self, request):
        return Response(self.get_serializer(self.get_queryset().filter(featured=True), many=True).data)


# ============================================================
# PRODUCT VIEWSET
# ============================================================
class ProductViewSet(TenantFilteredViewSet):
    """
    Seller listings of the current tenant.
    - Owner, Admin & Trainer: full CRUD
    - Member: read-only
    - Creating listings requires the 'marketplace' plan feature
    """
    queryset = Product.all_objects.select_related("category")
    serializer_class = ProductSerializer

    search_fields = ("name", "description")
    filter_fields = ("category", "status")
    filter_lookups = {"category": "category__slug"}
    sort_options = {
        "newest": ("created_at", True),
        "name": ("name", False),
        "price": ("price", False),
        "price_desc": ("price", True),
        "rating": ("rating", True),
        "stock": ("stock", False),
    }
    default_sort = "newest"
    items_per_page = 10

    def get_permissions(self):
        if self.action in ["list", "retrieve", "summary"]:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsTrainerOrAbove()]

    def perform_create(self, serializer):
        tenant = self.get_tenant()
        require_feature(tenant, "marketplace")
        super().perform_create(serializer)
        logger.info("🛒 Product '%s' listed by tenant '%s'", serializer.instance.name, getattr(tenant, "slug", None))

    @action(detail=False, methods=["get"])
    def summary(self, request):
        qs = self.get_queryset()
        counts = {status: 0 for status, _ in Product.STATUS_CHOICES}
        for row in qs.values("status").annotate(total=Count("id")):
            counts[row["status"]] = row["total"]
        return Response({"total": sum(counts.values()), "by_status": counts})
