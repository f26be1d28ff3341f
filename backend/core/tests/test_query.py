from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase
from rest_framework.exceptions import ValidationError

from core.query import (
    ListQuery,
    Page,
    apply_to_queryset,
    filter_items,
    matches_search,
    paginate,
    resolve,
    sort_items,
)
from marketplace.models import Category

PRODUCTS = [
    {"name": "Whey Protein", "category": "supplements", "price": 120, "tags": ["protein", "recovery"]},
    {"name": "Yoga Mat", "category": "equipment", "price": 80, "tags": ["yoga"]},
    {"name": "Creatine", "category": "supplements", "price": 60, "tags": []},
    {"name": "kettlebell", "category": "equipment", "price": None, "tags": ["strength"]},
]


class ListQueryTests(SimpleTestCase):
    def test_defaults(self):
        query = ListQuery.from_params({})
        self.assertEqual(query.search, "")
        self.assertEqual(query.filters, {})
        self.assertIsNone(query.sort_by)
        self.assertEqual((query.page, query.per_page), (1, 10))

    def test_all_means_no_filter(self):
        query = ListQuery.from_params({"status": "all", "category": "yoga"}, filter_fields=("status", "category"))
        self.assertEqual(query.filters, {"category": "yoga"})

    def test_boolean_filters_are_coerced(self):
        query = ListQuery.from_params({"featured": "true", "is_active": "False"}, filter_fields=("featured", "is_active"))
        self.assertEqual(query.filters, {"featured": True, "is_active": False})

    def test_bad_numbers_fall_back_and_limit_is_capped(self):
        query = ListQuery.from_params({"page": "abc", "limit": "5000"})
        self.assertEqual(query.page, 1)
        self.assertEqual(query.per_page, 100)

        query = ListQuery.from_params({"page": "-3", "limit": "0"})
        self.assertEqual(query.page, 1)
        self.assertEqual(query.per_page, 1)

    def test_default_sort_used_when_missing(self):
        self.assertEqual(ListQuery.from_params({}, default_sort="name").sort_by, "name")
        self.assertEqual(ListQuery.from_params({"sort_by": "price"}, default_sort="name").sort_by, "price")


class InMemoryListTests(SimpleTestCase):
    def test_resolve_reads_dicts_and_objects(self):
        item = SimpleNamespace(category=SimpleNamespace(name="Yoga"))
        self.assertEqual(resolve(item, "category.name"), "Yoga")
        self.assertEqual(resolve({"a": {"b": 2}}, "a.b"), 2)
        self.assertIsNone(resolve({"a": None}, "a.b"))

    def test_search_is_case_insensitive_and_looks_into_lists(self):
        self.assertTrue(matches_search(PRODUCTS[0], "WHEY", ("name",)))
        self.assertTrue(matches_search(PRODUCTS[0], "recov", ("name", "tags")))
        self.assertFalse(matches_search(PRODUCTS[1], "whey", ("name", "tags")))
        self.assertTrue(matches_search(PRODUCTS[1], "   ", ("name",)))

    def test_search_and_filter_combine(self):
        query = ListQuery.from_params({"search": "e", "category": "supplements"}, filter_fields=("category",))
        names = [item["name"] for item in filter_items(PRODUCTS, query, search_fields=("name",))]
        self.assertEqual(names, ["Whey Protein", "Creatine"])

    def test_sort_puts_none_last_and_ignores_case(self):
        by_name = sort_items(PRODUCTS, "name", {"name": ("name", False)})
        self.assertEqual([p["name"] for p in by_name], ["Creatine", "kettlebell", "Whey Protein", "Yoga Mat"])

        by_price = sort_items(PRODUCTS, "price", {"price": ("price", False)})
        self.assertEqual(by_price[-1]["name"], "kettlebell")

    def test_filtering_is_idempotent(self):
        queries = [
            ListQuery.from_params({"search": "e"}),
            ListQuery.from_params({"category": "equipment"}, filter_fields=("category",)),
            ListQuery.from_params({"search": "PRO", "category": "supplements"}, filter_fields=("category",)),
            ListQuery.from_params({"search": "nothing-matches"}),
        ]
        for query in queries:
            once = filter_items(PRODUCTS, query, search_fields=("name", "tags"))
            twice = filter_items(once, query, search_fields=("name", "tags"))
            self.assertEqual(twice, once)

    def test_unknown_sort_keeps_order(self):
        self.assertEqual(sort_items(PRODUCTS, "nope", {"name": ("name", False)}), PRODUCTS)

    def test_paginate(self):
        page = paginate(list(range(25)), page=3, per_page=10)
        self.assertEqual(page.items, [20, 21, 22, 23, 24])
        self.assertEqual(page.meta(), {"page": 3, "limit": 10, "total": 25, "pages": 3})
        self.assertTrue(page.has_previous)
        self.assertFalse(page.has_next)

    def test_page_past_the_end_is_empty(self):
        page = paginate([1, 2, 3], page=5, per_page=10)
        self.assertEqual(page.items, [])
        self.assertEqual(page.total, 3)

    def test_single_page_hides_pagination(self):
        self.assertFalse(Page(items=[1], page=1, per_page=10, total=1).has_pagination)

        page = paginate(PRODUCTS + [{"name": "Shaker"}], page=1, per_page=10)
        self.assertEqual(page.total, 5)
        self.assertEqual(page.total_pages, 1)
        self.assertIs(page.has_pagination, False)
        self.assertEqual(page.start_index, 0)
        self.assertEqual(len(page.items), 5)
        self.assertEqual(Page(items=[], page=1, per_page=10, total=0).total_pages, 0)

    def test_paginate_rejects_bad_page(self):
        with self.assertRaises(ValueError):
            paginate([], page=0)


class QuerysetListTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        Category.objects.create(name="Yoga", description="Mats and blocks", featured=True)
        Category.objects.create(name="Supplements", description="Protein")
        Category.objects.create(name="Apparel", description="Yoga pants", featured=True)

    def test_apply_to_queryset(self):
        query = ListQuery.from_params(
            {"search": "yoga", "featured": "true", "sort_by": "name"},
            filter_fields=("featured",),
        )
        qs = apply_to_queryset(
            Category.objects.all(),
            query,
            search_fields=("name", "description"),
            sorters={"name": ("name", False)},
        )
        self.assertEqual([c.name for c in qs], ["Apparel", "Yoga"])

    def test_queryset_filtering_is_idempotent(self):
        query = ListQuery.from_params({"search": "yoga", "featured": "true"}, filter_fields=("featured",))
        once = apply_to_queryset(Category.objects.all(), query, search_fields=("name", "description"))
        twice = apply_to_queryset(once, query, search_fields=("name", "description"))
        self.assertEqual(set(twice), set(once))

    def test_malformed_filter_value_is_a_validation_error(self):
        query = ListQuery(filters={"featured": "maybe"})
        with self.assertRaises(ValidationError) as ctx:
            apply_to_queryset(Category.objects.all(), query, params={"featured": "is_featured"})
        self.assertIn("is_featured", ctx.exception.detail)

    def test_paginate_queryset(self):
        page = paginate(Category.objects.order_by("name"), page=2, per_page=2)
        self.assertEqual([c.name for c in page.items], ["Yoga"])
        self.assertEqual(page.total, 3)
