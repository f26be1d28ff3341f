from django.contrib import admin

from core.admin import TenantSafeAdmin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'featured')
    search_fields = ('name', 'description')


@admin.register(Product)
class ProductAdmin(TenantSafeAdmin):
    list_display = ('name', 'tenant', 'category', 'price', 'stock', 'status')
    list_filter = ('status', 'category')
    search_fields = ('name', 'description')
