from rest_framework import serializers

from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(read_only=True, default=0)
    average_rating = serializers.FloatField(read_only=True, default=0)

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'slug', 'description', 'icon', 'featured',
            'subcategories', 'product_count', 'average_rating', 'created_at',
        ]
        read_only_fields = ['slug', 'created_at']

    def validate_subcategories(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Subcategories must be a list of names.")
        return [item.strip() for item in value if item.strip()]


class ProductSerializer(serializers.ModelSerializer):
    category = serializers.SlugRelatedField(slug_field='slug', read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        source='category',
        write_only=True,
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'description', 'category', 'category_name', 'category_id',
            'price', 'original_price', 'stock', 'status', 'rating', 'reviews',
            'tenant', 'created_at', 'updated_at',
        ]
        read_only_fields = ['tenant', 'rating', 'reviews', 'created_at', 'updated_at']

    def validate(self, attrs):
        price = attrs.get('price', getattr(self.instance, 'price', None))
        original = attrs.get('original_price', getattr(self.instance, 'original_price', None))
        if original is not None and price is not None and original < price:
            raise serializers.ValidationError({"original_price": "Original price cannot be lower than the price."})
        return attrs
