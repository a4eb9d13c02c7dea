import django_filters
from django.db.models import Q
from .models import Product, ProductStatus


class ProductFilter(django_filters.FilterSet):
    """Filter for the product list"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.ChoiceFilter(choices=ProductStatus.choices)
    in_stock = django_filters.BooleanFilter(method='filter_in_stock', label='In Stock')

    class Meta:
        model = Product
        fields = ['search', 'status', 'in_stock']

    def filter_search(self, queryset, name, value):
        """Match title, SKU or label"""
        if not value:
            return queryset
        return queryset.filter(Q(title__icontains=value) | Q(sku__icontains=value) | Q(label__icontains=value))

    def filter_in_stock(self, queryset, name, value):
        if value is None:
            return queryset
        return queryset.filter(stock__gt=0) if value else queryset.filter(stock=0)
