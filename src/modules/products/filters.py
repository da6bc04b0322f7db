import django_filters
from django.db.models import Q

from modules.products.models import Product, ProductCategory, ProductSize

SORT_ORDERINGS = {
    "price_asc": ("price", "-created_at"),
    "price_desc": ("-price", "-created_at"),
    "newest": ("-created_at",),
}


class ProductFilter(django_filters.FilterSet):
    category = django_filters.ChoiceFilter(choices=ProductCategory.choices)
    sub_category = django_filters.CharFilter(lookup_expr="iexact")
    size = django_filters.ChoiceFilter(
        choices=ProductSize.choices, method="filter_size"
    )
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    is_featured = django_filters.BooleanFilter()
    search = django_filters.CharFilter(method="filter_search")
    sort = django_filters.ChoiceFilter(
        choices=[(key, key) for key in SORT_ORDERINGS], method="filter_sort"
    )

    class Meta:
        model = Product
        fields = [
            "category",
            "sub_category",
            "size",
            "min_price",
            "max_price",
            "is_featured",
            "search",
            "sort",
        ]

    def filter_size(self, queryset, name, value):
        # ``sizes`` is a JSON array; match the quoted element so "S" != "XS".
        return queryset.filter(sizes__icontains=f'"{value}"')

    def filter_search(self, queryset, name, value):
        term = value.strip()
        if not term:
            return queryset
        return queryset.filter(
            Q(name__icontains=term)
            | Q(description__icontains=term)
            | Q(sub_category__icontains=term)
        )

    def filter_sort(self, queryset, name, value):
        return queryset.order_by(*SORT_ORDERINGS[value])
