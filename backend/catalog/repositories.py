from .models import Product


class ProductRepository:
    """Read-only product snapshots used when pricing order items"""

    def find_by_ids(self, product_ids):
        return Product.objects.in_bulk(list(product_ids))
