from .models import Customer


class CustomerRepository:
    """Read access to the customer store"""

    def find_by_id(self, customer_id):
        if customer_id is None:
            return None
        return Customer.objects.filter(pk=customer_id).first()
