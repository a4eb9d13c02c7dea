"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.catalog.models import Product
from backend.parties.models import Customer
from backend.orders.services import OrderService
from backend.payments.services import PaymentLedger
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_customer(name=None, phone=None, email=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'01{random.randint(100000000, 999999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(
            name=name,
            phone=phone,
            email=email
        )

    @staticmethod
    def create_product(title=None, sku=None, base_price=None, discount_percentage=None, tax_percentage=None, stock=10):
        """Create a test product"""
        if not title:
            title = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU_{TestDataFactory.random_string(8)}'
        return Product.objects.create(
            title=title,
            sku=sku,
            base_price=base_price if base_price is not None else Decimal('100.00'),
            discount_percentage=discount_percentage if discount_percentage is not None else Decimal('0.00'),
            tax_percentage=tax_percentage if tax_percentage is not None else Decimal('0.00'),
            stock=stock
        )

    @staticmethod
    def create_order(customer=None, items=None, shipping=None, **kwargs):
        """
        Create a test order through ``OrderService``.

        Without ``items`` one line of a fresh product at ``100.00`` is added,
        so the grand total is ``100.00`` plus shipping.
        """
        if not customer:
            customer = TestDataFactory.create_customer()
        if items is None:
            product = TestDataFactory.create_product(base_price=Decimal('100.00'))
            items = [{'product': product.id, 'quantity': 1}]
        return OrderService().create_order(customer.id, items, shipping=shipping, **kwargs)

    @staticmethod
    def create_payment(order, amount, customer=None, **kwargs):
        """Record a test payment through ``PaymentLedger``"""
        customer_id = customer.id if customer else order.customer_id
        return PaymentLedger().create_payment(order.id, customer_id, Decimal(str(amount)), **kwargs)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
