"""
Test suite for Catalog module
Tests: derived product pricing and the product API
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditActionType, AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.catalog.models import Product


class ProductModelTests(TestCase):
    """Test Product pricing"""

    def test_pricing_derived_on_save(self):
        """Test discount, tax and total follow the base price"""
        product = TestDataFactory.create_product(
            base_price=Decimal('99.99'), discount_percentage=Decimal('15'), tax_percentage=Decimal('7.5')
        )
        self.assertEqual(product.discount_amount, Decimal('15.00'))
        self.assertEqual(product.tax_amount, Decimal('6.37'))
        self.assertEqual(product.total, Decimal('91.36'))

    def test_pricing_with_update_fields(self):
        """Test a partial save still refreshes derived columns"""
        product = TestDataFactory.create_product(base_price=Decimal('100.00'))
        product.tax_percentage = Decimal('10')
        product.save(update_fields=['tax_percentage'])
        product.refresh_from_db()
        self.assertEqual(product.tax_amount, Decimal('10.00'))
        self.assertEqual(product.total, Decimal('110.00'))


class ProductAPITests(TestCase):
    """Test Product API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product(self):
        """Test creating a product via API"""
        data = {
            'title': 'Canvas Tote',
            'sku': 'TOTE-001',
            'base_price': '250.00',
            'discount_percentage': '10',
            'tax_percentage': '5',
        }
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total'], '236.25')
        self.assertTrue(AuditLog.objects.filter(action_type=AuditActionType.PRODUCT_CREATED).exists())

    def test_create_product_invalid(self):
        """Test validation errors are reported as 422"""
        data = {'title': 'ab', 'sku': 'TOTE-002', 'base_price': '-1'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertIn('title', response.data)
        self.assertIn('base_price', response.data)

    def test_duplicate_sku(self):
        """Test a duplicate SKU is rejected"""
        TestDataFactory.create_product(sku='DUP-001')
        data = {'title': 'Another', 'sku': 'DUP-001', 'base_price': '10.00'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)

    def test_update_product(self):
        """Test updating a product recomputes its total"""
        product = TestDataFactory.create_product(base_price=Decimal('100.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'base_price': '200.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], '200.00')
        log = AuditLog.objects.get(action_type=AuditActionType.PRODUCT_UPDATED)
        self.assertEqual(log.metadata['total'], {'old': '100.00', 'new': '200.00'})

    def test_list_products(self):
        """Test listing and searching products"""
        TestDataFactory.create_product(title='Denim Jacket', sku='DJ-001')
        TestDataFactory.create_product(title='Linen Shirt', sku='LS-001', stock=0)

        response = self.client.get('/api/v1/products/', {'search': 'denim'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/v1/products/', {'in_stock': 'false'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['sku'], 'LS-001')

    def test_get_missing_product(self):
        """Test retrieving an unknown product"""
        response = self.client.get('/api/v1/products/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Product.objects.count(), 0)
