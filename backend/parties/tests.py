"""
Test suite for Parties module
Tests: the customer store API
"""
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditActionType, AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.parties.models import Customer


class CustomerAPITests(TestCase):
    """Test Customer API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        """Test creating a customer via API"""
        data = {'name': 'Rahim Traders', 'email': 'rahim@example.com', 'phone': '01711111111', 'city': 'Dhaka'}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Customer.objects.get().city, 'Dhaka')
        log = AuditLog.objects.get(action_type=AuditActionType.CUSTOMER_CREATED)
        self.assertEqual(log.performed_by, self.user.username)

    def test_create_customer_invalid(self):
        """Test a customer without phone or a valid email is rejected"""
        response = self.client.post('/api/v1/customers/', {'name': 'No Phone', 'email': 'bad'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertIn('phone', response.data)
        self.assertIn('email', response.data)

    def test_update_customer(self):
        """Test updating a customer records only changed fields"""
        customer = TestDataFactory.create_customer(name='Karim')
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {'city': 'Chattogram', 'name': 'Karim'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action_type=AuditActionType.CUSTOMER_UPDATED)
        self.assertEqual(log.metadata['updated_fields'], ['city'])

    def test_list_customers(self):
        """Test listing and searching customers"""
        TestDataFactory.create_customer(name='Alpha Garments')
        TestDataFactory.create_customer(name='Beta Textiles')
        response = self.client.get('/api/v1/customers/', {'search': 'alpha'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['name'], 'Alpha Garments')

    def test_get_missing_customer(self):
        """Test retrieving an unknown customer"""
        response = self.client.get('/api/v1/customers/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
