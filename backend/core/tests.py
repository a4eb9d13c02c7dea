"""
Tests for shared helpers: money arithmetic, error translation, the transaction
coordinator and the audit trail
"""
import uuid
from decimal import Decimal
from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError
from backend.core.exceptions import InvalidUpdates, ResourceNotFound, crm_exception_handler
from backend.core.models import AuditActionType, AuditLog
from backend.core.money import (
    LinePrice, discount_amount, format_currency, line_total, order_totals, price_line, round2, tax_amount
)
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.transactions import TransactionCoordinator
from backend.core.utils import create_audit_log
from backend.orders.repositories import OrderRepository
from backend.parties.models import Customer


class MoneyTests(SimpleTestCase):
    """Test rounding and line/order pricing"""

    def test_round2_half_up(self):
        """Test halves round away from zero"""
        self.assertEqual(round2('2.675'), Decimal('2.68'))
        self.assertEqual(round2('2.665'), Decimal('2.67'))
        self.assertEqual(round2(10), Decimal('10.00'))

    def test_round2_float_goes_through_str(self):
        """Test floats are not rounded with binary noise"""
        self.assertEqual(round2(2.675), Decimal('2.68'))
        self.assertEqual(round2(0.1 + 0.2), Decimal('0.30'))

    def test_discount_then_tax_example(self):
        """Test 99.99 at 15% discount and 7.5% tax"""
        discount = discount_amount(Decimal('99.99'), Decimal('15'))
        self.assertEqual(discount, Decimal('15.00'))
        discounted = Decimal('99.99') - discount
        self.assertEqual(discounted, Decimal('84.99'))
        tax = tax_amount(discounted, Decimal('7.5'))
        self.assertEqual(tax, Decimal('6.37'))
        self.assertEqual(line_total(Decimal('99.99'), discount, tax), Decimal('91.36'))

    def test_price_line(self):
        """Test price_line combines the helpers and multiplies by quantity"""
        self.assertEqual(
            price_line('99.99', 1, 15, '7.5'),
            LinePrice(Decimal('99.99'), Decimal('15.00'), Decimal('6.37'), Decimal('91.36'))
        )
        priced = price_line('19.99', 3)
        self.assertEqual(priced.sub_total, Decimal('59.97'))
        self.assertEqual(priced.total, Decimal('59.97'))

    def test_order_totals(self):
        """Test grand total is items - discount + tax + shipping"""
        lines = [price_line('99.99', 1, 15, '7.5'), price_line('50.00', 2)]
        totals = order_totals(lines, shipping='10')
        self.assertEqual(totals.items_total, Decimal('199.99'))
        self.assertEqual(totals.discount_total, Decimal('15.00'))
        self.assertEqual(totals.items_tax_total, Decimal('6.37'))
        self.assertEqual(totals.shipping, Decimal('10.00'))
        self.assertEqual(totals.grand_total, Decimal('201.36'))

    def test_order_totals_without_lines(self):
        """Test an empty order totals to its shipping"""
        totals = order_totals([], shipping=Decimal('5'))
        self.assertEqual(totals.items_total, Decimal('0.00'))
        self.assertEqual(totals.grand_total, Decimal('5.00'))

    def test_format_currency(self):
        """Test amounts are grouped and padded to two places"""
        self.assertEqual(format_currency(Decimal('1250'), 'BDT'), 'BDT 1,250.00')
        self.assertEqual(format_currency('0.5', 'USD'), 'USD 0.50')


class ExceptionHandlerTests(SimpleTestCase):
    """Test translation of domain errors into responses"""

    def test_not_found(self):
        """Test ResourceNotFound becomes a 404 with a message"""
        response = crm_exception_handler(ResourceNotFound('Order'), {})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'message': 'Order not found'})

    def test_invalid_updates(self):
        """Test InvalidUpdates becomes a 422 validation issue"""
        response = crm_exception_handler(InvalidUpdates(), {})
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertFalse(response.data['success'])
        issue = response.data['error']['issues'][0]
        self.assertEqual(issue['code'], 'INVALID_UPDATES')
        self.assertEqual(issue['message'], 'No updates provided')

    def test_integrity_error(self):
        """Test database constraint errors become a 409"""
        response = crm_exception_handler(IntegrityError('UNIQUE constraint failed'), {'view': None})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('message', response.data)

    def test_validation_error(self):
        """Test serializer validation errors are reported as 422"""
        response = crm_exception_handler(ValidationError({'amount': ['Required']}), {})
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)


class TransactionCoordinatorTests(TestCase):
    """Test scoped units of work"""

    def setUp(self):
        self.coordinator = TransactionCoordinator()

    def test_atomic_rolls_back_on_error(self):
        """Test every write in a failed block is discarded"""
        with self.assertRaises(RuntimeError):
            with self.coordinator.atomic():
                Customer.objects.create(name='Rolled Back', phone='01700000000')
                raise RuntimeError('boom')
        self.assertFalse(Customer.objects.filter(name='Rolled Back').exists())

    def test_locked_order_missing(self):
        """Test locking an unknown order raises ResourceNotFound"""
        with self.assertRaises(ResourceNotFound):
            with self.coordinator.locked_order(uuid.uuid4(), OrderRepository()):
                pass

    def test_locked_order_yields_order(self):
        """Test the locked order is handed to the block"""
        order = TestDataFactory.create_order()
        with self.coordinator.locked_order(order.id, OrderRepository()) as locked:
            self.assertEqual(locked.pk, order.pk)

    def test_locked_order_skips_deleted_unless_asked(self):
        """Test soft-deleted orders are only locked with include_deleted"""
        order = TestDataFactory.create_order()
        OrderRepository().soft_delete(order.id)
        with self.assertRaises(ResourceNotFound):
            with self.coordinator.locked_order(order.id, OrderRepository()):
                pass
        with self.coordinator.locked_order(order.id, OrderRepository(), include_deleted=True) as locked:
            self.assertIsNotNone(locked.deleted_at)


class AuditLogTests(TestCase):
    """Test the audit trail helper and API"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_audit_log_skips_missing_fields(self):
        """Test entries without action or entity are not written"""
        self.assertIsNone(create_audit_log(action_type=AuditActionType.ORDER_CREATED, entity_type='order'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_create_audit_log(self):
        """Test entity ids are stored as strings"""
        customer = TestDataFactory.create_customer()
        log = create_audit_log(
            action_type=AuditActionType.CUSTOMER_UPDATED,
            entity_type='customer',
            entity_id=customer.id,
            customer=customer,
            description='Customer updated',
            performed_by=self.user.username,
        )
        self.assertEqual(log.entity_id, str(customer.id))
        self.assertEqual(log.metadata, {})

    def test_order_creation_is_audited(self):
        """Test placing an order writes an order_created entry"""
        order = TestDataFactory.create_order()
        log = AuditLog.objects.get(action_type=AuditActionType.ORDER_CREATED)
        self.assertEqual(log.entity_id, str(order.id))
        self.assertEqual(log.order_id, order.id)
        self.assertEqual(log.customer_id, order.customer_id)

    def test_list_audit_logs(self):
        """Test listing and filtering audit logs"""
        order = TestDataFactory.create_order()
        TestDataFactory.create_payment(order, '40.00')

        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

        response = self.client.get('/api/v1/audit-logs/', {'action_type': 'payment_received'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['order_number'], order.order_number)

    def test_audit_log_detail(self):
        """Test retrieving a single audit log"""
        TestDataFactory.create_order()
        log = AuditLog.objects.first()
        response = self.client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['action_type'], 'order_created')

    def test_requires_authentication(self):
        """Test unauthenticated requests are rejected"""
        self.client.logout()
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
