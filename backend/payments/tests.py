"""
Test suite for Payments module
Tests: ledger-derived payment status, summaries, rollback on failure and the
payment API
"""
import uuid
from datetime import timedelta
from decimal import Decimal
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status
from backend.core.exceptions import InvalidUpdates, ResourceNotFound
from backend.core.models import AuditActionType, AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.orders.models import Order, PaymentStatus
from backend.orders.repositories import OrderRepository
from backend.orders.services import OrderService
from backend.payments.models import Payment
from backend.payments.services import PaymentLedger, derive_payment_status


class DerivePaymentStatusTests(SimpleTestCase):
    """Test the status classification"""

    def test_classification(self):
        """Test unpaid, partial and paid boundaries"""
        self.assertEqual(derive_payment_status(Decimal('0'), Decimal('100')), PaymentStatus.UNPAID)
        self.assertEqual(derive_payment_status(Decimal('0.01'), Decimal('100')), PaymentStatus.PARTIAL)
        self.assertEqual(derive_payment_status(Decimal('99.99'), Decimal('100')), PaymentStatus.PARTIAL)
        self.assertEqual(derive_payment_status(Decimal('100'), Decimal('100')), PaymentStatus.PAID)
        self.assertEqual(derive_payment_status(Decimal('150'), Decimal('100')), PaymentStatus.PAID)

    def test_zero_total_with_nothing_paid(self):
        """Test a zero-total order with an empty ledger stays unpaid"""
        self.assertEqual(derive_payment_status(Decimal('0'), Decimal('0')), PaymentStatus.UNPAID)


class PaymentLedgerTests(TestCase):
    """Test recording payments and keeping order status in step with the ledger"""

    def setUp(self):
        self.ledger = PaymentLedger()
        self.customer = TestDataFactory.create_customer()
        self.order = TestDataFactory.create_order(customer=self.customer)

    def status_of(self, order):
        return Order.objects.get(pk=order.pk).payment_status

    def test_partial_then_paid(self):
        """Test 40 then 60 against a 100 order"""
        self.assertEqual(self.order.grand_total, Decimal('100.00'))

        self.ledger.create_payment(self.order.id, self.customer.id, Decimal('40'))
        self.assertEqual(self.status_of(self.order), PaymentStatus.PARTIAL)
        summary = self.ledger.get_order_payment_summary(self.order.id)
        self.assertEqual(summary['balance'], Decimal('60.00'))

        self.ledger.create_payment(self.order.id, self.customer.id, Decimal('60'))
        self.assertEqual(self.status_of(self.order), PaymentStatus.PAID)
        summary = self.ledger.get_order_payment_summary(self.order.id)
        self.assertEqual(summary['balance'], Decimal('0.00'))
        self.assertEqual(summary['payment_count'], 2)

    def test_delete_recomputes_downward(self):
        """Test deleting payments walks the status back down"""
        first = self.ledger.create_payment(self.order.id, self.customer.id, Decimal('40'))
        second = self.ledger.create_payment(self.order.id, self.customer.id, Decimal('60'))

        self.ledger.delete_payment(second.id)
        self.assertEqual(self.status_of(self.order), PaymentStatus.PARTIAL)
        self.assertEqual(self.ledger.get_order_payment_summary(self.order.id)['balance'], Decimal('60.00'))

        self.ledger.delete_payment(first.id)
        self.assertEqual(self.status_of(self.order), PaymentStatus.UNPAID)
        self.assertTrue(AuditLog.objects.filter(action_type=AuditActionType.PAYMENT_DELETED).exists())

    def test_failed_status_write_rolls_back_payment(self):
        """Test a failure after the insert leaves no payment and the old status"""
        class FailingOrderRepository(OrderRepository):
            def set_payment_status(self, order, payment_status):
                raise RuntimeError('status write failed')

        ledger = PaymentLedger(orders=FailingOrderRepository())
        with self.assertRaises(RuntimeError):
            ledger.create_payment(self.order.id, self.customer.id, Decimal('40'))

        self.assertEqual(Payment.objects.count(), 0)
        self.assertEqual(self.status_of(self.order), PaymentStatus.UNPAID)
        self.assertFalse(AuditLog.objects.filter(action_type=AuditActionType.PAYMENT_RECEIVED).exists())

    def test_summary_is_read_only(self):
        """Test reading the summary twice gives the same answer and writes nothing"""
        self.ledger.create_payment(self.order.id, self.customer.id, Decimal('25'))
        before = Order.objects.get(pk=self.order.pk).updated_at
        logs_before = AuditLog.objects.count()

        first = self.ledger.get_order_payment_summary(self.order.id)
        second = self.ledger.get_order_payment_summary(self.order.id)
        self.assertEqual(first, second)
        self.assertEqual(first['total_paid'], Decimal('25.00'))
        self.assertEqual(first['grand_total'], Decimal('100.00'))
        self.assertEqual(Order.objects.get(pk=self.order.pk).updated_at, before)
        self.assertEqual(AuditLog.objects.count(), logs_before)

    def test_summary_without_payments(self):
        """Test an empty ledger sums to zero"""
        summary = self.ledger.get_order_payment_summary(self.order.id)
        self.assertEqual(summary['total_paid'], Decimal('0.00'))
        self.assertEqual(summary['balance'], Decimal('100.00'))
        self.assertEqual(summary['payment_count'], 0)

    def test_summary_missing_order(self):
        """Test the summary of an unknown order"""
        with self.assertRaises(ResourceNotFound):
            self.ledger.get_order_payment_summary(uuid.uuid4())

    def test_overpayment(self):
        """Test paying more than the total is paid with a negative balance"""
        self.ledger.create_payment(self.order.id, self.customer.id, Decimal('120'))
        self.assertEqual(self.status_of(self.order), PaymentStatus.PAID)
        self.assertEqual(self.ledger.get_order_payment_summary(self.order.id)['balance'], Decimal('-20.00'))

    def test_missing_order(self):
        """Test a payment for an unknown order inserts nothing"""
        with self.assertRaises(ResourceNotFound) as ctx:
            self.ledger.create_payment(uuid.uuid4(), self.customer.id, Decimal('10'))
        self.assertEqual(str(ctx.exception.detail), 'Order not found')
        self.assertEqual(Payment.objects.count(), 0)

    def test_missing_customer(self):
        """Test a payment for an unknown customer inserts nothing"""
        with self.assertRaises(ResourceNotFound) as ctx:
            self.ledger.create_payment(self.order.id, 999999, Decimal('10'))
        self.assertEqual(str(ctx.exception.detail), 'Customer not found')
        self.assertEqual(Payment.objects.count(), 0)

    def test_deleted_order_rejects_payments(self):
        """Test soft-deleted orders do not take new payments"""
        OrderService().delete_order(self.order.id)
        with self.assertRaises(ResourceNotFound):
            self.ledger.create_payment(self.order.id, self.customer.id, Decimal('10'))

    def test_payment_defaults(self):
        """Test currency follows the order and paid_at defaults to now"""
        payment = self.ledger.create_payment(self.order.id, self.customer.id, Decimal('10'), reference='TXN-1')
        self.assertEqual(payment.currency, self.order.currency)
        self.assertEqual(payment.payment_method, 'cash')
        self.assertEqual(payment.reference, 'TXN-1')
        self.assertIsNotNone(payment.paid_at)
        self.assertEqual(payment.order_total_paid, Decimal('10.00'))

    def test_update_amount_reclassifies(self):
        """Test changing an amount re-derives the order status"""
        payment = self.ledger.create_payment(self.order.id, self.customer.id, Decimal('40'))
        self.ledger.update_payment(payment.id, {'amount': Decimal('100')})
        self.assertEqual(self.status_of(self.order), PaymentStatus.PAID)

        self.ledger.update_payment(payment.id, {'amount': Decimal('10')})
        self.assertEqual(self.status_of(self.order), PaymentStatus.PARTIAL)
        log = AuditLog.objects.filter(action_type=AuditActionType.PAYMENT_UPDATED).order_by('-id').first()
        self.assertEqual(log.metadata['changes']['amount'], {'old': '100.00', 'new': '10.00'})

    def test_update_empty(self):
        """Test an empty update is rejected even for an unknown payment"""
        with self.assertRaises(InvalidUpdates):
            self.ledger.update_payment(uuid.uuid4(), {})

    def test_update_ignores_order_and_customer(self):
        """Test a payment cannot be moved to another order"""
        payment = self.ledger.create_payment(self.order.id, self.customer.id, Decimal('40'))
        other = TestDataFactory.create_order(customer=self.customer)
        with self.assertRaises(InvalidUpdates):
            self.ledger.update_payment(payment.id, {'order': other.id})

    def test_update_missing_payment(self):
        """Test updating an unknown payment"""
        with self.assertRaises(ResourceNotFound):
            self.ledger.update_payment(uuid.uuid4(), {'notes': 'x'})

    def test_delete_missing_payment(self):
        """Test deleting an unknown payment"""
        with self.assertRaises(ResourceNotFound):
            self.ledger.delete_payment(uuid.uuid4())

    def test_payments_of_deleted_order_can_be_corrected(self):
        """Test existing payments stay editable after the order is soft-deleted"""
        payment = self.ledger.create_payment(self.order.id, self.customer.id, Decimal('100'))
        OrderService().delete_order(self.order.id)
        self.ledger.delete_payment(payment.id)
        self.assertEqual(self.status_of(self.order), PaymentStatus.UNPAID)

    def test_list_order_payments(self):
        """Test payments come back newest first"""
        now = timezone.now()
        older = self.ledger.create_payment(self.order.id, self.customer.id, Decimal('10'), paid_at=now - timedelta(days=2))
        newer = self.ledger.create_payment(self.order.id, self.customer.id, Decimal('20'), paid_at=now)
        payments = list(self.ledger.list_order_payments(self.order.id))
        self.assertEqual([p.id for p in payments], [newer.id, older.id])

        with self.assertRaises(ResourceNotFound):
            self.ledger.list_order_payments(uuid.uuid4())


class PaymentAPITests(TestCase):
    """Test Payment API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()
        self.order = TestDataFactory.create_order(customer=self.customer)

    def test_create_payment(self):
        """Test recording a payment via API"""
        data = {
            'order': str(self.order.id),
            'customer': self.customer.id,
            'amount': '40.00',
            'payment_method': 'mobile_banking',
            'reference': 'BK-12345',
        }
        response = self.client.post('/api/v1/payments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amount'], '40.00')
        self.assertEqual(response.data['order_detail']['payment_status'], 'partial')
        self.assertEqual(response.data['order_detail']['total_paid'], '40.00')
        self.assertEqual(response.data['customer_detail']['id'], self.customer.id)
        log = AuditLog.objects.get(action_type=AuditActionType.PAYMENT_RECEIVED)
        self.assertEqual(log.performed_by, self.user.username)

    def test_create_payment_missing_order(self):
        """Test a payment for an unknown order is a 404 with no rows"""
        data = {'order': str(uuid.uuid4()), 'customer': self.customer.id, 'amount': '40.00'}
        response = self.client.post('/api/v1/payments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Order not found')
        self.assertEqual(Payment.objects.count(), 0)

    def test_create_payment_invalid_amount(self):
        """Test a non-positive amount is a validation error"""
        data = {'order': str(self.order.id), 'customer': self.customer.id, 'amount': '0'}
        response = self.client.post('/api/v1/payments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)

    def test_get_payment(self):
        """Test retrieving a payment"""
        payment = TestDataFactory.create_payment(self.order, '40.00')
        response = self.client.get(f'/api/v1/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_detail']['order_number'], self.order.order_number)

        response = self.client.get(f'/api/v1/payments/{uuid.uuid4()}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_patch_payment(self):
        """Test amending a payment via API"""
        payment = TestDataFactory.create_payment(self.order, '40.00')
        response = self.client.patch(f'/api/v1/payments/{payment.id}/', {'amount': '100.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_detail']['payment_status'], 'paid')

    def test_patch_empty(self):
        """Test an empty patch is a 422 whether or not the payment exists"""
        payment = TestDataFactory.create_payment(self.order, '40.00')
        for payment_id in (payment.id, uuid.uuid4()):
            response = self.client.patch(f'/api/v1/payments/{payment_id}/', {}, format='json')
            self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
            self.assertEqual(response.data['error']['issues'][0]['code'], 'INVALID_UPDATES')

    def test_delete_payment(self):
        """Test deleting a payment via API"""
        payment = TestDataFactory.create_payment(self.order, '100.00')
        response = self.client.delete(f'/api/v1/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.UNPAID)

        response = self.client.delete(f'/api/v1/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_order_summary(self):
        """Test the order payment summary endpoint"""
        TestDataFactory.create_payment(self.order, '40.00')
        response = self.client.get(f'/api/v1/payments/order/{self.order.id}/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'order_id': str(self.order.id),
            'total_paid': '40.00',
            'grand_total': '100.00',
            'balance': '60.00',
            'payment_count': 1,
        })

        response = self.client.get(f'/api/v1/payments/order/{uuid.uuid4()}/summary/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_order_payment_list(self):
        """Test listing the payments of one order"""
        TestDataFactory.create_payment(self.order, '40.00')
        TestDataFactory.create_payment(self.order, '10.00')
        response = self.client.get(f'/api/v1/payments/order/{self.order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        self.assertEqual(response.data[0]['order_total_paid'], '50.00')

    def test_list_payments(self):
        """Test listing and filtering payments"""
        other = TestDataFactory.create_order()
        TestDataFactory.create_payment(self.order, '40.00')
        TestDataFactory.create_payment(other, '15.00', payment_method='card')

        response = self.client.get('/api/v1/payments/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

        response = self.client.get('/api/v1/payments/', {'order': str(self.order.id)})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['amount'], '40.00')

        response = self.client.get('/api/v1/payments/', {'payment_method': 'card'})
        self.assertEqual(response.data['count'], 1)

    def test_requires_authentication(self):
        """Test unauthenticated requests are rejected"""
        self.client.logout()
        response = self.client.get('/api/v1/payments/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
