"""
Test suite for Orders module
Tests: order placement, item pricing, patching with totals recomputation,
soft delete and the order API
"""
import uuid
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError
from backend.core.exceptions import InvalidUpdates, ResourceNotFound
from backend.core.models import AuditActionType, AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.orders.models import Order, OrderItem, OrderStatus, PaymentStatus
from backend.orders.repositories import OrderRepository
from backend.orders.services import OrderService


class OrderCreationTests(TestCase):
    """Test placing orders through OrderService"""

    def setUp(self):
        self.service = OrderService()
        self.customer = TestDataFactory.create_customer()
        self.shirt = TestDataFactory.create_product(title='Polo Shirt', sku='POLO-001', base_price=Decimal('99.99'))
        self.bag = TestDataFactory.create_product(title='Jute Bag', sku='BAG-001', base_price=Decimal('50.00'))

    def test_create_order_prices_items(self):
        """Test line pricing and order totals"""
        order = self.service.create_order(
            self.customer.id,
            [
                {'product': self.shirt.id, 'quantity': 1, 'discount_percentage': Decimal('15'), 'tax_percentage': Decimal('7.5')},
                {'product': self.bag.id, 'quantity': 2},
            ],
            shipping=Decimal('10'),
        )
        self.assertEqual(order.items_total, Decimal('199.99'))
        self.assertEqual(order.discount_total, Decimal('15.00'))
        self.assertEqual(order.items_tax_total, Decimal('6.37'))
        self.assertEqual(order.shipping, Decimal('10.00'))
        self.assertEqual(order.grand_total, Decimal('201.36'))
        self.assertEqual(order.payment_status, PaymentStatus.UNPAID)
        self.assertEqual(order.status, OrderStatus.PENDING)

        items = list(order.items.all())
        self.assertEqual(len(items), 2)
        self.assertEqual(items[0].total, Decimal('91.36'))
        self.assertEqual(items[1].sub_total, Decimal('100.00'))

    def test_items_snapshot_product(self):
        """Test items keep title and SKU and fall back to the base price"""
        order = self.service.create_order(self.customer.id, [{'product': self.shirt.id, 'quantity': 3}])
        item = order.items.get()
        self.assertEqual(item.product_title, 'Polo Shirt')
        self.assertEqual(item.sku, 'POLO-001')
        self.assertEqual(item.unit_price, Decimal('99.99'))
        self.assertEqual(item.sub_total, Decimal('299.97'))

        self.shirt.title = 'Renamed Shirt'
        self.shirt.save()
        item.refresh_from_db()
        self.assertEqual(item.product_title, 'Polo Shirt')

    def test_explicit_unit_price(self):
        """Test a unit price in the request overrides the product price"""
        order = self.service.create_order(
            self.customer.id, [{'product': self.shirt.id, 'quantity': 2, 'unit_price': Decimal('80.00')}]
        )
        self.assertEqual(order.grand_total, Decimal('160.00'))

    def test_order_without_items(self):
        """Test an order with no items is allowed"""
        order = self.service.create_order(self.customer.id, [], shipping=Decimal('25'))
        self.assertEqual(order.items.count(), 0)
        self.assertEqual(order.grand_total, Decimal('25.00'))

    def test_missing_customer(self):
        """Test an unknown customer is rejected and nothing is written"""
        with self.assertRaises(ResourceNotFound) as ctx:
            self.service.create_order(999999, [{'product': self.shirt.id, 'quantity': 1}])
        self.assertEqual(str(ctx.exception.detail), 'Customer not found')
        self.assertEqual(Order.objects.count(), 0)

    def test_missing_product(self):
        """Test an unknown product is rejected and no order or item rows exist"""
        with self.assertRaises(ResourceNotFound) as ctx:
            self.service.create_order(
                self.customer.id,
                [{'product': self.shirt.id, 'quantity': 1}, {'product': 999999, 'quantity': 1}],
            )
        self.assertEqual(str(ctx.exception.detail), 'Product not found')
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

    def test_line_amount_too_large(self):
        """Test a line whose sub total does not fit a money column is rejected with no rows written"""
        product = TestDataFactory.create_product(base_price=Decimal('9999999999.99'))
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_order(self.customer.id, [{'product': product.id, 'quantity': 1000000}])
        self.assertIn('sub_total', ctx.exception.detail)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

    def test_order_total_too_large(self):
        """Test lines that fit on their own but overflow the order totals are rejected"""
        product = TestDataFactory.create_product(base_price=Decimal('6000000000.00'))
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_order(
                self.customer.id,
                [{'product': product.id, 'quantity': 1}, {'product': product.id, 'quantity': 1}],
            )
        self.assertIn('items_total', ctx.exception.detail)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

    def test_item_failure_rolls_back_order(self):
        """Test the order row is discarded when inserting items fails"""
        class FailingRepository(OrderRepository):
            def add_items(self, order, items):
                raise RuntimeError('item insert failed')

        service = OrderService(orders=FailingRepository())
        with self.assertRaises(RuntimeError):
            service.create_order(self.customer.id, [{'product': self.shirt.id, 'quantity': 1}])
        self.assertEqual(Order.objects.count(), 0)

    def test_order_numbers_increase(self):
        """Test each new order gets the next order number"""
        first = self.service.create_order(self.customer.id, [])
        second = self.service.create_order(self.customer.id, [])
        self.assertEqual(second.order_number, first.order_number + 1)

    def test_created_order_has_total_paid(self):
        """Test the returned order carries its ledger total"""
        order = self.service.create_order(self.customer.id, [{'product': self.bag.id, 'quantity': 1}])
        self.assertEqual(order.total_paid, Decimal('0.00'))

    def test_creation_is_audited(self):
        """Test an order_created entry is written"""
        order = self.service.create_order(self.customer.id, [], performed_by='clerk')
        log = AuditLog.objects.get(action_type=AuditActionType.ORDER_CREATED)
        self.assertEqual(log.entity_id, str(order.id))
        self.assertEqual(log.performed_by, 'clerk')


class OrderUpdateTests(TestCase):
    """Test patching orders and their items"""

    def setUp(self):
        self.service = OrderService()
        self.customer = TestDataFactory.create_customer()
        self.product = TestDataFactory.create_product(base_price=Decimal('100.00'))
        self.order = self.service.create_order(self.customer.id, [{'product': self.product.id, 'quantity': 1}])
        self.item = self.order.items.get()

    def test_empty_update_rejected(self):
        """Test an update without fields or items is rejected"""
        with self.assertRaises(InvalidUpdates):
            self.service.update_order(self.order.id, {})

    def test_empty_update_rejected_before_existence_check(self):
        """Test the empty update error wins over a missing order"""
        with self.assertRaises(InvalidUpdates):
            self.service.update_order(uuid.uuid4(), {}, items=[])

    def test_update_missing_order(self):
        """Test updating an unknown order"""
        with self.assertRaises(ResourceNotFound):
            self.service.update_order(uuid.uuid4(), {'notes': 'x'})

    def test_update_fields(self):
        """Test plain order fields are applied"""
        order = self.service.update_order(self.order.id, {'notes': 'Deliver before Friday', 'payment_method': 'cash'})
        self.assertEqual(order.notes, 'Deliver before Friday')
        self.assertEqual(order.payment_method, 'cash')
        self.assertTrue(AuditLog.objects.filter(action_type=AuditActionType.ORDER_UPDATED).exists())

    def test_status_change_audited(self):
        """Test a status change writes order_status_changed"""
        self.service.update_order(self.order.id, {'status': OrderStatus.SHIPPED})
        log = AuditLog.objects.get(action_type=AuditActionType.ORDER_STATUS_CHANGED)
        self.assertEqual(log.metadata, {'old_status': 'pending', 'new_status': 'shipped'})
        self.assertFalse(AuditLog.objects.filter(action_type=AuditActionType.ORDER_UPDATED).exists())

    def test_shipping_change_recomputes_total(self):
        """Test shipping is folded into the grand total"""
        order = self.service.update_order(self.order.id, {'shipping': Decimal('15')})
        self.assertEqual(order.grand_total, Decimal('115.00'))

    def test_item_update_recomputes_totals(self):
        """Test changing an item's quantity reprices it and the order"""
        order = self.service.update_order(
            self.order.id, {}, items=[{'id': self.item.id, 'quantity': 3, 'discount_percentage': Decimal('10')}]
        )
        item = order.items.get()
        self.assertEqual(item.sub_total, Decimal('300.00'))
        self.assertEqual(item.discount_amount, Decimal('30.00'))
        self.assertEqual(item.total, Decimal('270.00'))
        self.assertEqual(order.items_total, Decimal('300.00'))
        self.assertEqual(order.discount_total, Decimal('30.00'))
        self.assertEqual(order.grand_total, Decimal('270.00'))

    def test_item_update_reclassifies_payment_status(self):
        """Test a paid order becomes partial when its total grows"""
        TestDataFactory.create_payment(self.order, '100.00')
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, PaymentStatus.PAID)

        order = self.service.update_order(self.order.id, {}, items=[{'id': self.item.id, 'quantity': 2}])
        self.assertEqual(order.grand_total, Decimal('200.00'))
        self.assertEqual(order.payment_status, PaymentStatus.PARTIAL)

        order = self.service.update_order(self.order.id, {}, items=[{'id': self.item.id, 'quantity': 1}])
        self.assertEqual(order.payment_status, PaymentStatus.PAID)

    def test_foreign_item_rejected(self):
        """Test an item id from another order fails and rolls back the whole patch"""
        other = TestDataFactory.create_order(customer=self.customer)
        foreign_item = other.items.get()

        with self.assertRaises(ResourceNotFound) as ctx:
            self.service.update_order(
                self.order.id,
                {'notes': 'should not stick'},
                items=[{'id': self.item.id, 'quantity': 5}, {'id': foreign_item.id, 'quantity': 9}],
            )
        self.assertEqual(str(ctx.exception.detail), 'Order item not found')

        self.item.refresh_from_db()
        foreign_item.refresh_from_db()
        self.order.refresh_from_db()
        self.assertEqual(self.item.quantity, 1)
        self.assertEqual(foreign_item.quantity, 1)
        self.assertEqual(self.order.grand_total, Decimal('100.00'))
        self.assertEqual(self.order.notes, '')

    def test_item_update_amount_too_large(self):
        """Test an item patch that overflows a money column rolls back"""
        with self.assertRaises(ValidationError):
            self.service.update_order(
                self.order.id,
                {'notes': 'should not stick'},
                items=[{'id': self.item.id, 'unit_price': Decimal('9999999999.99'), 'quantity': 2}],
            )
        self.item.refresh_from_db()
        self.order.refresh_from_db()
        self.assertEqual(self.item.quantity, 1)
        self.assertEqual(self.item.unit_price, Decimal('100.00'))
        self.assertEqual(self.order.grand_total, Decimal('100.00'))
        self.assertEqual(self.order.notes, '')

    def test_update_deleted_order(self):
        """Test soft-deleted orders cannot be patched"""
        self.service.delete_order(self.order.id)
        with self.assertRaises(ResourceNotFound):
            self.service.update_order(self.order.id, {'notes': 'late'})


class OrderDeleteTests(TestCase):
    """Test soft delete"""

    def setUp(self):
        self.service = OrderService()
        self.order = TestDataFactory.create_order()

    def test_soft_delete(self):
        """Test the row stays with deleted_at set and drops out of reads"""
        self.service.delete_order(self.order.id, performed_by='clerk')
        row = Order.objects.get(pk=self.order.id)
        self.assertIsNotNone(row.deleted_at)
        self.assertFalse(self.service.list_orders().filter(pk=self.order.id).exists())
        with self.assertRaises(ResourceNotFound):
            self.service.get_order(self.order.id)
        self.assertTrue(AuditLog.objects.filter(action_type=AuditActionType.ORDER_DELETED).exists())

    def test_delete_twice(self):
        """Test deleting an already deleted order"""
        self.service.delete_order(self.order.id)
        with self.assertRaises(ResourceNotFound):
            self.service.delete_order(self.order.id)


class OrderAPITests(TestCase):
    """Test Order API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()
        self.product = TestDataFactory.create_product(base_price=Decimal('99.99'))

    def test_create_order(self):
        """Test placing an order via API"""
        data = {
            'customer': self.customer.id,
            'items': [
                {'product': self.product.id, 'quantity': 1, 'discount_percentage': '15', 'tax_percentage': '7.5'}
            ],
            'shipping': '10.00',
            'notes': 'Gift wrap',
        }
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['grand_total'], '101.36')
        self.assertEqual(response.data['payment_status'], 'unpaid')
        self.assertEqual(response.data['total_paid'], '0.00')
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['customer_detail']['id'], self.customer.id)
        self.assertEqual(AuditLog.objects.get(action_type='order_created').performed_by, self.user.username)

    def test_create_order_missing_customer(self):
        """Test placing an order for an unknown customer"""
        data = {'customer': 999999, 'items': [{'product': self.product.id, 'quantity': 1}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Customer not found')

    def test_create_order_missing_product(self):
        """Test placing an order for an unknown product"""
        data = {'customer': self.customer.id, 'items': [{'product': 999999, 'quantity': 1}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Order.objects.count(), 0)

    def test_create_order_invalid_quantity(self):
        """Test a zero quantity is a validation error"""
        data = {'customer': self.customer.id, 'items': [{'product': self.product.id, 'quantity': 0}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)

    def test_create_order_amount_too_large(self):
        """Test an order too large to store is a 422, writes nothing and leaves the list readable"""
        product = TestDataFactory.create_product(base_price=Decimal('9999999999.99'))
        data = {'customer': self.customer.id, 'items': [{'product': product.id, 'quantity': 1000000}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertIn('sub_total', response.data)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 0)

    def test_create_order_quantity_too_large(self):
        """Test quantities above the cap are a validation error"""
        data = {'customer': self.customer.id, 'items': [{'product': self.product.id, 'quantity': 1000001}]}
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(Order.objects.count(), 0)

    def test_list_orders(self):
        """Test listing orders hides deleted ones and carries total_paid"""
        kept = TestDataFactory.create_order(customer=self.customer)
        deleted = TestDataFactory.create_order(customer=self.customer)
        TestDataFactory.create_payment(kept, '40.00')
        OrderService().delete_order(deleted.id)

        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        row = response.data['results'][0]
        self.assertEqual(row['id'], str(kept.id))
        self.assertEqual(row['total_paid'], '40.00')
        self.assertEqual(row['payment_status'], 'partial')

    def test_filter_orders(self):
        """Test filtering by payment status and order number"""
        paid = TestDataFactory.create_order(customer=self.customer)
        TestDataFactory.create_order(customer=self.customer)
        TestDataFactory.create_payment(paid, '100.00')

        response = self.client.get('/api/v1/orders/', {'payment_status': 'paid'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['order_number'], paid.order_number)

        response = self.client.get('/api/v1/orders/', {'search': f'#{paid.order_number}'})
        self.assertEqual(response.data['count'], 1)

    def test_get_order(self):
        """Test retrieving an order"""
        order = TestDataFactory.create_order(customer=self.customer)
        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_number'], order.order_number)

        response = self.client.get(f'/api/v1/orders/{uuid.uuid4()}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_patch_order_items(self):
        """Test patching an item via API"""
        order = TestDataFactory.create_order(customer=self.customer)
        item = order.items.get()
        data = {'items': [{'id': str(item.id), 'quantity': 2}], 'status': 'processing'}
        response = self.client.patch(f'/api/v1/orders/{order.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['grand_total'], '200.00')
        self.assertEqual(response.data['status'], 'processing')

    def test_patch_empty(self):
        """Test an empty patch is a 422 whether or not the order exists"""
        order = TestDataFactory.create_order(customer=self.customer)
        for order_id in (order.id, uuid.uuid4()):
            response = self.client.patch(f'/api/v1/orders/{order_id}/', {}, format='json')
            self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
            self.assertEqual(response.data['error']['issues'][0]['message'], 'No updates provided')
            self.assertEqual(response.data['error']['issues'][0]['code'], 'INVALID_UPDATES')

    def test_patch_item_amount_too_large(self):
        """Test an item patch too large to store is a 422 and the order is unchanged"""
        order = TestDataFactory.create_order(customer=self.customer)
        item = order.items.get()
        data = {'items': [{'id': str(item.id), 'unit_price': '9999999999.99', 'quantity': 2}]}
        response = self.client.patch(f'/api/v1/orders/{order.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        order.refresh_from_db()
        self.assertEqual(order.grand_total, Decimal('100.00'))

        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_patch_payment_status_ignored(self):
        """Test payment_status cannot be written directly"""
        order = TestDataFactory.create_order(customer=self.customer)
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'payment_status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        order.refresh_from_db()
        self.assertEqual(order.payment_status, PaymentStatus.UNPAID)

    def test_delete_order(self):
        """Test deleting an order via API"""
        order = TestDataFactory.create_order(customer=self.customer)
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requires_authentication(self):
        """Test unauthenticated requests are rejected"""
        self.client.logout()
        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
