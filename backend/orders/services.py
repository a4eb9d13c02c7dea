import logging

from django.conf import settings
from rest_framework.exceptions import ValidationError

from backend.core.exceptions import InvalidUpdates, ResourceNotFound
from backend.core.models import AuditActionType
from backend.core.money import MAX_AMOUNT, format_currency, order_totals, price_line, round2
from backend.core.transactions import TransactionCoordinator
from backend.core.utils import create_audit_log
from backend.catalog.repositories import ProductRepository
from backend.parties.repositories import CustomerRepository
from backend.payments.services import PaymentLedger
from .models import OrderStatus
from .repositories import OrderRepository

logger = logging.getLogger(__name__)

ITEM_PRICING_FIELDS = ('quantity', 'unit_price', 'discount_percentage', 'tax_percentage')


def _price_item(item):
    priced = price_line(item.unit_price, item.quantity, item.discount_percentage, item.tax_percentage)
    item.sub_total = priced.sub_total
    item.discount_amount = priced.discount_amount
    item.tax_amount = priced.tax_amount
    item.total = priced.total
    return priced


def _check_amounts(amounts, label):
    """Reject amounts too large for the money columns before anything is written"""
    for field, value in amounts._asdict().items():
        if value > MAX_AMOUNT:
            raise ValidationError({field: [f"{label} {field} exceeds {MAX_AMOUNT}"]})


class OrderService:
    """
    Builds and edits the order aggregate (order row plus its item rows).

    Totals are always recomputed from the items, and any change that can move
    ``grand_total`` re-derives ``payment_status`` from the ledger in the same
    transaction.
    """

    def __init__(self, orders=None, customers=None, products=None, ledger=None, coordinator=None):
        self.orders = orders or OrderRepository()
        self.customers = customers or CustomerRepository()
        self.products = products or ProductRepository()
        self.coordinator = coordinator or TransactionCoordinator()
        self.ledger = ledger or PaymentLedger(orders=self.orders, customers=self.customers, coordinator=self.coordinator)

    def _build_lines(self, items, currency):
        products = self.products.find_by_ids({item['product'] for item in items})
        lines = []
        priced_lines = []
        for line_number, item in enumerate(items, start=1):
            product = products.get(item['product'])
            if product is None:
                raise ResourceNotFound('Product')

            unit_price = item.get('unit_price')
            if unit_price is None:
                unit_price = product.base_price
            discount_pct = round2(item.get('discount_percentage') or 0)
            tax_pct = round2(item.get('tax_percentage') or 0)
            priced = price_line(unit_price, item['quantity'], discount_pct, tax_pct)
            _check_amounts(priced, f"Line {line_number}")
            priced_lines.append(priced)
            lines.append({
                'product': product,
                'line_number': line_number,
                'product_title': product.title,
                'sku': product.sku,
                'unit_price': round2(unit_price),
                'quantity': item['quantity'],
                'discount_percentage': discount_pct,
                'discount_amount': priced.discount_amount,
                'tax_percentage': tax_pct,
                'tax_amount': priced.tax_amount,
                'sub_total': priced.sub_total,
                'total': priced.total,
                'currency': currency,
            })
        return lines, priced_lines

    def create_order(self, customer_id, items, shipping=None, notes=None, currency=None,
                     payment_method=None, status=OrderStatus.PENDING, performed_by=None):
        """
        Place an order for an existing customer.

        Items snapshot the product's title and SKU; ``unit_price`` falls back to
        the product's base price. An order without items is allowed.
        """
        customer = self.customers.find_by_id(customer_id)
        if customer is None:
            raise ResourceNotFound('Customer')

        currency = currency or settings.DEFAULT_CURRENCY
        lines, priced_lines = self._build_lines(items or [], currency)
        totals = order_totals(priced_lines, shipping or 0)
        _check_amounts(totals, "Order")

        with self.coordinator.atomic():
            order = self.orders.create(
                order_number=self.orders.next_order_number(),
                customer=customer,
                status=status or OrderStatus.PENDING,
                payment_method=payment_method,
                currency=currency,
                notes=notes or '',
                **totals._asdict(),
            )
            self.orders.add_items(order, lines)

        logger.info(f"Order #{order.order_number} created for customer {customer.id} with {len(lines)} item(s), grand total {order.grand_total}")
        create_audit_log(
            action_type=AuditActionType.ORDER_CREATED,
            entity_type='order',
            entity_id=order.id,
            description=f"Order #{order.order_number} created for {customer.name} - Total: {format_currency(order.grand_total, currency)}",
            order=order,
            customer=customer,
            metadata={'item_count': len(lines), 'grand_total': str(order.grand_total)},
            performed_by=performed_by,
        )
        return self.orders.get_with_items(order.pk)

    def update_order(self, order_id, updates, items=None, performed_by=None):
        """
        Patch order fields and/or items by id.

        Item ids must belong to this order. Totals and ``payment_status`` are
        recomputed whenever items or shipping change.
        """
        updates = dict(updates or {})
        items = list(items or [])
        if not updates and not items:
            raise InvalidUpdates()
        if 'shipping' in updates:
            updates['shipping'] = round2(updates['shipping'])

        with self.coordinator.locked_order(order_id, self.orders) as order:
            previous_status = order.status
            previous_grand_total = order.grand_total
            changes = {}
            for field, value in updates.items():
                old = getattr(order, field)
                if old != value:
                    changes[field] = {'old': str(old), 'new': str(value)}
                setattr(order, field, value)

            updated_items = []
            for item_update in items:
                item_update = dict(item_update)
                item = self.orders.get_item(order, item_update.pop('id'))
                if item is None:
                    raise ResourceNotFound('Order item')
                for field in ITEM_PRICING_FIELDS:
                    if field in item_update:
                        value = item_update[field]
                        setattr(item, field, value if field == 'quantity' else round2(value))
                _check_amounts(_price_item(item), f"Line {item.line_number}")
                self.orders.save_item(item)
                updated_items.append(str(item.pk))

            if updated_items or 'shipping' in updates:
                totals = order_totals(self.orders.items_of(order), order.shipping)
                _check_amounts(totals, "Order")
                for field, value in totals._asdict().items():
                    setattr(order, field, value)

            self.orders.save(order)
            payment_status = self.ledger.refresh_order_status(order)

        if order.status != previous_status:
            logger.info(f"Order #{order.order_number} status changed: {previous_status} -> {order.status}")
            create_audit_log(
                action_type=AuditActionType.ORDER_STATUS_CHANGED,
                entity_type='order',
                entity_id=order.id,
                description=f"Order #{order.order_number} status changed from {previous_status} to {order.status}",
                order=order,
                customer=order.customer,
                metadata={'old_status': previous_status, 'new_status': order.status},
                performed_by=performed_by,
            )

        other_changes = {field: change for field, change in changes.items() if field != 'status'}
        if other_changes or updated_items:
            create_audit_log(
                action_type=AuditActionType.ORDER_UPDATED,
                entity_type='order',
                entity_id=order.id,
                description=f"Order #{order.order_number} updated",
                order=order,
                customer=order.customer,
                metadata={
                    'changes': other_changes,
                    'items': updated_items,
                    'grand_total': {'old': str(previous_grand_total), 'new': str(order.grand_total)},
                    'payment_status': payment_status,
                },
                performed_by=performed_by,
            )
        return self.orders.get_with_items(order.pk)

    def get_order(self, order_id):
        order = self.orders.get_with_items(order_id)
        if order is None:
            raise ResourceNotFound('Order')
        return order

    def list_orders(self):
        return self.orders.queryset()

    def delete_order(self, order_id, performed_by=None):
        """Soft delete: the order and its payments stay in the database"""
        order = self.orders.get(order_id)
        if order is None:
            raise ResourceNotFound('Order')
        with self.coordinator.atomic():
            if not self.orders.soft_delete(order_id):
                raise ResourceNotFound('Order')

        logger.info(f"Order #{order.order_number} deleted")
        create_audit_log(
            action_type=AuditActionType.ORDER_DELETED,
            entity_type='order',
            entity_id=order.id,
            description=f"Order #{order.order_number} deleted",
            order=order,
            customer=order.customer,
            metadata={'grand_total': str(order.grand_total)},
            performed_by=performed_by,
        )
