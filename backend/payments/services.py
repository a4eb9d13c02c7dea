"""
Payment ledger: every write that touches an order's payments re-derives the
order's ``payment_status`` from ``SUM(amount)`` inside the same transaction.
"""
import logging

from backend.core.exceptions import InvalidUpdates, ResourceNotFound
from backend.core.models import AuditActionType
from backend.core.money import ZERO, format_currency, round2
from backend.core.transactions import TransactionCoordinator
from backend.core.utils import create_audit_log
from backend.orders.models import PaymentStatus
from backend.orders.repositories import OrderRepository
from backend.parties.repositories import CustomerRepository
from .repositories import PaymentRepository

logger = logging.getLogger(__name__)


def derive_payment_status(total_paid, grand_total):
    """
    Classify an order from its ledger total.

    Nothing paid is ``unpaid`` (even for a zero-total order), anything short of
    the grand total is ``partial``, the rest is ``paid``. ``refunded`` is never
    derived. A plain ``total_paid >= grand_total`` comparison would call a
    zero-total order with nothing paid ``paid``; the empty-ledger check comes
    first so it stays ``unpaid``.
    """
    total_paid = round2(total_paid)
    if total_paid <= ZERO:
        return PaymentStatus.UNPAID
    if total_paid >= round2(grand_total):
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


class PaymentLedger:
    def __init__(self, payments=None, orders=None, customers=None, coordinator=None):
        self.payments = payments or PaymentRepository()
        self.orders = orders or OrderRepository()
        self.customers = customers or CustomerRepository()
        self.coordinator = coordinator or TransactionCoordinator()

    def status_for(self, order):
        return derive_payment_status(self.payments.total_paid(order.pk), order.grand_total)

    def refresh_order_status(self, order):
        """Re-derive and store ``order.payment_status``; call with the order row locked"""
        payment_status = self.status_for(order)
        self.orders.set_payment_status(order, payment_status)
        return payment_status

    def create_payment(self, order_id, customer_id, amount, paid_at=None, performed_by=None, **extra):
        """Record a payment against a live order and reclassify the order"""
        if self.orders.get(order_id) is None:
            raise ResourceNotFound('Order')
        customer = self.customers.find_by_id(customer_id)
        if customer is None:
            raise ResourceNotFound('Customer')

        with self.coordinator.locked_order(order_id, self.orders) as order:
            previous_status = order.payment_status
            fields = {'currency': order.currency, **extra}
            if paid_at is not None:
                fields['paid_at'] = paid_at
            payment = self.payments.create(order=order, customer=customer, amount=round2(amount), **fields)
            payment_status = self.refresh_order_status(order)

        logger.info(f"Payment {payment.id} of {payment.amount} recorded for order #{order.order_number}: {previous_status} -> {payment_status}")
        create_audit_log(
            action_type=AuditActionType.PAYMENT_RECEIVED,
            entity_type='payment',
            entity_id=payment.id,
            description=f"Payment of {format_currency(payment.amount, payment.currency)} received for order #{order.order_number}",
            order=order,
            customer=customer,
            metadata={
                'amount': str(payment.amount),
                'payment_method': payment.payment_method,
                'payment_status': {'old': previous_status, 'new': payment_status},
            },
            performed_by=performed_by,
        )
        return self.payments.get(payment.pk)

    def update_payment(self, payment_id, updates, performed_by=None):
        """Amend a payment; ``order`` and ``customer`` stay as recorded"""
        updates = {k: v for k, v in (updates or {}).items() if k not in ('order', 'customer')}
        if not updates:
            raise InvalidUpdates()
        existing = self.payments.get(payment_id)
        if existing is None:
            raise ResourceNotFound('Payment')
        if 'amount' in updates:
            updates['amount'] = round2(updates['amount'])

        with self.coordinator.locked_order(existing.order_id, self.orders, include_deleted=True) as order:
            payment = self.payments.lock(payment_id)
            if payment is None:
                raise ResourceNotFound('Payment')
            changes = {
                field: {'old': str(getattr(payment, field)), 'new': str(value)}
                for field, value in updates.items()
                if getattr(payment, field) != value
            }
            self.payments.update(payment, updates)
            payment_status = self.refresh_order_status(order)

        logger.info(f"Payment {payment_id} updated, order #{order.order_number} is now {payment_status}")
        create_audit_log(
            action_type=AuditActionType.PAYMENT_UPDATED,
            entity_type='payment',
            entity_id=payment_id,
            description=f"Payment for order #{order.order_number} updated",
            order=order,
            customer=existing.customer,
            metadata={'changes': changes, 'payment_status': payment_status},
            performed_by=performed_by,
        )
        return self.payments.get(payment_id)

    def delete_payment(self, payment_id, performed_by=None):
        existing = self.payments.get(payment_id)
        if existing is None:
            raise ResourceNotFound('Payment')

        with self.coordinator.locked_order(existing.order_id, self.orders, include_deleted=True) as order:
            payment = self.payments.lock(payment_id)
            if payment is None:
                raise ResourceNotFound('Payment')
            self.payments.delete(payment)
            payment_status = self.refresh_order_status(order)

        logger.info(f"Payment {payment_id} deleted, order #{order.order_number} is now {payment_status}")
        create_audit_log(
            action_type=AuditActionType.PAYMENT_DELETED,
            entity_type='payment',
            entity_id=payment_id,
            description=f"Payment of {format_currency(existing.amount, existing.currency)} deleted from order #{order.order_number}",
            order=order,
            customer=existing.customer,
            metadata={'amount': str(existing.amount), 'payment_status': payment_status},
            performed_by=performed_by,
        )

    def get_order_payment_summary(self, order_id):
        order = self.orders.get(order_id)
        if order is None:
            raise ResourceNotFound('Order')
        total_paid, payment_count = self.payments.summary(order.pk)
        return {
            'order_id': order.pk,
            'total_paid': round2(total_paid),
            'grand_total': order.grand_total,
            'balance': round2(order.grand_total - total_paid),
            'payment_count': payment_count,
        }

    def list_order_payments(self, order_id):
        if self.orders.get(order_id) is None:
            raise ResourceNotFound('Order')
        return self.payments.for_order(order_id)

    def get_payment(self, payment_id):
        payment = self.payments.get(payment_id)
        if payment is None:
            raise ResourceNotFound('Payment')
        return payment

    def list_payments(self):
        return self.payments.queryset()
