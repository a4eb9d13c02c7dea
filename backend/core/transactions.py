from contextlib import contextmanager

from django.db import transaction

from .exceptions import ResourceNotFound


class TransactionCoordinator:
    """
    Hands out scoped units of work for multi-row writes.

    Everything executed inside one of its blocks commits together or not at
    all: any exception leaving the block rolls back every write made in it.
    Nested blocks become savepoints of the outer transaction.
    """

    def __init__(self, using=None):
        self.using = using

    @contextmanager
    def atomic(self):
        with transaction.atomic(using=self.using):
            yield

    @contextmanager
    def locked_order(self, order_id, orders, include_deleted=False):
        """
        Open a transaction and take a row lock on the order before yielding it.

        Concurrent writers against the same order (two payments arriving at
        once) queue on this lock, so a ledger ``SUM`` taken inside the block
        always sees every committed payment.
        """
        with transaction.atomic(using=self.using):
            order = orders.lock(order_id, include_deleted=include_deleted)
            if order is None:
                raise ResourceNotFound('Order')
            yield order
