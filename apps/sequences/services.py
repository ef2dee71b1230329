"""
Sequence Services Module
========================

Issues strictly increasing integers per named sequence.

Classes:
    SequenceGenerator: Atomic "upsert and increment" over Counter rows.

Example:
    Numbering a new order::

        from apps.sequences.services import SequenceGenerator, ORDER_NUMBER

        generator = SequenceGenerator()
        order_number = generator.get_next(ORDER_NUMBER)
"""

import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from .exceptions import StorageUnavailable
from .models import Counter

logger = logging.getLogger(__name__)


ORDER_NUMBER = 'orderNumber'
BILL_NUMBER = 'billNumber'


class SequenceGenerator:
    """
    Hand out unique, strictly increasing integers for named sequences.

    The storage handle is the Django database alias passed at construction,
    so every caller decides explicitly which store backs its numbers.

    The increment is a single ``UPDATE ... SET value = value + 1`` issued
    before the new value is read back inside the same transaction. The row
    lock taken by the UPDATE serializes concurrent callers, so two callers
    can never observe the same value. A missing counter is inserted inside
    a savepoint; losing that insert to a concurrent creator falls back to
    the increment.

    Methods:
        get_next: Advance a sequence and return its new value.
        current: Read the last issued value without advancing.

    Example:
        Separate sequences advance independently::

            generator = SequenceGenerator()
            generator.get_next('orderNumber')  # 1
            generator.get_next('orderNumber')  # 2
            generator.get_next('billNumber')   # 1
    """

    def __init__(self, using='default'):
        self.using = using

    def get_next(self, sequence_name):
        """
        Atomically advance ``sequence_name`` and return the new value.

        The counter is created on first use, so the first call for a name
        returns 1. The incremented value is committed before it is returned
        (or becomes part of the caller's transaction when one is open).

        Args:
            sequence_name (str): Non-empty sequence identifier.

        Returns:
            int: The newly issued value.

        Raises:
            ValueError: If sequence_name is empty.
            StorageUnavailable: If the database cannot be reached or the
                increment fails.
        """
        if not sequence_name:
            raise ValueError("Sequence name is required")

        try:
            with transaction.atomic(using=self.using):
                value = self._increment(sequence_name)
                if value is None:
                    value = self._create_or_increment(sequence_name)
        except DatabaseError as e:
            logger.error("Failed to advance sequence %r: %s", sequence_name, e)
            raise StorageUnavailable(
                f"Could not advance sequence '{sequence_name}'"
            ) from e

        logger.debug("Issued %s=%s", sequence_name, value)
        return value

    def current(self, sequence_name):
        """Return the last issued value for ``sequence_name`` (0 if unused)."""
        try:
            value = Counter.objects.using(self.using).filter(
                name=sequence_name
            ).values_list('value', flat=True).first()
        except DatabaseError as e:
            logger.error("Failed to read sequence %r: %s", sequence_name, e)
            raise StorageUnavailable(
                f"Could not read sequence '{sequence_name}'"
            ) from e

        return value or 0

    def _increment(self, sequence_name):
        """Bump an existing counter; return None when it does not exist yet."""
        counters = Counter.objects.using(self.using).filter(name=sequence_name)

        updated = counters.update(value=F('value') + 1, updated_at=timezone.now())
        if not updated:
            return None

        return counters.values_list('value', flat=True).get()

    def _create_or_increment(self, sequence_name):
        """Insert a fresh counter at 1, or increment if another caller won."""
        try:
            with transaction.atomic(using=self.using):
                Counter.objects.using(self.using).create(name=sequence_name, value=1)
        except IntegrityError:
            value = self._increment(sequence_name)
            if value is None:
                raise StorageUnavailable(
                    f"Counter '{sequence_name}' vanished during creation"
                )
            return value

        logger.info("Created sequence counter %r", sequence_name)
        return 1
