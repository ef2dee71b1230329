"""
Service layer tests for sequences app.

Tests SequenceGenerator for:
- Lazy counter creation
- Monotonic, gap-free numbering
- Independence of named sequences
- Storage failure reporting
- Uniqueness under concurrent callers
"""

import pytest
import threading
from unittest.mock import patch
from django.db import OperationalError, connection
from django.test import TransactionTestCase

from apps.sequences.models import Counter
from apps.sequences.services import SequenceGenerator, ORDER_NUMBER, BILL_NUMBER
from apps.sequences.exceptions import StorageUnavailable, SequenceServiceError


# ============================================================================
# NUMBERING TESTS
# ============================================================================

@pytest.mark.django_db
class TestGetNext:
    """Test SequenceGenerator.get_next."""

    def test_first_call_creates_counter(self, generator):
        """First call for a name creates its counter and returns 1."""
        assert not Counter.objects.filter(name=ORDER_NUMBER).exists()

        assert generator.get_next(ORDER_NUMBER) == 1

        counter = Counter.objects.get(name=ORDER_NUMBER)
        assert counter.value == 1

    def test_values_strictly_increase(self, generator):
        """Repeated calls on a fresh counter return 1, 2, 3."""
        values = [generator.get_next(ORDER_NUMBER) for _ in range(3)]

        assert values == [1, 2, 3]

    def test_value_persisted_before_return(self, generator):
        """Returned value matches the stored counter."""
        value = generator.get_next(BILL_NUMBER)

        assert Counter.objects.get(name=BILL_NUMBER).value == value

    def test_sequences_are_independent(self, generator):
        """Advancing one sequence leaves the other untouched."""
        generator.get_next(ORDER_NUMBER)
        generator.get_next(ORDER_NUMBER)
        generator.get_next(ORDER_NUMBER)

        assert generator.get_next(BILL_NUMBER) == 1
        assert generator.get_next(ORDER_NUMBER) == 4
        assert generator.get_next(BILL_NUMBER) == 2

    def test_continues_from_existing_value(self, generator, seeded_counter):
        """Existing counters continue from their stored value."""
        assert generator.get_next('seeded') == 42

        seeded_counter.refresh_from_db()
        assert seeded_counter.value == 42

    def test_empty_name_rejected(self, generator):
        """Empty sequence name raises ValueError."""
        with pytest.raises(ValueError):
            generator.get_next('')

        assert Counter.objects.count() == 0

    def test_storage_failure_raises_storage_unavailable(self, generator):
        """Database errors surface as StorageUnavailable."""
        with patch.object(
            SequenceGenerator,
            '_increment',
            side_effect=OperationalError('database is locked'),
        ):
            with pytest.raises(StorageUnavailable) as exc_info:
                generator.get_next(ORDER_NUMBER)

        assert isinstance(exc_info.value, SequenceServiceError)
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_failure_does_not_advance_counter(self, generator):
        """A failed increment leaves the stored value unchanged."""
        generator.get_next(ORDER_NUMBER)

        with patch.object(
            SequenceGenerator,
            '_increment',
            side_effect=OperationalError('connection refused'),
        ):
            with pytest.raises(StorageUnavailable):
                generator.get_next(ORDER_NUMBER)

        assert generator.get_next(ORDER_NUMBER) == 2


@pytest.mark.django_db
class TestCurrent:
    """Test SequenceGenerator.current."""

    def test_unused_sequence_is_zero(self, generator):
        """Never-used sequence reads as 0 without creating a counter."""
        assert generator.current(ORDER_NUMBER) == 0
        assert not Counter.objects.filter(name=ORDER_NUMBER).exists()

    def test_current_does_not_advance(self, generator):
        """Reading the current value does not consume a number."""
        generator.get_next(ORDER_NUMBER)

        assert generator.current(ORDER_NUMBER) == 1
        assert generator.current(ORDER_NUMBER) == 1
        assert generator.get_next(ORDER_NUMBER) == 2


# ============================================================================
# CONCURRENCY TESTS
# ============================================================================

class TestConcurrency(TransactionTestCase):
    """Test uniqueness of issued numbers with real database transactions."""

    def _run_threads(self, target, count):
        threads = [threading.Thread(target=target) for _ in range(count)]

        for thread in threads:
            thread.start()

        for thread in threads:
            thread.join()

    def test_concurrent_calls_receive_distinct_values(self):
        """Concurrent callers on a fresh sequence never share a value."""
        results = []
        errors = []

        def next_in_thread():
            try:
                results.append(SequenceGenerator().get_next('concurrent'))
            except StorageUnavailable as e:
                errors.append(e)
            finally:
                connection.close()

        self._run_threads(next_in_thread, 8)

        assert errors == []
        assert len(results) == 8
        assert len(set(results)) == 8
        assert sorted(results) == list(range(1, 9))
        assert Counter.objects.get(name='concurrent').value == 8

    def test_concurrent_calls_on_existing_counter(self):
        """Concurrent increments of an existing counter lose no updates."""
        Counter.objects.create(name='existing', value=100)
        results = []

        def next_in_thread():
            try:
                for _ in range(3):
                    results.append(SequenceGenerator().get_next('existing'))
            finally:
                connection.close()

        self._run_threads(next_in_thread, 5)

        assert len(results) == 15
        assert sorted(results) == list(range(101, 116))
        assert Counter.objects.get(name='existing').value == 115
