import pytest
from apps.sequences.models import Counter
from apps.sequences.services import SequenceGenerator


@pytest.fixture
def generator():
    """Return a generator bound to the default database."""
    return SequenceGenerator()


@pytest.fixture
def seeded_counter(db):
    """Create a counter that has already issued 41 values."""
    return Counter.objects.create(name='seeded', value=41)
