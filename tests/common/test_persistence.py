import pytest

from src.driving_school.driving_school.common.persistence import store_errors
from src.driving_school.driving_school.core.exceptions import PersistenceError, ValidationError


def test_store_failure_becomes_persistence_error():
    with pytest.raises(PersistenceError) as exc:
        with store_errors("Could not load the package"):
            raise RuntimeError("Lost connection to MySQL server")

    assert str(exc.value) == "Lost connection to MySQL server"
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_domain_errors_pass_through_unchanged():
    with pytest.raises(ValidationError):
        with store_errors("Could not load the package"):
            raise ValidationError("Package #1 does not exist")
