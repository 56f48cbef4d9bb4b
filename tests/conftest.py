"""Shared test fixtures for catalog profiling tests."""

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from src.domains.profiling.classifier import ProfileClassifier
from src.domains.profiling.config import ProfilingConfig
from src.domains.profiling.models import OperationKind, OperationRecord, UserIdentity

BASE_TIME = datetime(2026, 1, 15, 10, 0, tzinfo=UTC)


@pytest.fixture
def config() -> ProfilingConfig:
    return ProfilingConfig()


@pytest.fixture
def alice() -> UserIdentity:
    return UserIdentity(name="Alice Johnson", email="alice@example.com", age=28)


@pytest.fixture
def bob() -> UserIdentity:
    return UserIdentity(name="Bob Smith", email="bob@example.com", age=35)


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Deterministic clock: one second per call, starting at BASE_TIME."""
    ticks = itertools.count()
    return lambda: BASE_TIME + timedelta(seconds=next(ticks))


@pytest.fixture
def classifier(clock, config) -> ProfileClassifier:
    return ProfileClassifier(config=config, clock=clock)


@pytest.fixture
def make_record() -> Callable[..., OperationRecord]:
    """Factory for operation records spaced one minute apart."""
    counter = itertools.count()

    def _make(
        kind: OperationKind = OperationKind.READ,
        operation_name: str | None = None,
        email: str = "carol@example.com",
        name: str | None = "Carol White",
        resource_id: str | None = None,
        resource_name: str | None = None,
        price: float | None = None,
        timestamp: datetime | None = None,
    ) -> OperationRecord:
        default_names = {
            OperationKind.READ: "getProductById",
            OperationKind.WRITE: "addProduct",
            OperationKind.SEARCH_EXPENSIVE: "viewExpensiveProduct",
        }
        return OperationRecord(
            operation_name=operation_name or default_names[kind],
            kind=kind,
            timestamp=timestamp or BASE_TIME + timedelta(minutes=next(counter)),
            user_name=name,
            user_email=email,
            resource_id=resource_id,
            resource_name=resource_name,
            resource_price=price,
        )

    return _make
