"""Per-operation statistic updates, classification and replay.

Both the online classifier and the offline extractor build variant counters
through apply_operation, so a profile's statistics are always a pure
function of its operation history and the variant it is replayed into.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .config import ClassificationConfig
from .models import (
    PROFILE_CLASSES,
    ExpensiveProductView,
    ExpensiveSeekerProfile,
    OperationKind,
    OperationRecord,
    ProfileType,
    ReadHeavyProfile,
    UserProfile,
    WriteHeavyProfile,
)

_READ_ACTION_COUNTERS = {
    "getAllProducts": "get_all_products_count",
    "getProductById": "get_product_by_id_count",
}

_WRITE_ACTION_COUNTERS = {
    "addProduct": "add_product_count",
    "updateProduct": "update_product_count",
    "deleteProduct": "delete_product_count",
}


@dataclass(frozen=True)
class KindCounts:
    reads: int = 0
    writes: int = 0
    expensive: int = 0
    total: int = 0

    def pct(self, count: int) -> float:
        return count * 100.0 / self.total if self.total > 0 else 0.0

    @property
    def read_pct(self) -> float:
        return self.pct(self.reads)

    @property
    def write_pct(self) -> float:
        return self.pct(self.writes)

    @property
    def expensive_pct(self) -> float:
        return self.pct(self.expensive)


def count_kinds(history: Sequence[OperationRecord], expensive_price: float) -> KindCounts:
    reads = writes = expensive = 0
    for record in history:
        if record.kind == OperationKind.READ:
            reads += 1
        elif record.kind == OperationKind.WRITE:
            writes += 1
        if record.is_expensive(expensive_price):
            expensive += 1
    return KindCounts(reads=reads, writes=writes, expensive=expensive, total=len(history))


def classify(
    history: Sequence[OperationRecord],
    config: ClassificationConfig,
    min_sample: int | None = None,
) -> ProfileType | None:
    """Pick the variant a history belongs to, or None when no rule fires.

    Precedence: expensive seeker, then write-heavy, then read-heavy. Histories
    shorter than min_sample (defaults to config.min_sample_size) never classify.
    """
    if min_sample is None:
        min_sample = config.min_sample_size
    if len(history) < min_sample or not history:
        return None

    counts = count_kinds(history, config.expensive_price)
    if counts.expensive_pct >= config.expensive_threshold_pct:
        return ProfileType.EXPENSIVE_SEEKER
    if counts.write_pct >= config.write_heavy_threshold_pct:
        return ProfileType.WRITE_HEAVY
    if counts.read_pct >= config.read_heavy_threshold_pct:
        return ProfileType.READ_HEAVY
    return None


# --- Variant updaters ---


def _update_read_heavy(
    profile: ReadHeavyProfile, record: OperationRecord, config: ClassificationConfig
) -> None:
    if record.kind == OperationKind.READ:
        profile.total_read_operations += 1
        counter = _READ_ACTION_COUNTERS.get(record.operation_name)
        if counter:
            setattr(profile, counter, getattr(profile, counter) + 1)
        if record.resource_id is not None and record.resource_name is not None:
            rid = record.resource_id
            profile.product_view_count[rid] = profile.product_view_count.get(rid, 0) + 1
            profile.product_names[rid] = record.resource_name
    elif record.kind == OperationKind.WRITE:
        profile.total_write_operations += 1


def _update_write_heavy(
    profile: WriteHeavyProfile, record: OperationRecord, config: ClassificationConfig
) -> None:
    if record.kind == OperationKind.WRITE:
        profile.total_write_operations += 1
        counter = _WRITE_ACTION_COUNTERS.get(record.operation_name)
        if counter:
            setattr(profile, counter, getattr(profile, counter) + 1)
        name = record.operation_name
        profile.operation_type_count[name] = profile.operation_type_count.get(name, 0) + 1
        if record.resource_id is not None:
            rid = record.resource_id
            profile.products_modified[rid] = profile.products_modified.get(rid, 0) + 1
    elif record.kind == OperationKind.READ:
        profile.total_read_operations += 1


def _update_expensive_seeker(
    profile: ExpensiveSeekerProfile, record: OperationRecord, config: ClassificationConfig
) -> None:
    price = record.resource_price
    if price is None:
        # Unpriced operations say nothing about price sensitivity
        return

    profile.total_product_views += 1
    profile.priced_view_total += price
    if profile.highest_price_viewed is None or price > profile.highest_price_viewed:
        profile.highest_price_viewed = price
    if profile.lowest_price_viewed is None or price < profile.lowest_price_viewed:
        profile.lowest_price_viewed = price

    if price < profile.expensive_price_threshold:
        return

    profile.expensive_product_views += 1
    for view in profile.expensive_products:
        if _same_product(view, record):
            view.view_count += 1
            return
    profile.expensive_products.append(
        ExpensiveProductView(
            resource_id=record.resource_id,
            resource_name=record.resource_name,
            price=price,
        )
    )


def _same_product(view: ExpensiveProductView, record: OperationRecord) -> bool:
    if record.resource_id is not None or view.resource_id is not None:
        return view.resource_id == record.resource_id
    return view.resource_name == record.resource_name


_UPDATERS: dict[ProfileType, Callable[..., None]] = {
    ProfileType.READ_HEAVY: _update_read_heavy,
    ProfileType.WRITE_HEAVY: _update_write_heavy,
    ProfileType.EXPENSIVE_SEEKER: _update_expensive_seeker,
}


def apply_operation(
    profile: UserProfile, record: OperationRecord, config: ClassificationConfig
) -> None:
    """Fold one record into the variant counters of a profile (in place)."""
    _UPDATERS[ProfileType(profile.profile_type)](profile, record, config)


# --- Construction, replay, migration ---


def new_profile(
    profile_type: ProfileType,
    *,
    user_name: str,
    user_email: str,
    user_age: int,
    created_at: datetime,
    last_activity_at: datetime,
    history: Sequence[OperationRecord] = (),
    config: ClassificationConfig,
) -> UserProfile:
    """Create a variant with zeroed counters carrying the given header and history."""
    fields: dict[str, Any] = {
        "user_name": user_name,
        "user_email": user_email,
        "user_age": user_age,
        "created_at": created_at,
        "last_activity_at": last_activity_at,
        "operation_history": list(history),
    }
    if profile_type == ProfileType.EXPENSIVE_SEEKER:
        fields["expensive_price_threshold"] = config.expensive_price
    return PROFILE_CLASSES[profile_type](**fields)


def replay(profile: UserProfile, config: ClassificationConfig) -> UserProfile:
    """Feed the whole history through the updater, in chronological order."""
    for record in profile.operation_history:
        apply_operation(profile, record, config)
    return profile


def migrate(
    profile: UserProfile, target: ProfileType, config: ClassificationConfig
) -> UserProfile:
    """Rebuild a profile as another variant, keeping its header and full history."""
    migrated = new_profile(
        target,
        user_name=profile.user_name,
        user_email=profile.user_email,
        user_age=profile.user_age,
        created_at=profile.created_at,
        last_activity_at=profile.last_activity_at,
        history=profile.operation_history,
        config=config,
    )
    return replay(migrated, config)
