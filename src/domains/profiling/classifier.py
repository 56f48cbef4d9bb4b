"""Online profile classifier.

Updates a user's profile after every catalog operation and migrates it
between variants (read-heavy, write-heavy, expensive seeker) once enough
history has accumulated. Every call for a given user runs as one critical
section; calls for different users never wait on each other.
"""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from .config import ProfilingConfig, default_config
from .export import summary_report
from .models import (
    UNKNOWN_USER,
    OperationKind,
    OperationRecord,
    ProfileType,
    UserIdentity,
    UserProfile,
)
from .statistics import apply_operation, classify, migrate, new_profile
from .store import ProfileStore

logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ProfileClassifier:
    """Owns the live per-user profiles."""

    def __init__(
        self,
        store: ProfileStore | None = None,
        config: ProfilingConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store or ProfileStore()
        self._config = config or default_config
        self._clock = clock

    @property
    def store(self) -> ProfileStore:
        return self._store

    async def record_operation(
        self,
        identity: UserIdentity,
        operation_name: str,
        kind: OperationKind | str,
        resource_id: str | int | None = None,
        resource_name: str | None = None,
        resource_price: float | None = None,
        note: str | None = None,
    ) -> UserProfile:
        """Log one operation for a user and return a copy of the updated profile.

        Invalid input raises ValueError (pydantic ValidationError) before any
        state is touched.
        """
        record = OperationRecord(
            operation_name=operation_name,
            kind=OperationKind(kind),
            timestamp=self._clock(),
            user_name=identity.name,
            user_email=identity.email,
            resource_id=resource_id,
            resource_name=resource_name,
            resource_price=resource_price,
            note=note,
        )
        return await self._apply(identity, record)

    async def ingest(self, record: OperationRecord, user_age: int = 0) -> UserProfile:
        """Apply an already-timestamped record, e.g. one recovered from logs."""
        identity = UserIdentity(
            name=record.user_name or UNKNOWN_USER,
            email=record.user_email,
            age=user_age,
        )
        return await self._apply(identity, record)

    async def _apply(self, identity: UserIdentity, record: OperationRecord) -> UserProfile:
        if record.user_email != identity.email:
            raise ValueError(
                f"Record email {record.user_email!r} does not match identity {identity.email!r}"
            )
        cfg = self._config.classification
        key = identity.email

        async with self._store.lock_for(key):
            # Stage on a private copy; the store only sees the finished profile
            profile = self._store.get(key)
            if profile is None:
                profile = new_profile(
                    ProfileType.READ_HEAVY,
                    user_name=identity.name,
                    user_email=identity.email,
                    user_age=identity.age,
                    created_at=record.timestamp,
                    last_activity_at=record.timestamp,
                    config=cfg,
                )
                logger.info("profile_created", user_email=key, profile_type=profile.profile_type)
            elif profile.user_name == UNKNOWN_USER and identity.name != UNKNOWN_USER:
                profile.user_name = identity.name

            profile.operation_history.append(record)
            profile.last_activity_at = record.timestamp
            apply_operation(profile, record, cfg)

            target = classify(profile.operation_history, cfg)
            if target is not None and target != profile.profile_type:
                previous = profile.profile_type
                profile = migrate(profile, target, cfg)
                logger.info(
                    "profile_migrated",
                    user_email=key,
                    from_type=previous,
                    to_type=profile.profile_type,
                    total_operations=profile.total_operations,
                )

            self._store.replace(key, profile)

        logger.debug(
            "operation_recorded",
            user_email=key,
            operation=record.operation_name,
            kind=record.kind.value,
            profile_type=profile.profile_type,
        )
        return profile.model_copy(deep=True)

    def get_profile(self, email: str) -> UserProfile | None:
        return self._store.get(email)

    def all_profiles(self) -> list[UserProfile]:
        return self._store.all_profiles()

    def generate_summary_report(self) -> str:
        return summary_report(
            self._store.all_profiles(),
            title="USER PROFILING SUMMARY REPORT",
            top_products_limit=self._config.report.top_products_limit,
        )
