"""Offline profile extraction from archived operation records.

Rebuilds one profile per user from scratch, independent of any live state.
Unlike the online classifier there is no minimum-sample gate: even a single
operation is classified, and histories that trigger no rule default to
read-heavy.
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from src.pipeline.log_models import ParseStats
from src.pipeline.log_parser import LogParser

from .config import ProfilingConfig, default_config
from .export import summary_report
from .models import UNKNOWN_USER, OperationRecord, ProfileType, UserProfile
from .statistics import classify, new_profile, replay

logger = structlog.get_logger()


class ExtractionResult(BaseModel):
    profiles: dict[str, UserProfile] = Field(default_factory=dict)
    parse_stats: ParseStats = Field(default_factory=ParseStats)
    report: str = ""


class ProfileExtractor:
    """Groups records by user and builds each user's profile in one pass."""

    def __init__(
        self,
        parser: LogParser | None = None,
        config: ProfilingConfig | None = None,
    ) -> None:
        self._parser = parser or LogParser()
        self._config = config or default_config

    def extract(self, records: Iterable[OperationRecord]) -> dict[str, UserProfile]:
        """Build one profile per user email, in first-seen order."""
        by_user: dict[str, list[OperationRecord]] = {}
        for record in records:
            by_user.setdefault(record.user_email, []).append(record)

        profiles: dict[str, UserProfile] = {}
        for user_email, user_records in by_user.items():
            profile = self.build_profile(user_email, user_records)
            profiles[user_email] = profile
            logger.info(
                "profile_extracted",
                user_email=user_email,
                profile_type=profile.profile_type,
                total_operations=profile.total_operations,
            )

        logger.info("profiles_extracted", users=len(profiles))
        return profiles

    def build_profile(
        self, user_email: str, records: Sequence[OperationRecord]
    ) -> UserProfile:
        cfg = self._config.classification
        history = sorted(records, key=lambda r: r.timestamp)

        profile_type = classify(history, cfg, min_sample=0) or ProfileType.READ_HEAVY
        user_name = next((r.user_name for r in history if r.user_name), UNKNOWN_USER)

        if history:
            created_at = history[0].timestamp
            last_activity_at = history[-1].timestamp
        else:
            created_at = last_activity_at = datetime.now(UTC)

        profile = new_profile(
            profile_type,
            user_name=user_name,
            user_email=user_email,
            user_age=0,  # age is not present in logs
            created_at=created_at,
            last_activity_at=last_activity_at,
            history=history,
            config=cfg,
        )
        return replay(profile, cfg)

    def extract_from_logs(self, paths: Iterable[str | Path]) -> ExtractionResult:
        """Parse log files, extract profiles and render the extraction report."""
        self._parser.reset_stats()
        records = self._parser.parse_records(paths)
        profiles = self.extract(records)
        return ExtractionResult(
            profiles=profiles,
            parse_stats=self._parser.stats.model_copy(),
            report=self.generate_report(profiles.values()),
        )

    def generate_report(self, profiles: Iterable[UserProfile]) -> str:
        return summary_report(
            profiles,
            title="PROFILE EXTRACTION REPORT",
            top_products_limit=self._config.report.top_products_limit,
        )
