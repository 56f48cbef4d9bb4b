"""Profile serialization, file export and plain-text reports."""

import json
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field, TypeAdapter

from .models import (
    ProfileSummary,
    ProfileType,
    ReadHeavyProfile,
    UserProfile,
    WriteHeavyProfile,
)

logger = structlog.get_logger()

_PROFILE_ADAPTER: TypeAdapter[UserProfile] = TypeAdapter(UserProfile)
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def profile_to_record(profile: UserProfile) -> dict[str, Any]:
    """Serialize a profile; the variant tag is kept in the profileType field."""
    return profile.model_dump(mode="json", by_alias=True)


def profile_from_record(record: dict[str, Any]) -> UserProfile:
    """Rebuild the right variant from a record produced by profile_to_record."""
    return _PROFILE_ADAPTER.validate_python(record)


def export_filename(profile: UserProfile, suffix: str = "profile") -> str:
    safe_email = _UNSAFE_FILENAME_CHARS.sub("_", profile.user_email)
    return f"{safe_email}_{profile.profile_type}_{suffix}.json"


def summarize(profile: UserProfile) -> ProfileSummary:
    return ProfileSummary(
        user_name=profile.user_name,
        user_email=profile.user_email,
        profile_type=ProfileType(profile.profile_type),
        description=profile.description,
        total_operations=profile.total_operations,
        created_at=profile.created_at,
        last_activity_at=profile.last_activity_at,
    )


def summary_line(profile: UserProfile) -> str:
    """One-line digest: who, which variant, how much history and over what period."""
    return (
        f"{profile.user_name} <{profile.user_email}> | {profile.profile_type} | "
        f"{profile.total_operations} ops | "
        f"{profile.created_at:%Y-%m-%d %H:%M:%S} -> {profile.last_activity_at:%Y-%m-%d %H:%M:%S}"
    )


def top_products_line(profile: UserProfile, limit: int = 5) -> str | None:
    """The user's most-touched products, or None when there are none to show."""
    if isinstance(profile, ReadHeavyProfile):
        top = profile.top_viewed_products(limit)
        items = [f"{profile.product_names.get(pid, pid)} ({n} views)" for pid, n in top.items()]
        label = "Top viewed"
    elif isinstance(profile, WriteHeavyProfile):
        top = profile.top_modified_products(limit)
        items = [f"{pid} ({n} changes)" for pid, n in top.items()]
        label = "Most modified"
    else:
        items = [
            f"{p.resource_name or p.resource_id} €{p.price:.2f} ({p.view_count} views)"
            for p in profile.top_expensive_products(limit)
        ]
        label = "Top expensive"
    if not items:
        return None
    return f"{label}: {', '.join(items)}"


def counts_by_type(profiles: Iterable[UserProfile]) -> dict[str, int]:
    counts = {t.value: 0 for t in ProfileType}
    for profile in profiles:
        counts[profile.profile_type] += 1
    return counts


def summary_report(
    profiles: Iterable[UserProfile],
    title: str = "PROFILE REPORT",
    top_products_limit: int = 5,
) -> str:
    """Aggregate counts by variant, then a digest and top products per profile."""
    profiles = list(profiles)
    total = len(profiles)
    counts = counts_by_type(profiles)

    lines = [title, "=" * len(title), f"Total Profiles: {total}"]
    for profile_type, count in counts.items():
        pct = count * 100.0 / total if total else 0.0
        lines.append(f"  - {profile_type}: {count} ({pct:.1f}%)")
    lines.append("")
    for profile in profiles:
        lines.append(summary_line(profile))
        lines.append(f"    {profile.description}")
        if top := top_products_line(profile, top_products_limit):
            lines.append(f"    {top}")
    return "\n".join(lines) + "\n"


class ExportReport(BaseModel):
    written: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)  # user_email -> error


class ProfileExporter:
    """Writes one JSON document per profile into a directory."""

    def __init__(self, directory: str | Path, suffix: str = "profile") -> None:
        self.directory = Path(directory)
        self.suffix = suffix

    def export(self, profile: UserProfile) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / export_filename(profile, self.suffix)
        path.write_text(json.dumps(profile_to_record(profile), indent=2), encoding="utf-8")
        logger.info("profile_exported", user_email=profile.user_email, path=str(path))
        return path

    def export_all(self, profiles: Iterable[UserProfile]) -> ExportReport:
        report = ExportReport()
        for profile in profiles:
            try:
                report.written.append(str(self.export(profile)))
            except OSError as exc:
                logger.error(
                    "profile_export_failed", user_email=profile.user_email, error=str(exc)
                )
                report.failed[profile.user_email] = str(exc)
        logger.info(
            "profiles_exported",
            directory=str(self.directory),
            written=len(report.written),
            failed=len(report.failed),
        )
        return report
