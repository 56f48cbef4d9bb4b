"""Profiling configuration with sensible defaults.

Thresholds for the online classifier and the offline extractor, plus
report formatting limits. Both paths read the same ClassificationConfig so
that they agree on what "expensive" and "heavy" mean.
"""

import os
from dataclasses import dataclass, field


@dataclass
class ClassificationConfig:
    """Thresholds used to pick a profile variant from an operation history."""

    # Online classifier keeps the current variant below this many operations
    min_sample_size: int = 5
    # Percentage of expensive views that makes a user an expensive seeker
    expensive_threshold_pct: float = 50.0
    write_heavy_threshold_pct: float = 60.0
    read_heavy_threshold_pct: float = 60.0
    # Resource price at or above which a view counts as expensive
    expensive_price: float = 100.0

    def __post_init__(self) -> None:
        for name in (
            "expensive_threshold_pct",
            "write_heavy_threshold_pct",
            "read_heavy_threshold_pct",
        ):
            value = getattr(self, name)
            if not 0.0 < value <= 100.0:
                raise ValueError(f"{name} must be in (0, 100], got {value}")
        if self.expensive_price < 0:
            raise ValueError(f"expensive_price must be non-negative, got {self.expensive_price}")
        if self.min_sample_size < 0:
            raise ValueError(f"min_sample_size must be non-negative, got {self.min_sample_size}")


@dataclass
class ReportConfig:
    """Text report parameters."""

    top_products_limit: int = 5

    def __post_init__(self) -> None:
        if self.top_products_limit < 1:
            raise ValueError(f"top_products_limit must be at least 1, got {self.top_products_limit}")


@dataclass
class ProfilingConfig:
    """Top-level profiling configuration."""

    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    @classmethod
    def from_env(cls) -> "ProfilingConfig":
        """Load config with env var overrides. Env vars use PROFILING_ prefix."""
        classification = ClassificationConfig()
        if v := os.getenv("PROFILING_MIN_SAMPLE_SIZE"):
            classification.min_sample_size = int(v)
        if v := os.getenv("PROFILING_EXPENSIVE_THRESHOLD_PCT"):
            classification.expensive_threshold_pct = float(v)
        if v := os.getenv("PROFILING_WRITE_HEAVY_THRESHOLD_PCT"):
            classification.write_heavy_threshold_pct = float(v)
        if v := os.getenv("PROFILING_READ_HEAVY_THRESHOLD_PCT"):
            classification.read_heavy_threshold_pct = float(v)
        if v := os.getenv("PROFILING_EXPENSIVE_PRICE"):
            classification.expensive_price = float(v)
        # Re-run validation on the overridden values
        classification.__post_init__()

        report = ReportConfig()
        if v := os.getenv("PROFILING_TOP_PRODUCTS_LIMIT"):
            report = ReportConfig(top_products_limit=int(v))

        return cls(classification=classification, report=report)


# Module-level default instance
default_config = ProfilingConfig()
