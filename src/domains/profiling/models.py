"""Pydantic models for the behavioral profiling domain."""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_EXPENSIVE_PRICE = 100.0
UNKNOWN_USER = "Unknown"


# --- Enums ---


class OperationKind(StrEnum):
    READ = "READ"  # getAllProducts, getProductById
    WRITE = "WRITE"  # addProduct, updateProduct, deleteProduct
    SEARCH_EXPENSIVE = "SEARCH_EXPENSIVE"


class ProfileType(StrEnum):
    READ_HEAVY = "READ_HEAVY"
    WRITE_HEAVY = "WRITE_HEAVY"
    EXPENSIVE_SEEKER = "EXPENSIVE_SEEKER"


_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Identity and history ---


class UserIdentity(BaseModel):
    """Acting user, passed explicitly on every classifier call."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    age: int = Field(default=0, ge=0)


class OperationRecord(BaseModel):
    """One fact about a user action: the atomic unit of profile history."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    operation_name: str = Field(min_length=1, pattern=r"^[^\s|]+$")
    kind: OperationKind
    timestamp: datetime
    user_name: str | None = None
    user_email: str = Field(min_length=1)
    resource_id: str | None = None
    resource_name: str | None = None
    resource_price: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
    note: str | None = None

    @field_validator("resource_id", mode="before")
    @classmethod
    def _coerce_resource_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def is_expensive(self, threshold: float = DEFAULT_EXPENSIVE_PRICE) -> bool:
        """Expensive lookup, or any operation touching a resource priced at/above threshold."""
        if self.kind == OperationKind.SEARCH_EXPENSIVE:
            return True
        return self.resource_price is not None and self.resource_price >= threshold


class ExpensiveProductView(BaseModel):
    model_config = _CAMEL

    resource_id: str | None = None
    resource_name: str | None = None
    price: float
    view_count: int = 1


# --- Profile variants ---


class ProfileBase(BaseModel):
    """Header shared by every profile variant."""

    model_config = _CAMEL

    user_name: str
    user_email: str
    user_age: int = 0
    created_at: datetime
    last_activity_at: datetime
    operation_history: list[OperationRecord] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_operations(self) -> int:
        return len(self.operation_history)

    @staticmethod
    def _pct(part: int, whole: int) -> float:
        return part * 100.0 / whole if whole > 0 else 0.0


class ReadHeavyProfile(ProfileBase):
    profile_type: Literal["READ_HEAVY"] = "READ_HEAVY"

    total_read_operations: int = 0
    total_write_operations: int = 0
    get_all_products_count: int = 0
    get_product_by_id_count: int = 0
    product_view_count: dict[str, int] = Field(default_factory=dict)
    product_names: dict[str, str] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def read_percentage(self) -> float:
        return self._pct(self.total_read_operations, self.total_operations)

    @property
    def description(self) -> str:
        return f"User who performs mostly READ operations ({self.read_percentage:.1f}% reads)"

    def top_viewed_products(self, limit: int = 5) -> dict[str, int]:
        ranked = sorted(self.product_view_count.items(), key=lambda x: x[1], reverse=True)
        return dict(ranked[:limit])


class WriteHeavyProfile(ProfileBase):
    profile_type: Literal["WRITE_HEAVY"] = "WRITE_HEAVY"

    total_read_operations: int = 0
    total_write_operations: int = 0
    add_product_count: int = 0
    update_product_count: int = 0
    delete_product_count: int = 0
    products_modified: dict[str, int] = Field(default_factory=dict)
    operation_type_count: dict[str, int] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def write_percentage(self) -> float:
        return self._pct(self.total_write_operations, self.total_operations)

    @property
    def description(self) -> str:
        return f"User who performs mostly WRITE operations ({self.write_percentage:.1f}% writes)"

    @property
    def most_frequent_write_operation(self) -> str:
        if not self.operation_type_count:
            return "None"
        return max(self.operation_type_count, key=self.operation_type_count.get)

    def top_modified_products(self, limit: int = 5) -> dict[str, int]:
        ranked = sorted(self.products_modified.items(), key=lambda x: x[1], reverse=True)
        return dict(ranked[:limit])


class ExpensiveSeekerProfile(ProfileBase):
    profile_type: Literal["EXPENSIVE_SEEKER"] = "EXPENSIVE_SEEKER"

    expensive_price_threshold: float = DEFAULT_EXPENSIVE_PRICE
    expensive_product_views: int = 0
    total_product_views: int = 0  # views with a known price
    priced_view_total: float = 0.0
    highest_price_viewed: float | None = None
    lowest_price_viewed: float | None = None
    expensive_products: list[ExpensiveProductView] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def expensive_view_percentage(self) -> float:
        return self._pct(self.expensive_product_views, self.total_product_views)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_price_viewed(self) -> float | None:
        if self.total_product_views == 0:
            return None
        return self.priced_view_total / self.total_product_views

    @property
    def description(self) -> str:
        return (
            f"User interested in expensive products ({self.expensive_view_percentage:.1f}% "
            f"of views >= €{self.expensive_price_threshold:.2f})"
        )

    def top_expensive_products(self, limit: int = 5) -> list[ExpensiveProductView]:
        return sorted(self.expensive_products, key=lambda p: p.price, reverse=True)[:limit]


UserProfile = Annotated[
    ReadHeavyProfile | WriteHeavyProfile | ExpensiveSeekerProfile,
    Field(discriminator="profile_type"),
]

PROFILE_CLASSES: dict[ProfileType, type[ProfileBase]] = {
    ProfileType.READ_HEAVY: ReadHeavyProfile,
    ProfileType.WRITE_HEAVY: WriteHeavyProfile,
    ProfileType.EXPENSIVE_SEEKER: ExpensiveSeekerProfile,
}


# --- Report Models ---


class ProfileSummary(BaseModel):
    model_config = _CAMEL

    user_name: str
    user_email: str
    profile_type: ProfileType
    description: str
    total_operations: int
    created_at: datetime
    last_activity_at: datetime
