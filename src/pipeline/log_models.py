"""Structured view of one archived catalog-service log line."""

from datetime import datetime

from pydantic import BaseModel, ValidationError

from src.domains.profiling.models import OperationKind, OperationRecord


class LogEntry(BaseModel):
    timestamp: datetime
    thread: str
    level: str = "INFO"
    logger: str
    message: str

    event: str | None = None  # PRODUCT_OPERATION, USER_AUTHENTICATION, USER_REGISTRATION
    user_name: str | None = None
    user_email: str | None = None
    action: str | None = None  # getAllProducts, addProduct, viewExpensiveProduct, ...
    resource_type: str | None = None
    resource_id: str | None = None
    resource_name: str | None = None
    resource_price: float | None = None
    operation_type: OperationKind | None = None
    result: str | None = None  # SUCCESS, FAILURE, ERROR
    error_message: str | None = None
    duration_ms: int | None = None

    def to_operation_record(self) -> OperationRecord | None:
        """Operation record for this line, or None when user or kind is unknown."""
        if self.user_email is None or self.operation_type is None:
            return None
        try:
            return OperationRecord(
                operation_name=self.action or self.operation_type.value,
                kind=self.operation_type,
                timestamp=self.timestamp,
                user_name=self.user_name,
                user_email=self.user_email,
                resource_id=self.resource_id,
                resource_name=self.resource_name,
                resource_price=self.resource_price,
                note=self.message,
            )
        except ValidationError:
            return None


class ParseStats(BaseModel):
    files_read: int = 0
    files_missing: int = 0
    lines_read: int = 0
    envelope_misses: int = 0
    line_errors: int = 0
    entries: int = 0
    records: int = 0
