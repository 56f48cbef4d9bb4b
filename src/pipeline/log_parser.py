"""Parser for archived catalog-service logs.

Turns Logback-formatted lines
(``yyyy-MM-dd HH:mm:ss.SSS [thread] LEVEL logger - message``) into LogEntry
objects and, where a user and an operation kind can be recovered, into
OperationRecords. Two message grammars are supported: the labelled
``Operation: ... | User: ... | Email: ...`` format written by the catalog
service, and a keyword heuristic for free-form lines. A line is parsed by
exactly one of them; the labelled grammar wins whenever ``Operation:`` occurs.
"""

import re
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

import structlog

from src.domains.profiling.models import OperationKind, OperationRecord

from .log_models import LogEntry, ParseStats

logger = structlog.get_logger()

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

ENVELOPE_PATTERN = re.compile(
    r"^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3})\s+"  # timestamp
    r"\[([^\]]+)\]\s+"  # thread
    r"([A-Z]+)\s+"  # level
    r"(\S+)\s+-\s+"  # logger
    r"(.+)$"  # message
)

STRUCTURED_MARKER = "Operation:"
EXPENSIVE_MARKER = "Expensive product view"
EXPENSIVE_ACTION = "viewExpensiveProduct"

# Ordered: the first matching action name wins in the heuristic grammar
KNOWN_ACTIONS: dict[str, OperationKind] = {
    "getAllProducts": OperationKind.READ,
    "getProductById": OperationKind.READ,
    "addProduct": OperationKind.WRITE,
    "updateProduct": OperationKind.WRITE,
    "deleteProduct": OperationKind.WRITE,
}

_EMAIL = r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"

# Labelled grammar
_OPERATION_RE = re.compile(r"Operation:\s*([^\s|]+)")
_USER_RE = re.compile(r"User:\s*([^|]+?)\s*(?:\||$)")
_EMAIL_RE = re.compile(rf"Email:\s*({_EMAIL})")
_ID_RE = re.compile(r"\b(?:ProductID|ID):\s*([^\s|]+)")
_NAME_RE = re.compile(r"\b(?:ProductName|Name):\s*([^|]+?)\s*(?:\||$)")
_ACTION_RE = re.compile(r"Action:\s*(READ|WRITE)\b")
_PRICE_RE = re.compile(r"Price:\s*€\s*(\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)")
_RESULT_RE = re.compile(r"\b(SUCCESS|ERROR)\s*$")

# Heuristic grammar
_ANY_EMAIL_RE = re.compile(rf"({_EMAIL})")
_LOOSE_USER_RE = re.compile(r"User[:\s]+([A-Za-z][A-Za-z ]*?)\s*(?:\||$)")
_LOOSE_ID_RE = re.compile(r"(?:ID|id)[:\s]+(\d+)")
_LOOSE_PRICE_RE = re.compile(r"(?:€|EUR|Price:)[:\s]*(\d+(?:\.\d+)?)")
_LOOSE_NAME_RE = re.compile(r"Name[:\s]+([^|]+?)\s*(?:\||$)")
_DURATION_RE = re.compile(r"(\d+)\s*(?:ms|milliseconds)\b")


class LogParser:
    """Parses log lines and files, keeping running counts in ``stats``."""

    def __init__(self) -> None:
        self.stats = ParseStats()

    def reset_stats(self) -> None:
        self.stats = ParseStats()

    # --- Lines ---

    def parse_line(self, line: str) -> LogEntry | None:
        """Parse one line; None when it does not carry the log envelope."""
        match = ENVELOPE_PATTERN.match(line.rstrip("\r\n"))
        if not match:
            return None

        timestamp_str, thread, level, logger_name, message = match.groups()
        entry = LogEntry(
            timestamp=datetime.strptime(timestamp_str, TIMESTAMP_FORMAT).replace(tzinfo=UTC),
            thread=thread,
            level=level,
            logger=logger_name,
            message=message,
        )
        if STRUCTURED_MARKER in message:
            self._parse_structured(message, entry)
        else:
            self._parse_heuristic(message, entry)
        return entry

    def parse_operation(self, line: str) -> OperationRecord | None:
        """Operation record for one line; None for anything unparseable."""
        try:
            entry = self.parse_line(line)
        except ValueError:
            return None
        return entry.to_operation_record() if entry else None

    def parse_lines(self, lines: Iterable[str], source: str = "<lines>") -> list[LogEntry]:
        """Parse many lines; bad lines are counted and skipped, never raised."""
        entries: list[LogEntry] = []
        for line_number, line in enumerate(lines, start=1):
            self.stats.lines_read += 1
            try:
                entry = self.parse_line(line)
            except ValueError as exc:
                self.stats.line_errors += 1
                logger.debug("log_line_skipped", source=source, line=line_number, error=str(exc))
                continue
            if entry is None:
                self.stats.envelope_misses += 1
                continue
            entries.append(entry)
        self.stats.entries += len(entries)
        return entries

    # --- Files ---

    def parse_file(self, path: str | Path) -> list[LogEntry]:
        path = Path(path)
        if not path.exists():
            self.stats.files_missing += 1
            logger.warning("log_file_missing", path=str(path))
            return []

        with path.open(encoding="utf-8", errors="replace") as f:
            entries = self.parse_lines(f, source=str(path))
        self.stats.files_read += 1
        logger.info("log_file_parsed", path=str(path), entries=len(entries))
        return entries

    def parse_files(self, paths: Iterable[str | Path]) -> list[LogEntry]:
        entries: list[LogEntry] = []
        for path in paths:
            entries.extend(self.parse_file(path))
        return entries

    def parse_records(self, paths: Iterable[str | Path]) -> list[OperationRecord]:
        """Operation records from every file, in file then line order."""
        return self.to_records(self.parse_files(paths))

    def to_records(self, entries: Iterable[LogEntry]) -> list[OperationRecord]:
        records = [r for r in (e.to_operation_record() for e in entries) if r is not None]
        self.stats.records += len(records)
        return records

    # --- Grammars ---

    def _parse_structured(self, message: str, entry: LogEntry) -> None:
        entry.event = "PRODUCT_OPERATION"

        if m := _OPERATION_RE.search(message):
            entry.action = m.group(1)
        if m := _USER_RE.search(message):
            name = m.group(1).strip()
            if name and name != "Unknown":
                entry.user_name = name
        if m := _EMAIL_RE.search(message):
            entry.user_email = m.group(1)
        if m := _ID_RE.search(message):
            entry.resource_id = m.group(1)
            entry.resource_type = "PRODUCT"
        if m := _NAME_RE.search(message):
            entry.resource_name = m.group(1).strip()
            entry.resource_type = "PRODUCT"
        if m := _PRICE_RE.search(message):
            entry.resource_price = float(m.group(1))

        if m := _ACTION_RE.search(message):
            entry.operation_type = OperationKind(m.group(1))
        elif entry.action in KNOWN_ACTIONS:
            entry.operation_type = KNOWN_ACTIONS[entry.action]

        if EXPENSIVE_MARKER in message:
            entry.action = EXPENSIVE_ACTION
            entry.operation_type = OperationKind.SEARCH_EXPENSIVE

        if m := _RESULT_RE.search(message):
            entry.result = m.group(1)

    def _parse_heuristic(self, message: str, entry: LogEntry) -> None:
        if "User " in message or "user" in message:
            if m := _ANY_EMAIL_RE.search(message):
                entry.user_email = m.group(1)
            if m := _LOOSE_USER_RE.search(message):
                name = m.group(1).strip()
                if name and name != "Unknown":
                    entry.user_name = name

        if "product" in message or "Product" in message:
            entry.event = "PRODUCT_OPERATION"
            entry.resource_type = "PRODUCT"
            if m := _LOOSE_ID_RE.search(message):
                entry.resource_id = m.group(1)
            if m := _LOOSE_PRICE_RE.search(message):
                entry.resource_price = float(m.group(1))
            if m := _LOOSE_NAME_RE.search(message):
                entry.resource_name = m.group(1).strip()

        for action, kind in KNOWN_ACTIONS.items():
            if action in message:
                entry.action = action
                entry.operation_type = kind
                break

        if EXPENSIVE_MARKER in message or "SEARCH_EXPENSIVE" in message:
            entry.action = EXPENSIVE_ACTION
            entry.operation_type = OperationKind.SEARCH_EXPENSIVE

        if "authenticated" in message or "login" in message:
            entry.event = "USER_AUTHENTICATION"
            succeeded = "Success" in message or "successfully" in message
            entry.result = "SUCCESS" if succeeded else "FAILURE"

        if "registered" in message or "registration" in message:
            entry.event = "USER_REGISTRATION"
            entry.result = "SUCCESS"

        if "Error" in message or "failed" in message or "Exception" in message:
            entry.result = "ERROR"
            entry.error_message = message
        elif entry.result is None:
            entry.result = "SUCCESS"

        if m := _DURATION_RE.search(message):
            entry.duration_ms = int(m.group(1))


def format_operation_line(
    record: OperationRecord,
    thread: str = "main",
    level: str = "INFO",
    logger_name: str = "catalog.ProductService",
) -> str:
    """Render a record as the labelled log line that parse_line reads back."""
    timestamp = record.timestamp
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(UTC)
    stamp = f"{timestamp:%Y-%m-%d %H:%M:%S}.{timestamp.microsecond // 1000:03d}"

    parts = [
        f"Operation: {record.operation_name}",
        f"User: {record.user_name or 'Unknown'}",
        f"Email: {record.user_email}",
    ]
    if record.resource_id is not None:
        parts.append(f"ProductID: {record.resource_id}")
    if record.resource_name is not None:
        parts.append(f"ProductName: {record.resource_name}")
    if record.resource_price is not None:
        # repr keeps every digit so the price reads back unchanged
        parts.append(f"Price: €{record.resource_price!r}")
    if record.kind != OperationKind.SEARCH_EXPENSIVE:
        parts.append(f"Action: {record.kind.value}")

    message = " | ".join(parts)
    if record.kind == OperationKind.SEARCH_EXPENSIVE:
        message = f"{EXPENSIVE_MARKER} | {message}"
    return f"{stamp} [{thread}] {level} {logger_name} - {message}"
