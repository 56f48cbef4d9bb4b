"""Tests for the catalog-service log parser."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from src.domains.profiling.models import OperationKind, OperationRecord
from src.pipeline.log_parser import LogParser, format_operation_line

BOB_LINE = (
    "2024-01-01 10:00:00.000 [main] INFO svc - Operation: addProduct | User: Bob | "
    "Email: bob@x.com | ProductName: Widget | Price: €12.50 | Action: WRITE"
)


def _line(message: str, logger_name: str = "c.e.ProductController") -> str:
    return f"2024-01-01 10:00:01.250 [http-nio-8080-exec-1] INFO {logger_name} - {message}"


@pytest.fixture
def parser() -> LogParser:
    return LogParser()


class TestEnvelope:
    def test_envelope_fields(self, parser):
        entry = parser.parse_line(BOB_LINE)

        assert entry.timestamp == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        assert entry.thread == "main"
        assert entry.level == "INFO"
        assert entry.logger == "svc"
        assert entry.message.startswith("Operation: addProduct")

    def test_milliseconds(self, parser):
        entry = parser.parse_line(_line("Application started"))
        assert entry.timestamp.microsecond == 250_000

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "not a log line",
            "10:00:00.000 [main] INFO svc - Operation: addProduct",
            "2024-01-01 10:00:00 [main] INFO svc - missing millis",
            "\tat com.example.ProductService.add(ProductService.java:42)",
        ],
    )
    def test_non_envelope_lines(self, parser, line):
        assert parser.parse_line(line) is None
        assert parser.parse_operation(line) is None

    def test_impossible_timestamp_raises(self, parser):
        line = "2024-13-45 10:00:00.000 [main] INFO svc - Operation: addProduct"
        with pytest.raises(ValueError):
            parser.parse_line(line)
        assert parser.parse_operation(line) is None


class TestStructuredGrammar:
    def test_labelled_write(self, parser):
        record = parser.parse_operation(BOB_LINE)

        assert record.kind == OperationKind.WRITE
        assert record.operation_name == "addProduct"
        assert record.user_name == "Bob"
        assert record.user_email == "bob@x.com"
        assert record.resource_name == "Widget"
        assert record.resource_price == 12.50
        assert record.resource_id is None

    def test_product_id_and_result(self, parser):
        entry = parser.parse_line(
            _line(
                "Operation: getProductById | User: Alice Johnson | Email: alice@example.com "
                "| ProductID: 14 | ProductName: iPad Pro | Price: €899.99 | Action: READ | SUCCESS"
            )
        )

        assert entry.event == "PRODUCT_OPERATION"
        assert entry.resource_type == "PRODUCT"
        assert entry.resource_id == "14"
        assert entry.resource_name == "iPad Pro"
        assert entry.resource_price == 899.99
        assert entry.operation_type == OperationKind.READ
        assert entry.result == "SUCCESS"

    def test_short_labels(self, parser):
        record = parser.parse_operation(
            _line("Operation: updateProduct | User: Bob | Email: bob@x.com | ID: 7 | Name: Lamp")
        )

        assert record.resource_id == "7"
        assert record.resource_name == "Lamp"

    def test_unknown_user_is_absent(self, parser):
        record = parser.parse_operation(
            _line("Operation: getAllProducts | User: Unknown | Email: anon@example.com | Action: READ")
        )
        assert record.user_name is None
        assert record.user_email == "anon@example.com"

    def test_kind_inferred_from_action_name(self, parser):
        record = parser.parse_operation(
            _line("Operation: deleteProduct | User: Bob | Email: bob@x.com | ProductID: 9")
        )
        assert record.kind == OperationKind.WRITE

    def test_unknown_action_without_label_has_no_record(self, parser):
        entry = parser.parse_line(_line("Operation: exportCatalog | User: Bob | Email: bob@x.com"))

        assert entry.action == "exportCatalog"
        assert entry.operation_type is None
        assert entry.to_operation_record() is None

    def test_missing_email_has_no_record(self, parser):
        assert parser.parse_operation(_line("Operation: addProduct | User: Bob | Action: WRITE")) is None

    def test_expensive_marker_overrides(self, parser):
        record = parser.parse_operation(
            _line(
                "Expensive product view | Operation: getProductById | User: Frank Zhang | "
                "Email: frank.zhang@email.com | ProductID: 18 | Price: €3899.99 | Action: READ"
            )
        )

        assert record.kind == OperationKind.SEARCH_EXPENSIVE
        assert record.operation_name == "viewExpensiveProduct"
        assert record.resource_price == 3899.99

    def test_error_result(self, parser):
        entry = parser.parse_line(
            _line("Operation: addProduct | User: Bob | Email: bob@x.com | Action: WRITE | ERROR")
        )
        assert entry.result == "ERROR"


class TestHeuristicGrammar:
    def test_free_form_product_view(self, parser):
        entry = parser.parse_line(
            _line(
                "getProductById called by user alice@example.com for product ID: 42 "
                "Price: 150.00 Name: Gaming Monitor | took 35 ms"
            )
        )

        assert entry.operation_type == OperationKind.READ
        assert entry.action == "getProductById"
        assert entry.user_email == "alice@example.com"
        assert entry.resource_id == "42"
        assert entry.resource_price == 150.0
        assert entry.resource_name == "Gaming Monitor"
        assert entry.duration_ms == 35
        assert entry.result == "SUCCESS"

    def test_user_name(self, parser):
        record = parser.parse_operation(
            _line("addProduct request from user carol@example.com | User: Grace Lee")
        )
        assert record.user_name == "Grace Lee"
        assert record.kind == OperationKind.WRITE

    def test_error_is_noted(self, parser):
        message = "addProduct failed for user carol@example.com: IllegalArgumentException"
        record = parser.parse_operation(_line(message))

        assert record.kind == OperationKind.WRITE
        assert record.note == message

    def test_search_expensive_keyword(self, parser):
        record = parser.parse_operation(
            _line("SEARCH_EXPENSIVE lookup by user ivy.chen@email.com on product id 15 for €1299.99")
        )

        assert record.kind == OperationKind.SEARCH_EXPENSIVE
        assert record.operation_name == "viewExpensiveProduct"
        assert record.resource_id == "15"
        assert record.resource_price == 1299.99

    def test_authentication_event_has_no_record(self, parser):
        entry = parser.parse_line(_line("User bob@example.com authenticated successfully", "AuthService"))

        assert entry.event == "USER_AUTHENTICATION"
        assert entry.result == "SUCCESS"
        assert entry.user_email == "bob@example.com"
        assert entry.to_operation_record() is None

    def test_failed_login(self, parser):
        entry = parser.parse_line(_line("login rejected for user eve@example.com", "AuthService"))
        assert entry.event == "USER_AUTHENTICATION"
        assert entry.result == "FAILURE"

    def test_registration_event(self, parser):
        entry = parser.parse_line(_line("New user registered: dana@example.com", "UserService"))
        assert entry.event == "USER_REGISTRATION"
        assert entry.result == "SUCCESS"

    def test_action_without_user_has_no_record(self, parser):
        assert parser.parse_operation(_line("getAllProducts returned 20 products")) is None


class TestFiles:
    def test_missing_file(self, parser, tmp_path):
        assert parser.parse_file(tmp_path / "nope.log") == []
        assert parser.stats.files_missing == 1
        assert parser.stats.files_read == 0

    def test_parse_file_counts(self, parser, tmp_path):
        log = tmp_path / "application-logs.txt"
        log.write_text(
            "\n".join(
                [
                    BOB_LINE,
                    "",
                    "2024-99-01 10:00:00.000 [main] INFO svc - bad date",
                    _line("Application started"),
                    "garbage",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

        entries = parser.parse_file(log)

        assert len(entries) == 2
        assert parser.stats.files_read == 1
        assert parser.stats.lines_read == 5
        assert parser.stats.envelope_misses == 2
        assert parser.stats.line_errors == 1
        assert parser.stats.entries == 2

    def test_records_keep_file_order(self, parser, tmp_path):
        first = tmp_path / "a.log"
        second = tmp_path / "b.log"
        first.write_text(BOB_LINE + "\n", encoding="utf-8")
        second.write_text(
            _line("Operation: getAllProducts | User: Amy | Email: amy@example.com | Action: READ")
            + "\n",
            encoding="utf-8",
        )

        records = parser.parse_records([second, tmp_path / "missing.log", first])

        assert [r.user_email for r in records] == ["amy@example.com", "bob@x.com"]
        assert parser.stats.records == 2
        assert parser.stats.files_missing == 1

    def test_reset_stats(self, parser, tmp_path):
        parser.parse_file(tmp_path / "nope.log")
        parser.reset_stats()
        assert parser.stats.files_missing == 0


class TestFormatOperationLine:
    T = datetime(2026, 1, 15, 10, 30, 5, 123000, tzinfo=UTC)

    def test_write_line(self):
        record = OperationRecord(
            operation_name="addProduct",
            kind=OperationKind.WRITE,
            timestamp=self.T,
            user_name="Bob Smith",
            user_email="bob.smith@email.com",
            resource_id="100",
            resource_name="Bob's USB Hub",
            resource_price=59.99,
        )

        assert format_operation_line(record) == (
            "2026-01-15 10:30:05.123 [main] INFO catalog.ProductService - "
            "Operation: addProduct | User: Bob Smith | Email: bob.smith@email.com | "
            "ProductID: 100 | ProductName: Bob's USB Hub | Price: €59.99 | Action: WRITE"
        )

    def test_expensive_line(self):
        record = OperationRecord(
            operation_name="viewExpensiveProduct",
            kind=OperationKind.SEARCH_EXPENSIVE,
            timestamp=self.T,
            user_email="frank.zhang@email.com",
            resource_id="18",
            resource_price=3899.99,
        )

        line = format_operation_line(record, thread="exec-2", level="WARN")

        assert line == (
            "2026-01-15 10:30:05.123 [exec-2] WARN catalog.ProductService - "
            "Expensive product view | Operation: viewExpensiveProduct | User: Unknown | "
            "Email: frank.zhang@email.com | ProductID: 18 | Price: €3899.99"
        )

    def test_timestamp_rendered_in_utc(self):
        local = self.T.astimezone(timezone(timedelta(hours=2)))
        record = OperationRecord(
            operation_name="getAllProducts",
            kind=OperationKind.READ,
            timestamp=local,
            user_email="amy@example.com",
        )
        assert format_operation_line(record).startswith("2026-01-15 10:30:05.123 ")

    @pytest.mark.parametrize(
        "fields",
        [
            {"operation_name": "getAllProducts", "kind": OperationKind.READ, "user_name": "Amy"},
            {
                "operation_name": "getProductById",
                "kind": OperationKind.READ,
                "user_name": "Amy Lee",
                "resource_id": "14",
                "resource_name": "iPad Pro",
                "resource_price": 899.99,
            },
            {"operation_name": "deleteProduct", "kind": OperationKind.WRITE, "resource_id": "301"},
            {
                "operation_name": "viewExpensiveProduct",
                "kind": OperationKind.SEARCH_EXPENSIVE,
                "user_name": "Amy Lee",
                "resource_id": "15",
                "resource_name": "MacBook Air M3",
                "resource_price": 1299.99,
            },
            {"operation_name": "getProductById", "kind": OperationKind.READ, "resource_price": 12.345},
            {"operation_name": "getProductById", "kind": OperationKind.READ, "resource_price": 99.999},
            {"operation_name": "bulk-import", "kind": OperationKind.WRITE, "user_name": "Amy Lee"},
            {"operation_name": "catalog.reindex_v2", "kind": OperationKind.WRITE},
        ],
    )
    def test_parse_recovers_record(self, parser, fields):
        record = OperationRecord(timestamp=self.T, user_email="amy@example.com", **fields)
        line = format_operation_line(record)

        recovered = parser.parse_operation(line)

        assert recovered.model_dump(exclude={"note"}) == record.model_dump(exclude={"note"})
        assert recovered.note == line.split(" - ", 1)[1]

    def test_price_keeps_every_digit(self):
        record = OperationRecord(
            operation_name="getProductById",
            kind=OperationKind.READ,
            timestamp=self.T,
            user_email="amy@example.com",
            resource_price=99.999,
        )
        assert format_operation_line(record).endswith("| Price: €99.999 | Action: READ")

    def test_hyphenated_operation_name(self, parser):
        record = parser.parse_operation(
            _line("Operation: bulk-import | User: Bob | Email: bob@x.com | Action: WRITE")
        )
        assert record.operation_name == "bulk-import"

    def test_exponent_price(self, parser):
        entry = parser.parse_line(
            _line("Operation: getProductById | Email: bob@x.com | Price: €1e+16 | Action: READ")
        )
        assert entry.resource_price == 1e16


class TestOperationRecordValidation:
    @pytest.mark.parametrize("name", ["bulk import", "add|Product", ""])
    def test_name_that_cannot_be_logged_rejected(self, name):
        with pytest.raises(ValidationError):
            OperationRecord(
                operation_name=name,
                kind=OperationKind.WRITE,
                timestamp=datetime(2026, 1, 15, tzinfo=UTC),
                user_email="amy@example.com",
            )

    @pytest.mark.parametrize("price", [float("inf"), float("nan"), -1.0])
    def test_unloggable_price_rejected(self, price):
        with pytest.raises(ValidationError):
            OperationRecord(
                operation_name="getProductById",
                kind=OperationKind.READ,
                timestamp=datetime(2026, 1, 15, tzinfo=UTC),
                user_email="amy@example.com",
                resource_price=price,
            )
