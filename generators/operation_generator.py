"""Catalog operation generator driven by shopper personas.

Each persona replays a fixed mix of catalog operations (browse, product
views weighted by price tier, adds, updates, deletes) so that its expected
profile variant is known up front. Viewing a product priced at or above the
expensive threshold also emits a viewExpensiveProduct lookup, as the catalog
service does.
"""

import random
from datetime import datetime, timedelta
from typing import Any

from src.domains.profiling.models import OperationKind, OperationRecord, UserIdentity

from .base import BaseGenerator

EXPENSIVE_PRICE = 100.0

# (id, name, price) per price tier
PRODUCT_CATALOG: dict[str, list[tuple[str, str, float]]] = {
    "budget": [
        ("1", "USB Cable", 9.99),
        ("2", "Mouse Pad", 14.99),
        ("3", "HDMI Cable", 19.99),
        ("4", "Phone Case", 24.99),
        ("5", "Keyboard Cover", 29.99),
    ],
    "mid": [
        ("6", "Wireless Mouse", 49.99),
        ("7", "Mechanical Keyboard", 79.99),
        ("8", "Webcam HD", 89.99),
        ("9", "Desk Lamp", 69.99),
        ("10", "USB Hub", 59.99),
    ],
    "expensive": [
        ("11", "Gaming Monitor", 299.99),
        ("12", "Mechanical Keyboard RGB", 149.99),
        ("13", "Noise Cancelling Headphones", 349.99),
        ("14", "iPad Pro", 899.99),
        ("15", "MacBook Air M3", 1299.99),
    ],
    "luxury": [
        ("16", "MacBook Pro M3 Max", 2499.99),
        ("17", "iPhone 15 Pro Max 1TB", 1599.99),
        ("18", "Sony A7R V Camera", 3899.99),
        ("19", "LG OLED TV 77in", 2999.99),
        ("20", "Gaming Laptop RTX 4090", 3499.99),
    ],
}

PERSONAS: dict[str, dict[str, Any]] = {
    "casual_browser": {
        "name": "Alice Johnson", "email": "alice.johnson@email.com", "age": 28,
        "browse": 4, "views": 16, "view_tiers": {"budget": 0.6, "mid": 0.4},
        "adds": 2, "updates": 0, "deletes": 0, "expected": "READ_HEAVY",
    },
    "power_shopper": {
        "name": "Bob Smith", "email": "bob.smith@email.com", "age": 35,
        "browse": 1, "views": 5, "view_tiers": {"mid": 1.0},
        "adds": 10, "updates": 5, "deletes": 3, "expected": "WRITE_HEAVY",
    },
    "luxury_hunter": {
        "name": "Charlie Davis", "email": "charlie.davis@email.com", "age": 42,
        "browse": 1, "views": 24, "view_tiers": {"expensive": 0.4, "luxury": 0.6},
        "adds": 0, "updates": 0, "deletes": 0, "expected": "EXPENSIVE_SEEKER",
    },
    "product_manager": {
        "name": "Diana Martinez", "email": "diana.martinez@email.com", "age": 31,
        "browse": 2, "views": 3, "view_tiers": {"budget": 0.5, "mid": 0.5},
        "adds": 8, "updates": 8, "deletes": 5, "expected": "WRITE_HEAVY",
    },
    "window_shopper": {
        "name": "Eve Wilson", "email": "eve.wilson@email.com", "age": 24,
        "browse": 6, "views": 22, "view_tiers": {"budget": 0.5, "mid": 0.5},
        "adds": 0, "updates": 0, "deletes": 0, "expected": "READ_HEAVY",
    },
    "tech_enthusiast": {
        "name": "Frank Zhang", "email": "frank.zhang@email.com", "age": 29,
        "browse": 1, "views": 20, "view_tiers": {"expensive": 0.6, "luxury": 0.4},
        "adds": 1, "updates": 0, "deletes": 0, "expected": "EXPENSIVE_SEEKER",
    },
    "budget_buyer": {
        "name": "Grace Lee", "email": "grace.lee@email.com", "age": 22,
        "browse": 5, "views": 17, "view_tiers": {"budget": 1.0},
        "adds": 2, "updates": 0, "deletes": 0, "expected": "READ_HEAVY",
    },
    "inventory_clerk": {
        "name": "Henry Brown", "email": "henry.brown@email.com", "age": 45,
        "browse": 1, "views": 3, "view_tiers": {"budget": 0.5, "mid": 0.5},
        "adds": 12, "updates": 6, "deletes": 5, "expected": "WRITE_HEAVY",
    },
    "comparison_shopper": {
        "name": "Ivy Chen", "email": "ivy.chen@email.com", "age": 33,
        "browse": 1, "views": 23, "view_tiers": {"mid": 0.5, "expensive": 0.5},
        "adds": 1, "updates": 0, "deletes": 0, "expected": None,  # depends on the draw
    },
    "data_analyst": {
        "name": "Jack Miller", "email": "jack.miller@email.com", "age": 38,
        "browse": 10, "views": 20, "view_tiers": {"budget": 0.5, "mid": 0.5},
        "adds": 0, "updates": 0, "deletes": 0, "expected": "READ_HEAVY",
    },
}

# Prices for products personas create themselves
_WRITE_TIERS = {"budget": 0.7, "mid": 0.3}


class OperationGenerator(BaseGenerator):
    """Generates timestamped operation records for a set of personas."""

    def identities(self) -> list[UserIdentity]:
        return [
            UserIdentity(name=p["name"], email=p["email"], age=p["age"])
            for p in self._personas().values()
        ]

    def expected_profile_types(self) -> dict[str, str | None]:
        return {p["email"]: p.get("expected") for p in self._personas().values()}

    def generate(self) -> list[OperationRecord]:
        """All personas' operations, merged in timestamp order."""
        mean_gap = float(self.config.get("mean_gap_seconds", 30.0))
        start = self._start_time()

        records: list[OperationRecord] = []
        for index, (key, persona) in enumerate(self._personas().items()):
            # Staggered sessions so users interleave in the merged stream
            persona_start = start + timedelta(minutes=7 * index)
            records.extend(self._persona_operations(index, persona, persona_start, mean_gap))

        records.sort(key=lambda r: r.timestamp)
        return records

    def _personas(self) -> dict[str, dict[str, Any]]:
        selected = self.config.get("personas")
        if not selected:
            return dict(PERSONAS)
        unknown = [k for k in selected if k not in PERSONAS]
        if unknown:
            raise ValueError(f"Unknown personas: {', '.join(unknown)}")
        return {k: PERSONAS[k] for k in selected}

    def _persona_operations(
        self,
        index: int,
        persona: dict[str, Any],
        start: datetime,
        mean_gap: float,
    ) -> list[OperationRecord]:
        records: list[OperationRecord] = []
        now = start
        first_name = persona["name"].split()[0]

        def emit(operation_name: str, kind: OperationKind, product: tuple | None = None) -> None:
            nonlocal now
            now = self._next_time(now, mean_gap)
            resource_id, resource_name, price = product if product else (None, None, None)
            records.append(
                OperationRecord(
                    operation_name=operation_name,
                    kind=kind,
                    timestamp=now,
                    user_name=persona["name"],
                    user_email=persona["email"],
                    resource_id=resource_id,
                    resource_name=resource_name,
                    resource_price=price,
                )
            )

        for _ in range(persona["browse"]):
            emit("getAllProducts", OperationKind.READ)

        for _ in range(persona["views"]):
            tier = self._weighted_choice(persona["view_tiers"])
            product = random.choice(PRODUCT_CATALOG[tier])
            emit("getProductById", OperationKind.READ, product)
            if product[2] >= EXPENSIVE_PRICE:
                emit("viewExpensiveProduct", OperationKind.SEARCH_EXPENSIVE, product)

        created: list[tuple[str, str, float]] = []
        base_id = 100 * (index + 1)
        for i in range(persona["adds"]):
            _, template_name, price = random.choice(
                PRODUCT_CATALOG[self._weighted_choice(_WRITE_TIERS)]
            )
            product = (str(base_id + i), f"{first_name}'s {template_name}", price)
            created.append(product)
            emit("addProduct", OperationKind.WRITE, product)

        for i in range(persona["updates"]):
            if not created:
                break
            resource_id, name, price = created[i % len(created)]
            emit("updateProduct", OperationKind.WRITE, (resource_id, name, round(price * 1.1, 2)))

        for i in range(persona["deletes"]):
            if not created:
                break
            resource_id = created[-(i % len(created)) - 1][0]
            emit("deleteProduct", OperationKind.WRITE, (resource_id, None, None))

        return records
