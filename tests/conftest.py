"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides metadata snapshot builders shared across test modules.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from schemaguard.metadata.models import DatabaseMetadata, parse_snapshot  # noqa: E402


def sales_snapshot_raw() -> dict[str, Any]:
    """A connected database with a realistic spread of objects.

    - public.orders: table with 2 FKs, referenced by a view and a function
    - public.customers / public.products: referenced by orders' FKs
    - public.order_summary: view over orders
    - public.refresh_totals: function reading orders
    - public.audit_trigger: trigger function
    - public.order_seq: sequence, no usage
    - public.status: domain type
    - reporting: schema with one view referencing "public"."orders"
    """
    return {
        "analytics": {"connected": False, "schemas": {}},
        "sales": {
            "connected": True,
            "schemas": {
                "public": {
                    "default": True,
                    "catalog": False,
                    "owner": "postgres",
                    "permissions": {"usage": True},
                    "relations": {
                        "orders": {
                            "type": "table",
                            "owner": "app",
                            "permissions": {"delete": True, "select": True},
                            "stats": {"rows": 1200, "writes": 40},
                            "foreignKeys": [
                                {
                                    "name": "orders_customer_fk",
                                    "referencedSchema": "public",
                                    "referencedTable": "customers",
                                },
                                {
                                    "name": "orders_product_fk",
                                    "referencedSchema": "public",
                                    "referencedTable": "products",
                                },
                            ],
                            "indexes": [{"name": "orders_pkey", "primary": True}],
                        },
                        "customers": {"type": "table", "owner": "app"},
                        "products": {"type": "table", "owner": "app"},
                        "order_summary": {
                            "type": "view",
                            "owner": "app",
                            "identifiers": ["orders", "customers"],
                        },
                    },
                    "routines": {
                        "refresh_totals": [
                            {
                                "type": "function",
                                "owner": "app",
                                "arguments": [{"name": "since", "type": "date"}],
                                "identifiers": ["public.orders"],
                            }
                        ],
                        "audit_trigger": [
                            {"type": "function", "kind": "trigger", "owner": "app"},
                        ],
                    },
                    "sequences": {
                        "order_seq": {"owner": "app", "permissions": {"usage": True}},
                    },
                    "types": {
                        "status": {"kind": "domain", "owner": "app"},
                    },
                },
                "reporting": {
                    "default": False,
                    "owner": "analyst",
                    "relations": {
                        "daily_orders": {
                            "type": "view",
                            "identifiers": ['"public"."orders"'],
                        },
                    },
                },
            },
        },
    }


@pytest.fixture
def sales_raw() -> dict[str, Any]:
    return sales_snapshot_raw()


@pytest.fixture
def sales_snapshot() -> dict[str, DatabaseMetadata]:
    return parse_snapshot(sales_snapshot_raw())


@pytest.fixture
def sales_database(sales_snapshot: dict[str, DatabaseMetadata]) -> DatabaseMetadata:
    return sales_snapshot["sales"]


@pytest.fixture
def make_snapshot() -> Callable[..., dict[str, DatabaseMetadata]]:
    """Build a one-database snapshot from schema dicts."""

    def _make(connected: bool = True, **schemas: dict[str, Any]) -> dict[str, DatabaseMetadata]:
        return parse_snapshot({"db": {"connected": connected, "schemas": schemas}})

    return _make
