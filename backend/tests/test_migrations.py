"""Checks that the initial migration creates the schema the models describe."""

import importlib.util
from pathlib import Path
from types import ModuleType
from unittest.mock import MagicMock

import pytest
import sqlalchemy as sa
from sqlmodel import SQLModel

from shop.models.order import ORDER_NO_CONSTRAINT, ORDER_REFUND_NO_CONSTRAINT

VERSIONS_DIR = Path(__file__).resolve().parents[1] / "migrations" / "versions"


def _load_revision(filename: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(filename.removesuffix(".py"), VERSIONS_DIR / filename)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def created_tables() -> dict[str, tuple]:  # type: ignore[type-arg]
    """Run upgrade() against a recording `op` and collect create_table calls by table name."""
    module = _load_revision("001_initial_schema.py")
    module.op = MagicMock()
    module.upgrade()
    return {call.args[0]: call.args[1:] for call in module.op.create_table.call_args_list}


def test_initial_revision_is_the_root() -> None:
    module = _load_revision("001_initial_schema.py")

    assert module.revision == "001"
    assert module.down_revision is None


def test_creates_every_model_table(created_tables: dict[str, tuple]) -> None:  # type: ignore[type-arg]
    assert set(created_tables) == set(SQLModel.metadata.tables)


def test_columns_match_models(created_tables: dict[str, tuple]) -> None:  # type: ignore[type-arg]
    for name, elements in created_tables.items():
        migrated = {element.name for element in elements if isinstance(element, sa.Column)}
        assert migrated == set(SQLModel.metadata.tables[name].columns.keys()), name


def test_order_number_constraints_are_named(created_tables: dict[str, tuple]) -> None:  # type: ignore[type-arg]
    orders = sa.Table("orders", sa.MetaData(), *created_tables["orders"])
    constraints = {
        constraint.name: list(constraint.columns.keys())
        for constraint in orders.constraints
        if isinstance(constraint, sa.UniqueConstraint)
    }

    assert constraints == {
        ORDER_NO_CONSTRAINT.name: ["no"],
        ORDER_REFUND_NO_CONSTRAINT.name: ["refund_no"],
    }


def test_downgrade_drops_every_table() -> None:
    module = _load_revision("001_initial_schema.py")
    module.op = MagicMock()

    module.downgrade()

    dropped = {call.args[0] for call in module.op.drop_table.call_args_list}
    assert dropped == set(SQLModel.metadata.tables)
