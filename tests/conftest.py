"""Shared fixtures for tabular-compare tests."""

from pathlib import Path
from typing import Any

import pytest
import yaml

from tabular_compare.connectors.base import StaticSchemaComparer
from tabular_compare.core.comparison import Comparison
from tabular_compare.core.schema import SchemaSnapshot


def source_model_data() -> dict[str, Any]:
    """Source model used throughout the tests."""
    return {
        "name": "SalesModel",
        "compatibility_level": 1200,
        "data_sources": [
            {"internal_name": "ds1", "name": "Sales DB", "definition": "server=prod"},
        ],
        "tables": [
            {
                "internal_name": "t_sales",
                "name": "Sales",
                "definition": "SELECT * FROM sales",
                "measures": [
                    {"internal_name": "m_total", "name": "Total", "definition": "SUM(amount)"},
                    {"internal_name": "m_avg", "name": "Average", "definition": "AVG(amount)"},
                ],
            },
            {
                "internal_name": "t_products",
                "name": "Products",
                "definition": "SELECT * FROM products",
                "measures": [
                    {"internal_name": "m_count", "name": "Count", "definition": "COUNTROWS()"},
                ],
            },
        ],
        "roles": [
            {"internal_name": "r_reader", "name": "Reader", "definition": "read"},
        ],
    }


def target_model_data() -> dict[str, Any]:
    """Target model used throughout the tests."""
    return {
        "name": "SalesModel",
        "compatibility_level": 1200,
        "data_sources": [
            {"internal_name": "ds1", "name": "Sales DB", "definition": "server=test"},
        ],
        "tables": [
            {
                "internal_name": "t_sales",
                "name": "Sales",
                "definition": "SELECT * FROM sales",
                "measures": [
                    {"internal_name": "m_total", "name": "Total", "definition": "SUM(amount)"},
                    {"internal_name": "m_old", "name": "Old", "definition": "OLD()"},
                ],
            },
            {
                "internal_name": "t_legacy",
                "name": "Legacy",
                "definition": "SELECT * FROM legacy",
                "measures": [
                    {"internal_name": "m_legacy", "name": "Legacy Sum", "definition": "SUM(x)"},
                ],
            },
        ],
        "perspectives": [
            {"internal_name": "p_all", "name": "All", "definition": "everything"},
        ],
        "roles": [
            {"internal_name": "r_reader", "name": "Reader", "definition": "read"},
        ],
    }


@pytest.fixture
def source_data() -> dict[str, Any]:
    return source_model_data()


@pytest.fixture
def target_data() -> dict[str, Any]:
    return target_model_data()


@pytest.fixture
def source_snapshot(source_data) -> SchemaSnapshot:
    return SchemaSnapshot.model_validate(source_data)


@pytest.fixture
def target_snapshot(target_data) -> SchemaSnapshot:
    return SchemaSnapshot.model_validate(target_data)


@pytest.fixture
def comparer(source_snapshot, target_snapshot) -> StaticSchemaComparer:
    return StaticSchemaComparer(source_snapshot, target_snapshot)


@pytest.fixture
def comparison(comparer) -> Comparison:
    """A comparison whose forest has already been built."""
    comparison = Comparison(comparer)
    comparison.compare_tabular_models()
    return comparison


def write_yaml(path: Path, data: dict[str, Any]) -> Path:
    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    return path


@pytest.fixture
def snapshot_files(tmp_path, source_data, target_data) -> tuple[Path, Path]:
    """Source and target snapshots written as YAML files."""
    return (
        write_yaml(tmp_path / "source.yaml", source_data),
        write_yaml(tmp_path / "target.yaml", target_data),
    )
