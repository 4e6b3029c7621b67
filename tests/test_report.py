"""Tests for comparison reports."""

import json

from rich.console import Console

from tabular_compare.reporting.comparison_report import (
    build_report_rows,
    display_comparison_report,
    display_comparison_summary,
    generate_report_text,
    save_report_json,
    summarize,
)


class TestReportRows:
    """Test flattening of the forest."""

    def test_all_rows_with_levels(self, comparison):
        rows = build_report_rows(comparison.comparison_objects)

        assert [(r.object_type, r.level, r.source_object_name or r.target_object_name) for r in rows] == [
            ("Data Source", 0, "Sales DB"),
            ("Table", 1, "Sales"),
            ("Measure", 2, "Total"),
            ("Measure", 2, "Average"),
            ("Measure", 2, "Old"),
            ("Table", 1, "Products"),
            ("Measure", 2, "Count"),
            ("Table", 1, "Legacy"),
            ("Measure", 2, "Legacy Sum"),
            ("Perspective", 0, "All"),
            ("Role", 0, "Reader"),
        ]

    def test_hide_same_definitions(self, comparison):
        rows = build_report_rows(comparison.comparison_objects, include_same_definitions=False)
        names = [r.source_object_name or r.target_object_name for r in rows]

        # Sales stays because some of its measures differ
        assert "Sales" in names
        assert "Total" not in names
        assert "Reader" not in names

    def test_row_carries_status_and_action(self, comparison):
        comparison.comparison_objects[0].skip()

        row = build_report_rows(comparison.comparison_objects)[0]

        assert row.status == "Different Definitions"
        assert row.update_action == "Skip"
        assert row.source_object_definition == "server=prod"
        assert row.target_object_definition == "server=test"


    def test_rows_carry_their_group(self, comparison):
        rows = build_report_rows(comparison.comparison_objects)
        groups = {
            (r.object_type, r.source_object_name or r.target_object_name): r.group for r in rows
        }

        assert groups[("Data Source", "Sales DB")] == "Sales DB"
        assert groups[("Table", "Sales")] == "Sales"
        assert groups[("Measure", "Average")] == "Sales"
        assert groups[("Measure", "Old")] == "Sales"
        assert groups[("Measure", "Legacy Sum")] == "Legacy"
        assert groups[("Perspective", "All")] == "All"
        assert [r.is_group_header for r in rows[:3]] == [True, True, False]


class TestReportOutput:
    """Test rendered and saved reports."""

    def test_summarize(self, comparison):
        assert summarize(comparison.comparison_objects) == {
            "Same Definition": 3,
            "Different Definitions": 1,
            "Missing in Target": 3,
            "Missing in Source": 4,
        }

    def test_display(self, comparison):
        console = Console(record=True, width=200)

        display_comparison_report(comparison.comparison_objects, console=console)
        display_comparison_summary(comparison.comparison_objects, console=console)

        text = console.export_text()
        assert "Sales DB" in text
        assert "Missing in Source" in text
        assert "Summary" in text

    def test_display_escapes_markup(self, comparison):
        comparison.comparison_objects[0].source_object_name = "[bold]odd[/bold]"
        console = Console(record=True, width=200)

        display_comparison_report(comparison.comparison_objects, console=console)

        assert "[bold]odd[/bold]" in console.export_text()

    def test_text_report(self, comparison):
        text = generate_report_text(comparison.comparison_objects)

        assert "Tabular Model Comparison Report" in text
        assert "Measure 'Average': Missing in Target [Create]" in text
        assert "Role 'Reader'" not in text

    def test_save_json(self, comparison, tmp_path):
        path = save_report_json(comparison.comparison_objects, tmp_path / "reports" / "r.json")

        data = json.loads(path.read_text())

        assert data["summary"]["Missing in Source"] == 4
        assert len(data["rows"]) == 11
        assert data["rows"][0]["update_action"] == "Update"
        assert data["rows"][2]["group"] == "Sales"
