"""Tests for the comparison session: build, capture, replay, lookup and validation."""

import pytest

from tabular_compare.connectors.base import StaticSchemaComparer
from tabular_compare.core.comparison import Comparison
from tabular_compare.core.events import ComparisonEvents, ValidationMessageType
from tabular_compare.core.models import (
    ComparisonObjectStatus,
    ComparisonObjectType,
    UpdateAction,
)
from tabular_compare.core.schema import SchemaSnapshot
from tabular_compare.core.skip_selection import SkipSelection, SkipSelectionSet
from tabular_compare.exceptions import (
    CompatibilityLevelMismatchError,
    ComparisonError,
    InvalidUpdateActionError,
)


def find(comparison: Comparison, object_type: ComparisonObjectType, name: str):
    for obj in comparison.iter_comparison_objects():
        if obj.comparison_object_type == object_type and obj.display_name == name:
            return obj
    raise AssertionError(f"{object_type.value} {name!r} not in forest")


class TestCompareTabularModels:
    """Test building the forest."""

    def test_connects_on_demand(self, comparer):
        comparison = Comparison(comparer)

        comparison.compare_tabular_models()

        assert comparer.is_connected
        assert comparison.compatibility_level == 1200

    def test_status_counts(self, comparison):
        counts = comparison.status_counts()

        assert counts[ComparisonObjectStatus.SAME_DEFINITION] == 3
        assert counts[ComparisonObjectStatus.DIFFERENT_DEFINITIONS] == 1
        assert counts[ComparisonObjectStatus.MISSING_IN_TARGET] == 3
        assert counts[ComparisonObjectStatus.MISSING_IN_SOURCE] == 4
        assert comparison.comparison_object_count == 11

    def test_compatibility_level_mismatch(self, source_data, target_data):
        target_data["compatibility_level"] = 1400
        comparer = StaticSchemaComparer(
            SchemaSnapshot.model_validate(source_data), SchemaSnapshot.model_validate(target_data)
        )
        comparison = Comparison(comparer)

        with pytest.raises(CompatibilityLevelMismatchError):
            comparison.compare_tabular_models()

        assert not comparer.is_connected

    def test_preconnected_comparer_still_sets_compatibility_level(self, comparer):
        comparer.connect()
        comparison = Comparison(comparer)

        comparison.compare_tabular_models()

        assert comparison.compatibility_level == 1200

    def test_preconnected_comparer_still_checks_compatibility_level(
        self, source_data, target_data
    ):
        target_data["compatibility_level"] = 1400
        comparer = StaticSchemaComparer(
            SchemaSnapshot.model_validate(source_data), SchemaSnapshot.model_validate(target_data)
        )
        comparer.connect()
        comparison = Comparison(comparer)

        with pytest.raises(CompatibilityLevelMismatchError):
            comparison.compare_tabular_models()

        assert comparison.compatibility_level is None
        assert not comparer.is_connected

    def test_recompare_discards_previous_forest(self, comparison):
        before = comparison.comparison_objects

        after = comparison.compare_tabular_models()

        assert after is not before
        assert len(after) == len(before)

    def test_iter_actions(self, comparison):
        actions = {(obj.display_name, action) for obj, action in comparison.iter_actions()}

        assert actions == {
            ("Sales DB", UpdateAction.UPDATE),
            ("Average", UpdateAction.CREATE),
            ("Products", UpdateAction.CREATE),
            ("Count", UpdateAction.CREATE),
            ("Old", UpdateAction.DELETE),
            ("Legacy", UpdateAction.DELETE),
            ("Legacy Sum", UpdateAction.DELETE),
            ("All", UpdateAction.DELETE),
        }


class TestSkipCaptureAndReplay:
    """Test that skip decisions survive a fresh comparison."""

    def test_capture_only_skipped_differences(self, comparison):
        find(comparison, ComparisonObjectType.MEASURE, "Average").skip()
        find(comparison, ComparisonObjectType.PERSPECTIVE, "All").skip()

        comparison.refresh_skip_selections_from_comparison_objects()

        assert list(comparison.skip_selections) == [
            SkipSelection(
                ComparisonObjectStatus.MISSING_IN_TARGET,
                ComparisonObjectType.MEASURE,
                "m_avg",
                "",
            ),
            SkipSelection(
                ComparisonObjectStatus.MISSING_IN_SOURCE,
                ComparisonObjectType.PERSPECTIVE,
                "",
                "p_all",
            ),
        ]

    def test_capture_replaces_previous_selections(self, comparison):
        find(comparison, ComparisonObjectType.MEASURE, "Average").skip()
        comparison.refresh_skip_selections_from_comparison_objects()

        find(comparison, ComparisonObjectType.MEASURE, "Average").unskip()
        comparison.refresh_skip_selections_from_comparison_objects()

        assert len(comparison.skip_selections) == 0

    def test_skip_survives_recompare(self, comparison):
        find(comparison, ComparisonObjectType.DATA_SOURCE, "Sales DB").skip()
        find(comparison, ComparisonObjectType.TABLE, "Legacy").skip()
        comparison.refresh_skip_selections_from_comparison_objects()

        comparison.compare_tabular_models()

        assert find(comparison, ComparisonObjectType.DATA_SOURCE, "Sales DB").is_skipped
        assert find(comparison, ComparisonObjectType.TABLE, "Legacy").is_skipped
        assert not find(comparison, ComparisonObjectType.MEASURE, "Legacy Sum").is_skipped

    def test_selections_carry_over_to_new_comparison(self, comparer, comparison):
        find(comparison, ComparisonObjectType.MEASURE, "Old").skip()
        comparison.refresh_skip_selections_from_comparison_objects()

        fresh = Comparison(comparer, skip_selections=SkipSelectionSet(comparison.skip_selections))
        fresh.compare_tabular_models()

        assert find(fresh, ComparisonObjectType.MEASURE, "Old").update_action == UpdateAction.SKIP
        assert find(fresh, ComparisonObjectType.MEASURE, "Average").update_action == UpdateAction.CREATE
        assert fresh.compatibility_level == 1200

    def test_replay_survives_rename(self, comparer, comparison, source_data, target_data):
        find(comparison, ComparisonObjectType.MEASURE, "Average").skip()
        comparison.refresh_skip_selections_from_comparison_objects()

        source_data["tables"][0]["measures"][1]["name"] = "Mean Amount"
        comparer.replace_snapshots(
            SchemaSnapshot.model_validate(source_data), SchemaSnapshot.model_validate(target_data)
        )
        comparison.compare_tabular_models()

        assert find(comparison, ComparisonObjectType.MEASURE, "Mean Amount").is_skipped

    def test_selection_does_not_apply_after_status_change(
        self, comparer, comparison, source_data, target_data
    ):
        find(comparison, ComparisonObjectType.MEASURE, "Average").skip()
        comparison.refresh_skip_selections_from_comparison_objects()

        # Average now exists in the target with another definition
        target_data["tables"][0]["measures"].append(
            {"internal_name": "m_avg", "name": "Average", "definition": "AVERAGE(amount)"}
        )
        comparer.replace_snapshots(
            SchemaSnapshot.model_validate(source_data), SchemaSnapshot.model_validate(target_data)
        )
        comparison.compare_tabular_models()

        average = find(comparison, ComparisonObjectType.MEASURE, "Average")
        assert average.status == ComparisonObjectStatus.DIFFERENT_DEFINITIONS
        assert average.update_action == UpdateAction.UPDATE

    def test_same_definition_objects_are_never_skipped(self, comparer):
        selections = SkipSelectionSet(
            [
                SkipSelection(
                    ComparisonObjectStatus.DIFFERENT_DEFINITIONS,
                    ComparisonObjectType.ROLE,
                    "r_reader",
                    "r_reader",
                )
            ]
        )
        comparison = Comparison(comparer, skip_selections=selections)

        comparison.compare_tabular_models()

        reader = find(comparison, ComparisonObjectType.ROLE, "Reader")
        assert reader.update_action == UpdateAction.NONE
        with pytest.raises(InvalidUpdateActionError):
            reader.skip()


class TestFindComparisonObject:
    """Test the five-part lookup."""

    def test_exact_match(self, comparison):
        obj = comparison.find_comparison_object(
            "Total", "m_total", "Total", "m_total", ComparisonObjectType.MEASURE
        )

        assert obj is not None
        assert obj.status == ComparisonObjectStatus.SAME_DEFINITION

    def test_none_and_empty_are_equivalent(self, comparison):
        by_none = comparison.find_comparison_object(
            None, None, "All", "p_all", ComparisonObjectType.PERSPECTIVE
        )
        by_empty = comparison.find_comparison_object(
            "", "", "All", "p_all", ComparisonObjectType.PERSPECTIVE
        )

        assert by_none is not None
        assert by_none is by_empty

    @pytest.mark.parametrize(
        "args",
        [
            ("Total", "m_total", "Total", "m_total", ComparisonObjectType.KPI),
            ("Totals", "m_total", "Total", "m_total", ComparisonObjectType.MEASURE),
            ("Total", "m_total", "", "", ComparisonObjectType.MEASURE),
            ("", "", "All", "p_all", ComparisonObjectType.ROLE),
        ],
    )
    def test_partial_match_returns_none(self, comparison, args):
        assert comparison.find_comparison_object(*args) is None

    def test_finds_nested_objects(self, comparison):
        obj = comparison.find_comparison_object(
            "", "", "Legacy Sum", "m_legacy", ComparisonObjectType.MEASURE
        )

        assert obj is not None
        assert obj.status == ComparisonObjectStatus.MISSING_IN_SOURCE


class TestValidateSelection:
    """Test validation messages about the selected actions."""

    def test_summary_message(self, comparison):
        messages = comparison.validate_selection()

        assert messages[-1].message_type == ValidationMessageType.INFORMATIONAL
        assert messages[-1].message == "3 to create, 1 to update, 4 to delete, 0 skipped"

    def test_table_delete_mentions_children(self, comparison):
        messages = comparison.validate_selection()

        assert messages[0].message == (
            "Deleting table 'Legacy' also deletes its 1 child object(s)"
        )
        assert messages[0].comparison_object_type == ComparisonObjectType.TABLE

    def test_warning_for_child_of_skipped_new_table(self, comparison):
        find(comparison, ComparisonObjectType.TABLE, "Products").skip()

        messages = comparison.validate_selection()
        warnings = [m for m in messages if m.message_type == ValidationMessageType.WARNING]

        assert len(warnings) == 1
        assert "Count" in warnings[0].message
        assert "Products" in warnings[0].message
        assert messages[-1].message == "2 to create, 1 to update, 4 to delete, 1 skipped"

    def test_messages_are_emitted_through_events(self, comparer):
        received = []
        resized = []
        events = ComparisonEvents(
            on_validation_message=received.append,
            on_resize_validation_headers=lambda: resized.append(True),
        )
        comparison = Comparison(comparer, events=events)
        comparison.compare_tabular_models()

        messages = comparison.validate_selection()

        assert received == messages
        assert resized == [True]


class TestDispose:
    """Test releasing a comparison."""

    def test_dispose_disconnects_and_clears(self, comparer, comparison):
        comparison.dispose()

        assert not comparer.is_connected
        assert comparison.comparison_objects == []

    def test_dispose_is_idempotent(self, comparison):
        comparison.dispose()
        comparison.dispose()

    def test_disposed_comparison_rejects_compare(self, comparison):
        comparison.dispose()

        with pytest.raises(ComparisonError):
            comparison.compare_tabular_models()

    def test_context_manager(self, comparer):
        with Comparison(comparer) as comparison:
            comparison.compare_tabular_models()
            assert comparer.is_connected

        assert not comparer.is_connected


class TestTableScenario:
    """Source tables {A, B} against target tables {A, C}."""

    @pytest.fixture
    def abc_comparison(self) -> Comparison:
        source = SchemaSnapshot.model_validate(
            {
                "tables": [
                    {"internal_name": "1", "name": "A", "definition": "a"},
                    {"internal_name": "2", "name": "B", "definition": "b"},
                ]
            }
        )
        target = SchemaSnapshot.model_validate(
            {
                "tables": [
                    {"internal_name": "1", "name": "A", "definition": "a"},
                    {"internal_name": "3", "name": "C", "definition": "c"},
                ]
            }
        )
        comparison = Comparison(StaticSchemaComparer(source, target))
        comparison.compare_tabular_models()
        return comparison

    def test_statuses(self, abc_comparison):
        assert [(o.display_name, o.status) for o in abc_comparison.comparison_objects] == [
            ("A", ComparisonObjectStatus.SAME_DEFINITION),
            ("B", ComparisonObjectStatus.MISSING_IN_TARGET),
            ("C", ComparisonObjectStatus.MISSING_IN_SOURCE),
        ]

    def test_skip_round_trip(self, abc_comparison):
        a, b, c = abc_comparison.comparison_objects
        b.skip()
        c.skip()
        abc_comparison.refresh_skip_selections_from_comparison_objects()

        abc_comparison.compare_tabular_models()

        actions = {o.display_name: o.update_action for o in abc_comparison.comparison_objects}
        assert actions == {
            "A": UpdateAction.NONE,
            "B": UpdateAction.SKIP,
            "C": UpdateAction.SKIP,
        }

    def test_round_trip_marks_exactly_the_captured_nodes(self, comparison):
        for name in ("Sales DB", "Count", "Old", "All"):
            for obj in comparison.iter_comparison_objects():
                if obj.display_name == name:
                    obj.skip()
        before = [
            (o.comparison_object_type, o.display_name)
            for o in comparison.iter_comparison_objects()
            if o.is_skipped
        ]
        comparison.refresh_skip_selections_from_comparison_objects()

        comparison.compare_tabular_models()

        after = [
            (o.comparison_object_type, o.display_name)
            for o in comparison.iter_comparison_objects()
            if o.is_skipped
        ]
        assert after == before
        assert len(after) == 4
