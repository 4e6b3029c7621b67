"""Matching and diffing of source and target schema objects."""

from collections.abc import Callable, Mapping, Sequence

from tabular_compare.core.models import (
    ComparisonObject,
    ComparisonObjectStatus,
    ComparisonObjectType,
)
from tabular_compare.core.schema import SchemaObject, SchemaSnapshot, TableObject
from tabular_compare.exceptions import DuplicateObjectError
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)

DefinitionComparator = Callable[[str, str], bool]

# Forest order of the top-level kinds: (snapshot attribute, object type)
TOP_LEVEL_KINDS: tuple[tuple[str, ComparisonObjectType], ...] = (
    ("connections", ComparisonObjectType.CONNECTION),
    ("data_sources", ComparisonObjectType.DATA_SOURCE),
    ("tables", ComparisonObjectType.TABLE),
    ("expressions", ComparisonObjectType.EXPRESSION),
    ("perspectives", ComparisonObjectType.PERSPECTIVE),
    ("cultures", ComparisonObjectType.CULTURE),
    ("roles", ComparisonObjectType.ROLE),
    ("actions", ComparisonObjectType.ACTION),
)

TABLE_CHILD_KINDS: tuple[tuple[str, ComparisonObjectType], ...] = (
    ("relationships", ComparisonObjectType.RELATIONSHIP),
    ("measures", ComparisonObjectType.MEASURE),
    ("kpis", ComparisonObjectType.KPI),
)


def definitions_equal(source_definition: str, target_definition: str) -> bool:
    """Exact comparison, absent definitions count as empty."""
    return (source_definition or "") == (target_definition or "")


def whitespace_insensitive(source_definition: str, target_definition: str) -> bool:
    """Compare definitions ignoring differences in whitespace runs."""
    return " ".join((source_definition or "").split()) == " ".join(
        (target_definition or "").split()
    )


def _index_by_internal_name(
    objects: Sequence[SchemaObject], object_type: ComparisonObjectType, side: str
) -> dict[str, SchemaObject]:
    """Index objects by internal name, rejecting duplicates."""
    index: dict[str, SchemaObject] = {}
    for obj in objects:
        if obj.internal_name in index:
            raise DuplicateObjectError(
                f"Duplicate {object_type.value} internal name '{obj.internal_name}' in {side}",
                object_type=object_type.value,
                internal_name=obj.internal_name,
            )
        index[obj.internal_name] = obj
    return index


class ModelDiffer:
    """Pairs source and target objects into a comparison forest."""

    def __init__(
        self,
        comparators: Mapping[ComparisonObjectType, DefinitionComparator] | None = None,
        default_comparator: DefinitionComparator = definitions_equal,
    ):
        """Initialize the differ.

        Args:
            comparators: Definition comparator per object type
            default_comparator: Comparator for types without an entry in comparators
        """
        self.comparators = dict(comparators or {})
        self.default_comparator = default_comparator

    def comparator_for(self, object_type: ComparisonObjectType) -> DefinitionComparator:
        """Get the definition comparator used for an object type."""
        return self.comparators.get(object_type, self.default_comparator)

    def match_objects(
        self,
        source_objects: Sequence[SchemaObject],
        target_objects: Sequence[SchemaObject],
        object_type: ComparisonObjectType,
    ) -> list[ComparisonObject]:
        """Pair two collections of the same kind by internal name.

        Objects on both sides come first in source order, with source-only
        objects interleaved where they occur; target-only objects follow in
        target order.

        Args:
            source_objects: Objects of this kind in the source model
            target_objects: Objects of this kind in the target model
            object_type: Kind of the objects

        Returns:
            One ComparisonObject per distinct internal name

        Raises:
            DuplicateObjectError: If a side repeats an internal name
        """
        source_index = _index_by_internal_name(source_objects, object_type, "source")
        target_index = _index_by_internal_name(target_objects, object_type, "target")
        comparator = self.comparator_for(object_type)

        results = []

        for internal_name, source_obj in source_index.items():
            target_obj = target_index.get(internal_name)

            if target_obj is None:
                status = ComparisonObjectStatus.MISSING_IN_TARGET
            elif comparator(source_obj.definition, target_obj.definition):
                status = ComparisonObjectStatus.SAME_DEFINITION
            else:
                status = ComparisonObjectStatus.DIFFERENT_DEFINITIONS

            results.append(self._make_node(object_type, status, source_obj, target_obj))

        for internal_name, target_obj in target_index.items():
            if internal_name not in source_index:
                results.append(
                    self._make_node(
                        object_type, ComparisonObjectStatus.MISSING_IN_SOURCE, None, target_obj
                    )
                )

        logger.debug(
            "objects_matched",
            object_type=object_type.value,
            source_count=len(source_index),
            target_count=len(target_index),
            node_count=len(results),
        )

        return results

    def _make_node(
        self,
        object_type: ComparisonObjectType,
        status: ComparisonObjectStatus,
        source_obj: SchemaObject | None,
        target_obj: SchemaObject | None,
    ) -> ComparisonObject:
        node = ComparisonObject(
            comparison_object_type=object_type,
            status=status,
            source_object_name=source_obj.name if source_obj else "",
            source_object_internal_name=source_obj.internal_name if source_obj else "",
            source_object_definition=source_obj.definition if source_obj else "",
            target_object_name=target_obj.name if target_obj else "",
            target_object_internal_name=target_obj.internal_name if target_obj else "",
            target_object_definition=target_obj.definition if target_obj else "",
        )

        if object_type == ComparisonObjectType.TABLE:
            node.child_comparison_objects = self._diff_table_children(source_obj, target_obj)

        return node

    def _diff_table_children(
        self, source_table: SchemaObject | None, target_table: SchemaObject | None
    ) -> list[ComparisonObject]:
        """Diff relationships, measures and KPIs within the scope of one table."""
        children: list[ComparisonObject] = []
        for attribute, child_type in TABLE_CHILD_KINDS:
            source_children = (
                getattr(source_table, attribute) if isinstance(source_table, TableObject) else []
            )
            target_children = (
                getattr(target_table, attribute) if isinstance(target_table, TableObject) else []
            )
            children.extend(self.match_objects(source_children, target_children, child_type))
        return children

    def build_comparison_objects(
        self, source: SchemaSnapshot, target: SchemaSnapshot
    ) -> list[ComparisonObject]:
        """Diff every top-level kind and concatenate the results.

        Args:
            source: Source model snapshot
            target: Target model snapshot

        Returns:
            The comparison forest
        """
        forest: list[ComparisonObject] = []
        for attribute, object_type in TOP_LEVEL_KINDS:
            forest.extend(
                self.match_objects(getattr(source, attribute), getattr(target, attribute), object_type)
            )

        logger.info(
            "comparison_objects_built",
            source=source.name,
            target=target.name,
            top_level_count=len(forest),
        )

        return forest
