# services/credit_service.py
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from models.curriculum_model import CurriculumItem
from utils.diagnostics import Reporter, emit


def parse_curriculum_item(
    raw: Union[CurriculumItem, Mapping[str, Any]],
    report: Optional[Reporter] = None
) -> CurriculumItem:
    if isinstance(raw, CurriculumItem):
        return raw
    return CurriculumItem.model_validate(dict(raw), context={"report": report})


def deduplicate_items(
    items: Iterable[Union[CurriculumItem, Mapping[str, Any]]],
    report: Optional[Reporter] = None
) -> List[CurriculumItem]:
    """Keep the first item seen for each (student, subject) pair."""
    kept: Dict[str, CurriculumItem] = {}
    for raw in items:
        item = parse_curriculum_item(raw, report)
        if item.key in kept:
            continue
        kept[item.key] = item
    return list(kept.values())


def partition_by_student(items: List[CurriculumItem]) -> Dict[str, List[CurriculumItem]]:
    partitions: Dict[str, List[CurriculumItem]] = {}
    for item in items:
        partitions.setdefault(item.student_id, []).append(item)
    return partitions


def rollup_student(items: List[CurriculumItem], report: Optional[Reporter] = None) -> List[CurriculumItem]:
    """
    Roll leaf credits up into their unit for a single student.

    Items are visited in `order_index` order (stable for ties). A unit is
    only written out once it is closed, either by the next unit or by the
    end of the list, so its position in the result is where it was closed
    rather than where it sorted.
    """
    output: List[CurriculumItem] = []
    current_unit: Optional[CurriculumItem] = None
    accumulated = 0.0

    for item in sorted(items, key=lambda i: i.order_index):
        if item.is_unit:
            if current_unit is not None:
                output.append(current_unit.model_copy(update={"credit_value": accumulated}))
            current_unit = item
            accumulated = 0.0
        elif item.is_leaf:
            output.append(item)
            if current_unit is not None:
                accumulated += item.credit_value
            else:
                emit(report, f"Subject {item.subject_code!r} of student {item.student_id!r} has no enclosing unit")
        else:
            output.append(item)

    if current_unit is not None:
        output.append(current_unit.model_copy(update={"credit_value": accumulated}))

    return output


def rollup_credits(
    items: Iterable[Union[CurriculumItem, Mapping[str, Any]]],
    report: Optional[Reporter] = None
) -> List[CurriculumItem]:
    """
    Replace every unit's credits with the sum of the subjects it contains.

    Duplicated (student, subject) rows are dropped first, first one wins.
    Students keep the order in which they first appear in `items`.
    """
    unique_items = deduplicate_items(items, report)

    result: List[CurriculumItem] = []
    for student_items in partition_by_student(unique_items).values():
        result.extend(rollup_student(student_items, report))
    return result


def credits_by_subject(items: Iterable[CurriculumItem]) -> Dict[str, Dict[str, float]]:
    """Index rolled-up credits as {student_id: {subject_code: credits}}."""
    index: Dict[str, Dict[str, float]] = {}
    for item in items:
        index.setdefault(item.student_id, {})[item.subject_code] = item.credit_value
    return index
