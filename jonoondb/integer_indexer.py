"""Inverted bitmap index over integer-valued fields."""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable

from .errors import InvalidArgumentError, JonoonDBError
from .fields import FieldType, field_type_name
from .index_info import IndexInfo, IndexType


class IndexConstraintOperator(IntEnum):
    """Comparison operators a constraint may carry."""

    EQUAL = 2
    GREATER_THAN = 4
    LESS_THAN_EQUAL = 8
    LESS_THAN = 16
    GREATER_THAN_EQUAL = 32
    MATCH = 64


class OperandType(Enum):
    """Kind of value held by a constraint's operand."""

    INTEGER = "integer"
    DOUBLE = "double"
    STRING = "string"


@dataclass(frozen=True)
class Constraint:
    """A single comparison of a column against an operand."""

    column_name: str
    op: IndexConstraintOperator
    operand_type: OperandType
    operand: int | float | str


def is_valid_field_type(field_type: FieldType) -> bool:
    """True for the integer field types this indexer accepts."""
    return field_type in (
        FieldType.INT8,
        FieldType.INT16,
        FieldType.INT32,
        FieldType.INT64,
    )


def _union(bitmaps: Iterable[set[int]]) -> set[int]:
    result: set[int] = set()
    for bitmap in bitmaps:
        result |= bitmap
    return result


class IntegerBitmapIndexer:
    """Maps each distinct integer value to the set of document ids holding it."""

    def __init__(self, index_info: IndexInfo, field_type: FieldType) -> None:
        if not index_info.name:
            message = "Argument indexInfo has empty name."
        elif not index_info.column_name:
            message = "Argument indexInfo has empty column name."
        elif index_info.type != IndexType.INVERTED_COMPRESSED_BITMAP:
            message = (
                "Argument indexInfo can only have IndexType "
                "INVERTED_COMPRESSED_BITMAP for EWAHCompressedBitmapIndexer."
            )
        elif not is_valid_field_type(field_type):
            message = (
                f"Argument fieldType {field_type_name(field_type)} is not valid "
                "for EWAHCompressedBitmapIndexerInteger."
            )
        else:
            message = ""
        if message:
            raise InvalidArgumentError(message)

        self.index_info = index_info
        self.field_type = field_type
        self.field_name_tokens = index_info.column_name.split(".")
        self._bitmaps: dict[int, set[int]] = {}
        self._keys: list[int] = []

    def insert(self, document_id: int, value: int) -> None:
        """Record that ``document_id`` holds ``value`` in the indexed column."""
        bitmap = self._bitmaps.get(value)
        if bitmap is None:
            self._bitmaps[value] = {document_id}
            bisect.insort(self._keys, value)
        else:
            bitmap.add(document_id)

    def filter(self, constraint: Constraint) -> set[int]:
        """Document ids satisfying a single constraint."""
        op = constraint.op
        if op == IndexConstraintOperator.EQUAL:
            return self._equal(constraint)
        if op == IndexConstraintOperator.LESS_THAN:
            return self._less_than(constraint, or_equal=False)
        if op == IndexConstraintOperator.LESS_THAN_EQUAL:
            return self._less_than(constraint, or_equal=True)
        if op == IndexConstraintOperator.GREATER_THAN:
            return self._from_index(self._greater_than_start(constraint))
        if op == IndexConstraintOperator.GREATER_THAN_EQUAL:
            return self._from_index(self._greater_equal_start(constraint))
        raise JonoonDBError(f"IndexConstraintOperator type {int(op)} is not valid.")

    def filter_range(self, lower: Constraint, upper: Constraint) -> set[int]:
        """Document ids between a lower (> or >=) and upper (< or <=) bound."""
        if lower.operand_type == OperandType.DOUBLE:
            if lower.op == IndexConstraintOperator.GREATER_THAN:
                lower_val = math.floor(lower.operand)
            else:
                lower_val = math.ceil(lower.operand)
        else:
            lower_val = lower.operand

        if upper.operand_type == OperandType.DOUBLE:
            upper_val = math.ceil(upper.operand)
        else:
            upper_val = upper.operand

        if lower.op == IndexConstraintOperator.GREATER_THAN:
            start = bisect.bisect_right(self._keys, lower_val)
        else:
            start = bisect.bisect_left(self._keys, lower_val)

        selected = []
        for key in self._keys[start:]:
            if key < upper_val:
                selected.append(self._bitmaps[key])
                continue
            if upper.op == IndexConstraintOperator.LESS_THAN_EQUAL:
                if upper.operand_type == OperandType.DOUBLE:
                    if float(key) == upper.operand:
                        selected.append(self._bitmaps[key])
                elif key == upper.operand:
                    selected.append(self._bitmaps[key])
            break
        return _union(selected)

    def _equal(self, constraint: Constraint) -> set[int]:
        operand = constraint.operand
        if constraint.operand_type == OperandType.INTEGER:
            return set(self._bitmaps.get(operand, ()))
        if constraint.operand_type == OperandType.DOUBLE:
            if math.isfinite(operand) and float(operand).is_integer():
                return set(self._bitmaps.get(int(operand), ()))
        return set()

    def _less_than(self, constraint: Constraint, or_equal: bool) -> set[int]:
        operand = constraint.operand
        if constraint.operand_type == OperandType.INTEGER:
            limit = operand
        elif constraint.operand_type == OperandType.DOUBLE:
            limit = math.ceil(operand)
        else:
            return set()

        selected = []
        for key in self._keys:
            if key < limit:
                selected.append(self._bitmaps[key])
                continue
            if or_equal and key == operand:
                selected.append(self._bitmaps[key])
            break
        return _union(selected)

    def _greater_than_start(self, constraint: Constraint) -> int | None:
        if constraint.operand_type == OperandType.DOUBLE:
            value = math.floor(constraint.operand)
        elif constraint.operand_type == OperandType.INTEGER:
            value = constraint.operand
        else:
            return None
        return bisect.bisect_right(self._keys, value)

    def _greater_equal_start(self, constraint: Constraint) -> int | None:
        if constraint.operand_type == OperandType.DOUBLE:
            value = math.ceil(constraint.operand)
        elif constraint.operand_type == OperandType.INTEGER:
            value = constraint.operand
        else:
            return None
        return bisect.bisect_left(self._keys, value)

    def _from_index(self, start: int | None) -> set[int]:
        if start is None:
            return set()
        return _union(self._bitmaps[key] for key in self._keys[start:])