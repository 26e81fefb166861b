"""Per-tool working state with result invalidation.

A workspace owns the inputs of one tool (matrix and scale for Aiken, the
compiled structure and subject rows for surveys, the raw table and column
selection for the recoder) plus whatever result was last derived from them.
Any input change discards that result, so a stale result is never served.

Imports are two-phase: the new model is built completely from the parsed
table first, then swapped in under the workspace lock. A failed parse leaves
the previous state untouched; of two concurrent imports the later swap wins.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Type, TypeVar
from uuid import uuid4

from psychocalc.calculators.aiken import AikenReport, compute_aiken, threshold_for
from psychocalc.calculators.enums import SummaryMode, ToolId
from psychocalc.calculators.matrix import ResponseMatrix
from psychocalc.calculators.recode import LikertBounds, RawTable, recode, toggle_column
from psychocalc.calculators.scale import RatingScale
from psychocalc.calculators.survey import (
    CompiledSchema,
    SubjectRow,
    SurveySummary,
    VariableSchema,
    aggregate,
    compile_schema,
    detect_mismatch,
    load_subjects,
)
from psychocalc.core.config import settings
from psychocalc.core.errors import (
    ImportFormatError,
    InvalidScaleError,
    SchemaMismatchError,
    ValidationError,
    WorkspaceNotFoundError,
)
from psychocalc.core.logging import get_logger
from psychocalc.core.metrics import inc_counter
from psychocalc.core.numeric import parse_int_or_zero

__all__ = [
    "AikenWorkspace",
    "SurveyWorkspace",
    "RecodeWorkspace",
    "WorkspaceRegistry",
    "workspace_registry",
    "coerce_count",
]

logger = get_logger("psychocalc.services.workspaces", component="workspaces")

DEFAULT_AIKEN_SHAPE = (5, 3)


def coerce_count(value: Any) -> int:
    """Row/column counts: malformed or non-positive input becomes 1."""

    parsed = parse_int_or_zero(value)
    return parsed if parsed >= 1 else 1


def _new_id() -> str:
    return uuid4().hex


@dataclass
class AikenWorkspace:
    """Items x judges ratings, a rating scale and a confidence level."""

    id: str = field(default_factory=_new_id)
    matrix: ResponseMatrix = field(default_factory=lambda: ResponseMatrix.zeros(*DEFAULT_AIKEN_SHAPE))
    scale: RatingScale = field(default_factory=RatingScale.default)
    confidence: float = 0.95
    result: Optional[AikenReport] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    kind = ToolId.AIKEN

    def resize(self, items: Any, judges: Any) -> None:
        matrix = ResponseMatrix.zeros(coerce_count(items), coerce_count(judges))
        with self._lock:
            self.matrix = matrix
            self.result = None

    def set_cell(self, row: int, column: int, value: Any) -> None:
        with self._lock:
            try:
                self.matrix = self.matrix.with_cell(row, column, value)
            except IndexError as exc:
                raise ValidationError(str(exc), detail={"row": row, "column": column}) from exc
            self.result = None

    def clear(self) -> None:
        with self._lock:
            self.matrix = ResponseMatrix.zeros(*self.matrix.shape)
            self.result = None

    def import_table(self, table: Sequence[Sequence[Any]]) -> None:
        """Replace the matrix and its shape from a parsed table (row 0 is data)."""

        if not table or not table[0]:
            raise ImportFormatError("The file contains no ratings")
        matrix = ResponseMatrix.from_raw(table)
        with self._lock:
            self.matrix = matrix
            self.result = None
        logger.info(
            "aiken_imported",
            extra={"structured_data": {"workspace_id": self.id, "items": matrix.row_count, "judges": matrix.column_count}},
        )

    def add_option(self, label: Optional[str] = None, value: Any = None) -> None:
        with self._lock:
            self.scale = self.scale.with_option(label, value)
            self.result = None

    def edit_option(self, index: int, *, label: Optional[str] = None, value: Any = None) -> None:
        with self._lock:
            try:
                self.scale = self.scale.with_edit(index, label=label, value=value)
            except IndexError as exc:
                raise ValidationError(str(exc), detail={"index": index}) from exc
            self.result = None

    def remove_option(self, index: int) -> None:
        with self._lock:
            try:
                self.scale = self.scale.without_option(index)
            except IndexError as exc:
                raise ValidationError(str(exc), detail={"index": index}) from exc
            self.result = None

    def set_confidence(self, confidence: float) -> None:
        threshold_for(confidence)
        with self._lock:
            self.confidence = confidence
            self.result = None

    def compute(self) -> AikenReport:
        """Run the engine on the current inputs and keep the report.

        Raises:
            InvalidScaleError: when the scale's min equals its max; the
                previous result is discarded and nothing is computed.
        """
        with self._lock:
            if not self.scale.is_usable:
                self.result = None
                raise InvalidScaleError(detail={"lo": self.scale.lo, "hi": self.scale.hi})
            self.result = compute_aiken(self.matrix, self.scale, self.confidence)
            report = self.result
        logger.info(
            "aiken_computed",
            extra={
                "structured_data": {
                    "workspace_id": self.id,
                    "items": len(report.items),
                    "valid": report.valid_count,
                    "threshold": report.threshold,
                }
            },
        )
        return report


@dataclass
class SurveyWorkspace:
    """A compiled survey structure and the subject rows loaded against it."""

    id: str = field(default_factory=_new_id)
    schema: VariableSchema = field(default_factory=lambda: VariableSchema(variables=()))
    compiled: CompiledSchema = field(default_factory=lambda: compile_schema(()))
    subjects: Tuple[SubjectRow, ...] = ()
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    kind = ToolId.SURVEY

    def set_schema(self, schema: VariableSchema) -> CompiledSchema:
        """Compile ``schema``; loaded subjects are dropped since their offsets no longer apply."""

        compiled = compile_schema(schema)
        with self._lock:
            discarded = len(self.subjects)
            self.schema = schema
            self.compiled = compiled
            self.subjects = ()
        if discarded:
            logger.info(
                "survey_subjects_discarded",
                extra={"structured_data": {"workspace_id": self.id, "discarded": discarded}},
            )
        return compiled

    def _check_columns(self, table: Sequence[Sequence[Any]], compiled: CompiledSchema, confirm: bool) -> None:
        mismatch = detect_mismatch(table, compiled)
        if mismatch is None or confirm:
            return
        inc_counter("imports.survey.mismatch")
        logger.info(
            "survey_import_mismatch",
            extra={
                "structured_data": {
                    "workspace_id": self.id,
                    "detected_columns": mismatch.detected_columns,
                    "expected_columns": mismatch.expected_columns,
                }
            },
        )
        raise SchemaMismatchError(mismatch.detected_columns, mismatch.expected_columns)

    def import_table(self, table: Sequence[Sequence[Any]], *, confirm: bool = False) -> Tuple[SubjectRow, ...]:
        """Load subject rows (row 0 is a header).

        Raises:
            ImportFormatError: for an empty table.
            SchemaMismatchError: when the column count differs from the
                structure and ``confirm`` is False. Nothing is loaded.
        """
        if not table:
            raise ImportFormatError("The file contains no rows")
        compiled = self.compiled
        self._check_columns(table, compiled, confirm)
        subjects = load_subjects(table, compiled)
        with self._lock:
            if self.compiled is not compiled:
                # Structure changed while parsing: check and size against the new one.
                self._check_columns(table, self.compiled, confirm)
                subjects = load_subjects(table, self.compiled)
            self.subjects = subjects
        logger.info(
            "survey_imported",
            extra={"structured_data": {"workspace_id": self.id, "subjects": len(subjects), "confirmed": confirm}},
        )
        return subjects

    def summary(self, mode: SummaryMode = SummaryMode.AVERAGE) -> SurveySummary:
        with self._lock:
            subjects, compiled = self.subjects, self.compiled
        return aggregate(subjects, compiled, mode)


@dataclass
class RecodeWorkspace:
    """An imported raw table, the columns selected for reversal and the bounds."""

    id: str = field(default_factory=_new_id)
    table: RawTable = field(default_factory=lambda: RawTable(headers=(), rows=()))
    selected: frozenset = field(default_factory=frozenset)
    bounds: LikertBounds = field(default_factory=lambda: LikertBounds(min=1, max=5))
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    kind = ToolId.RECODE

    def import_table(self, table: Sequence[Sequence[Any]]) -> RawTable:
        """Replace the table; a new file always starts with nothing selected."""

        if not table:
            raise ImportFormatError("The file contains no rows")
        raw = RawTable.from_cells(table)
        with self._lock:
            self.table = raw
            self.selected = frozenset()
        return raw

    def toggle(self, column: int) -> frozenset:
        if not 0 <= column < len(self.table.headers):
            raise ValidationError("Column does not exist", detail={"column": column})
        with self._lock:
            self.selected = toggle_column(self.selected, column)
            return self.selected

    def select(self, columns: Iterable[int]) -> frozenset:
        width = len(self.table.headers)
        chosen = frozenset(columns)
        invalid = sorted(c for c in chosen if not 0 <= c < width)
        if invalid:
            raise ValidationError("Column does not exist", detail={"columns": invalid})
        with self._lock:
            self.selected = chosen
            return self.selected

    def set_bounds(self, minimum: float, maximum: float) -> None:
        with self._lock:
            self.bounds = LikertBounds(min=minimum, max=maximum)

    def recoded(self) -> RawTable:
        with self._lock:
            table, selected, bounds = self.table, self.selected, self.bounds
        return recode(table, selected, bounds)


Workspace = Any
_W = TypeVar("_W")


class WorkspaceRegistry:
    """Bounded in-memory store; inserting past capacity evicts the oldest."""

    def __init__(self, capacity: int) -> None:
        self._capacity = max(int(capacity), 1)
        self._items: "OrderedDict[str, Workspace]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, workspace: _W) -> _W:
        with self._lock:
            self._items[workspace.id] = workspace
            while len(self._items) > self._capacity:
                evicted_id, evicted = self._items.popitem(last=False)
                logger.info(
                    "workspace_evicted",
                    extra={"structured_data": {"workspace_id": evicted_id, "kind": str(evicted.kind)}},
                )
        inc_counter(f"workspaces.created.{workspace.kind}")
        return workspace

    def get(self, workspace_id: str, kind: Type[_W]) -> _W:
        with self._lock:
            workspace = self._items.get(workspace_id)
        if not isinstance(workspace, kind):
            raise WorkspaceNotFoundError(detail={"workspace_id": workspace_id})
        return workspace

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            counts: Dict[str, int] = {}
            for workspace in self._items.values():
                counts[str(workspace.kind)] = counts.get(str(workspace.kind), 0) + 1
        return {"capacity": self._capacity, "live": sum(counts.values()), **counts}


workspace_registry = WorkspaceRegistry(settings.workspace_capacity)
