"""Pure psychometric calculators.

Every engine here is a deterministic function of its inputs with no I/O,
so each can be tested without the HTTP layer or spreadsheet collaborators.
"""

from .aiken import AikenItemResult, AikenReport, compute_aiken
from .baremos import BaremoTable, ItemScale, generate_baremos
from .cronbach import (
    CronbachResult,
    CronbachRowError,
    VariableRange,
    cronbach_by_variables,
    cronbach_global,
    cronbach_subset,
)
from .enums import SummaryMode, ToolId, Verdict
from .matrix import ResponseMatrix
from .recode import LikertBounds, RawTable, recode
from .scale import RatingScale, ScaleOption
from .survey import (
    CompiledSchema,
    Dimension,
    SubjectRow,
    Variable,
    VariableSchema,
    aggregate,
    compile_schema,
)

__all__ = [
    "AikenItemResult",
    "AikenReport",
    "compute_aiken",
    "BaremoTable",
    "ItemScale",
    "generate_baremos",
    "CronbachResult",
    "CronbachRowError",
    "VariableRange",
    "cronbach_by_variables",
    "cronbach_global",
    "cronbach_subset",
    "SummaryMode",
    "ToolId",
    "Verdict",
    "ResponseMatrix",
    "LikertBounds",
    "RawTable",
    "recode",
    "RatingScale",
    "ScaleOption",
    "CompiledSchema",
    "Dimension",
    "SubjectRow",
    "Variable",
    "VariableSchema",
    "aggregate",
    "compile_schema",
]
