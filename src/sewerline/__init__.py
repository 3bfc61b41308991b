"""Sewer-line gradient, invert level and code of practice compliance calculator."""

from .analyze import ComplianceEvaluator, evaluate
from .catalog import DEFAULT_CATALOG, PipeCatalog
from .models import (
    BranchDrop,
    CalculationInput,
    CalculationMode,
    CalculationResult,
    ComplianceIssue,
    DownstreamInput,
    HistoryEntry,
    IssueCode,
    Node,
    PipeSpec,
    UpstreamInput,
    VerifyInput,
    build_input,
)
from .session import ChamberForm, HistoryError, Session
from .standards import DEFAULT_STANDARDS, CodeOfPractice

__all__ = [
    "ComplianceEvaluator",
    "evaluate",
    "DEFAULT_CATALOG",
    "PipeCatalog",
    "BranchDrop",
    "CalculationInput",
    "CalculationMode",
    "CalculationResult",
    "ComplianceIssue",
    "DownstreamInput",
    "HistoryEntry",
    "IssueCode",
    "Node",
    "PipeSpec",
    "UpstreamInput",
    "VerifyInput",
    "build_input",
    "ChamberForm",
    "HistoryError",
    "Session",
    "DEFAULT_STANDARDS",
    "CodeOfPractice",
]
