"""Data models for sewer-line gradient and compliance calculations.

This module contains the dataclasses that represent the entities of a
single pipe run: pipe specifications, chambers (inspection chambers or
manholes), the mode dependent calculation inputs and the evaluated result.
"""

import logging
import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, TypeGuard

log = logging.getLogger(__name__)


class CalculationMode(Enum):
    DOWNSTREAM = "DOWNSTREAM"  # Start IL + gradient given, end IL derived
    UPSTREAM = "UPSTREAM"  # End IL + gradient given, start IL derived
    VERIFY = "VERIFY"  # Both ILs given, gradient derived


class BranchDrop(Enum):
    """Offset of a branch inlet at the upstream chamber (meters)."""

    NONE = 0.0
    DROP_75 = 0.075
    DROP_100 = 0.100

    @classmethod
    def from_value(cls, value: Any) -> "BranchDrop":
        """Get the branch drop matching a numeric value in meters."""
        number = to_float(value)
        for drop in cls:
            if abs(drop.value - number) < 1e-9:
                return drop
        raise ValueError(f"Unsupported branch drop: {value!r}")


class IssueCode(Enum):
    MAX_LENGTH = "MAX_LENGTH"
    MIN_GRADIENT = "MIN_GRADIENT"
    MAX_GRADIENT = "MAX_GRADIENT"
    NO_GRAVITY_FLOW = "NO_GRAVITY_FLOW"
    MIN_DEPTH_UPSTREAM = "MIN_DEPTH_UPSTREAM"
    MIN_DEPTH_DOWNSTREAM = "MIN_DEPTH_DOWNSTREAM"
    LOW_VELOCITY = "LOW_VELOCITY"
    HIGH_VELOCITY = "HIGH_VELOCITY"
    VORTEX_DROP = "VORTEX_DROP"
    BACKDROP = "BACKDROP"


def is_float(val: Any) -> TypeGuard[float]:
    """Check if val can be read as a float."""
    if isinstance(val, float):
        return True
    if val is None or isinstance(val, bool):
        return False
    if not isinstance(val, str):
        val = str(val)
    try:
        float(val)
        return True
    except ValueError:
        return False


def to_float(val: Any) -> float:
    """Convert value to float, blank or invalid values become 0.0."""
    if isinstance(val, float):
        return val
    if not is_float(val):
        return 0.0
    return float(val)


def to_optional_float(val: Any) -> float | None:
    """Convert a form field value to float, blank fields become None.

    Parameters
    ----------
    val : Any
        Raw field value, e.g. ``""``, ``"18.43"`` or ``18.43``

    Returns
    -------
    float | None
        The number or None when the field is blank or not numeric
    """
    if val is None:
        return None
    if isinstance(val, str) and len(val.strip()) == 0:
        return None
    if not is_float(val):
        log.debug(f"Ignoring non numeric field value: {val!r}")
        return None
    return float(val)


@dataclass(frozen=True)
class PipeSpec:
    """Catalog entry of a selectable pipe.

    Parameters
    ----------
    id : str
        Unique catalog key, e.g. ``200-vcp``
    label : str
        Display name
    material : str
        Material category used for filtering
    diameter_mm : int
        Nominal diameter in millimeters
    mannings_n : float
        Manning roughness coefficient
    min_gradient : int
        Denominator X of the flattest permitted gradient 1:X
    """

    id: str
    label: str
    material: str
    diameter_mm: int
    mannings_n: float
    min_gradient: int

    MIN_GRAVITY_DIAMETER: ClassVar[int] = 150

    def __post_init__(self) -> None:
        if self.diameter_mm <= 0:
            raise ValueError(f"Pipe {self.id}: diameter must be positive, got {self.diameter_mm}")
        if self.mannings_n <= 0:
            raise ValueError(f"Pipe {self.id}: Manning's n must be positive, got {self.mannings_n}")
        if self.min_gradient <= 0:
            raise ValueError(f"Pipe {self.id}: minimum gradient must be positive, got {self.min_gradient}")

    @property
    def diameter_m(self) -> float:
        return self.diameter_mm / 1000

    @property
    def is_pumping_only(self) -> bool:
        """Pipes below the gravity minimum size are only valid for pumping mains."""
        return self.diameter_mm < self.MIN_GRAVITY_DIAMETER


@dataclass(frozen=True)
class Node:
    """Chamber at one end of a pipe run.

    ``depth`` is always derived from the two levels, editing the depth
    re-derives the invert level instead.
    """

    id: str
    top_level: float
    invert_level: float

    @property
    def depth(self) -> float:
        return self.top_level - self.invert_level

    @property
    def has_top_level(self) -> bool:
        """A top level of 0.0 counts as not supplied."""
        return self.top_level != 0

    def with_depth(self, depth: float) -> "Node":
        return Node(id=self.id, top_level=self.top_level, invert_level=self.top_level - depth)

    def with_top_level(self, top_level: float) -> "Node":
        return Node(id=self.id, top_level=top_level, invert_level=self.invert_level)

    def with_invert_level(self, invert_level: float) -> "Node":
        return Node(id=self.id, top_level=self.top_level, invert_level=invert_level)


def apply_branch_drop(node: Node, branch_drop: BranchDrop) -> Node:
    """Get the upstream chamber as displayed with a branch inlet offset.

    The offset is added to the invert level and therefore subtracted from
    the depth. It never takes part in the compliance checks.
    """
    if branch_drop == BranchDrop.NONE:
        return node
    return node.with_invert_level(node.invert_level + branch_drop.value)


@dataclass(frozen=True, kw_only=True)
class _SegmentInput:
    """Fields shared by all calculation modes."""

    pipe: PipeSpec
    start_id: str = "1"
    end_id: str = "2"
    start_top_level: float | None = None
    end_top_level: float | None = None
    distance: float | None = None
    is_pumping_main: bool = False

    mode: ClassVar[CalculationMode]


@dataclass(frozen=True, kw_only=True)
class DownstreamInput(_SegmentInput):
    """Start invert level and gradient given, end invert level derived."""

    start_invert_level: float | None = None
    gradient: float | None = None

    mode: ClassVar[CalculationMode] = CalculationMode.DOWNSTREAM


@dataclass(frozen=True, kw_only=True)
class UpstreamInput(_SegmentInput):
    """End invert level and gradient given, start invert level derived."""

    end_invert_level: float | None = None
    gradient: float | None = None
    branch_drop: BranchDrop = BranchDrop.NONE

    mode: ClassVar[CalculationMode] = CalculationMode.UPSTREAM


@dataclass(frozen=True, kw_only=True)
class VerifyInput(_SegmentInput):
    """Both invert levels given, gradient derived."""

    start_invert_level: float | None = None
    end_invert_level: float | None = None

    mode: ClassVar[CalculationMode] = CalculationMode.VERIFY


CalculationInput = DownstreamInput | UpstreamInput | VerifyInput

INPUT_TYPES: dict[CalculationMode, type[DownstreamInput] | type[UpstreamInput] | type[VerifyInput]] = {
    CalculationMode.DOWNSTREAM: DownstreamInput,
    CalculationMode.UPSTREAM: UpstreamInput,
    CalculationMode.VERIFY: VerifyInput,
}

NUMERIC_FIELDS = (
    "start_top_level",
    "end_top_level",
    "start_invert_level",
    "end_invert_level",
    "distance",
    "gradient",
)


def build_input(mode: CalculationMode | str, pipe: PipeSpec, **values: Any) -> CalculationInput:
    """Create the input variant of a mode from flat form values.

    Fields the mode does not accept (e.g. the end invert level in
    DOWNSTREAM mode, where it is an output) are dropped.

    Parameters
    ----------
    mode : CalculationMode | str
        Calculation mode or its name
    pipe : PipeSpec
        Selected pipe
    **values : Any
        Form values, numeric fields may be blank strings

    Returns
    -------
    CalculationInput
        Input variant matching the mode
    """
    if isinstance(mode, str):
        mode = CalculationMode(mode.upper())
    input_type = INPUT_TYPES[mode]
    accepted = {input_field.name for input_field in fields(input_type)}

    kwargs: dict[str, Any] = {"pipe": pipe}
    for name, value in values.items():
        if name not in accepted or name == "pipe":
            if value not in (None, ""):
                log.debug(f"{mode.value}: ignoring field '{name}'")
            continue
        if name in NUMERIC_FIELDS:
            value = to_optional_float(value)
        elif name == "branch_drop" and not isinstance(value, BranchDrop):
            value = BranchDrop.from_value(value)
        elif name in ("start_id", "end_id"):
            value = str(value)
        elif name == "is_pumping_main":
            value = bool(value)
        kwargs[name] = value
    return input_type(**kwargs)


@dataclass(frozen=True)
class ComplianceIssue:
    code: IssueCode
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class CalculationResult:
    """Fully resolved pipe run with its compliance verdict.

    Parameters
    ----------
    mode : CalculationMode
        Mode the result was calculated in
    start_node : Node
        Upstream chamber
    end_node : Node
        Downstream chamber
    distance : float
        Run length in meters
    gradient : float
        Signed denominator X of 1:X
    fall : float
        Invert drop from start to end, positive means downstream flow
    velocity : float
        Full-bore velocity in m/s
    issues : tuple[ComplianceIssue, ...]
        Issues in check order
    pipe : PipeSpec
        Pipe the run was evaluated with
    is_pumping_main : bool
        Whether the run was evaluated as pumping main
    branch_drop : BranchDrop
        Branch inlet offset shown at the upstream chamber, never checked
    """

    mode: CalculationMode
    start_node: Node
    end_node: Node
    distance: float
    gradient: float
    fall: float
    velocity: float
    issues: tuple[ComplianceIssue, ...]
    pipe: PipeSpec
    is_pumping_main: bool = False
    branch_drop: BranchDrop = BranchDrop.NONE

    @property
    def is_compliant(self) -> bool:
        return len(self.issues) == 0

    @property
    def compliance_issues(self) -> tuple[str, ...]:
        return tuple(issue.message for issue in self.issues)

    @property
    def issue_codes(self) -> tuple[IssueCode, ...]:
        return tuple(issue.code for issue in self.issues)

    @property
    def display_start_node(self) -> Node:
        """Upstream chamber with the branch drop applied."""
        return apply_branch_drop(self.start_node, self.branch_drop)

    @property
    def gradient_percent(self) -> float:
        if self.gradient == 0:
            return 0.0
        return 100 / abs(self.gradient)

    def has_issue(self, code: IssueCode) -> bool:
        return code in self.issue_codes


def _generate_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class HistoryEntry:
    """Saved calculation: the input snapshot together with its result."""

    inputs: CalculationInput
    result: CalculationResult
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_generate_entry_id)
