"""Compliance evaluation of a single pipe run.

The evaluator derives the missing invert level (or the gradient in VERIFY
mode), calculates the full-bore velocity and runs the regulatory checks.
Incomplete input yields no result at all, which is distinct from a complete
result carrying issues.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from ..models import (
    NUMERIC_FIELDS,
    BranchDrop,
    CalculationInput,
    CalculationResult,
    ComplianceIssue,
    DownstreamInput,
    Node,
    UpstreamInput,
    VerifyInput,
)
from ..standards import DEFAULT_STANDARDS, CodeOfPractice
from .checks import DEFAULT_CHECKS, CheckContext, IComplianceCheck
from .hydraulics import fall_from_gradient, gradient_from_fall, manning_velocity

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedProfile:
    """Invert levels, gradient and fall of a run after the mode is applied."""

    start_invert_level: float
    end_invert_level: float
    gradient: float
    fall: float


def _resolve_downstream(calc_input: DownstreamInput) -> ResolvedProfile | None:
    if calc_input.start_invert_level is None or calc_input.distance is None:
        return None
    if not calc_input.gradient:
        return None
    fall = fall_from_gradient(calc_input.distance, calc_input.gradient)
    return ResolvedProfile(
        start_invert_level=calc_input.start_invert_level,
        end_invert_level=calc_input.start_invert_level - fall,
        gradient=calc_input.gradient,
        fall=fall,
    )


def _resolve_upstream(calc_input: UpstreamInput) -> ResolvedProfile | None:
    if calc_input.end_invert_level is None or calc_input.distance is None:
        return None
    if not calc_input.gradient:
        return None
    fall = fall_from_gradient(calc_input.distance, calc_input.gradient)
    return ResolvedProfile(
        start_invert_level=calc_input.end_invert_level + fall,
        end_invert_level=calc_input.end_invert_level,
        gradient=calc_input.gradient,
        fall=fall,
    )


def _resolve_verify(calc_input: VerifyInput) -> ResolvedProfile | None:
    if calc_input.start_invert_level is None or calc_input.end_invert_level is None:
        return None
    if not calc_input.distance:
        return None
    fall = calc_input.start_invert_level - calc_input.end_invert_level
    return ResolvedProfile(
        start_invert_level=calc_input.start_invert_level,
        end_invert_level=calc_input.end_invert_level,
        gradient=gradient_from_fall(calc_input.distance, fall),
        fall=fall,
    )


def _has_non_finite_value(calc_input: CalculationInput) -> bool:
    for name in NUMERIC_FIELDS:
        value = getattr(calc_input, name, None)
        if value is not None and not math.isfinite(value):
            return True
    return False


def resolve_profile(calc_input: CalculationInput) -> ResolvedProfile | None:
    """Apply the mode of the input.

    Parameters
    ----------
    calc_input : CalculationInput
        Input variant of the active mode

    Returns
    -------
    ResolvedProfile | None
        Resolved levels or None if a required field is blank, not finite or a divisor is zero
    """
    if _has_non_finite_value(calc_input):
        return None
    if isinstance(calc_input, DownstreamInput):
        return _resolve_downstream(calc_input)
    if isinstance(calc_input, UpstreamInput):
        return _resolve_upstream(calc_input)
    if isinstance(calc_input, VerifyInput):
        return _resolve_verify(calc_input)
    raise TypeError(f"Unsupported calculation input: {type(calc_input).__name__}")


class ComplianceEvaluator:
    """Evaluates pipe runs against a code of practice.

    The evaluator keeps no state between calls and can be shared between
    sessions.
    """

    def __init__(
        self,
        standards: CodeOfPractice | None = None,
        checks: Iterable[IComplianceCheck] | None = None,
    ) -> None:
        """Initialize the evaluator.

        Parameters
        ----------
        standards : CodeOfPractice | None
            Thresholds to check against, uses the defaults if None
        checks : Iterable[IComplianceCheck] | None
            Checks in evaluation order, uses the full battery if None
        """
        self.standards = standards or DEFAULT_STANDARDS
        self.checks = tuple(checks) if checks is not None else DEFAULT_CHECKS

    def evaluate(self, calc_input: CalculationInput) -> CalculationResult | None:
        """Evaluate a pipe run.

        Parameters
        ----------
        calc_input : CalculationInput
            Input variant of the active mode

        Returns
        -------
        CalculationResult | None
            Result with all issues, or None if the input is incomplete
        """
        profile = resolve_profile(calc_input)
        if profile is None:
            log.debug(f"{calc_input.mode.value}: input incomplete, no result")
            return None

        distance = calc_input.distance or 0.0
        pipe = calc_input.pipe
        start_node = Node(
            id=calc_input.start_id,
            top_level=calc_input.start_top_level or 0.0,
            invert_level=profile.start_invert_level,
        )
        end_node = Node(
            id=calc_input.end_id,
            top_level=calc_input.end_top_level or 0.0,
            invert_level=profile.end_invert_level,
        )
        velocity = manning_velocity(pipe.diameter_m, pipe.mannings_n, profile.gradient)
        context = CheckContext(
            mode=calc_input.mode,
            start_node=start_node,
            end_node=end_node,
            distance=distance,
            gradient=profile.gradient,
            fall=profile.fall,
            velocity=velocity,
            pipe=pipe,
            is_pumping_main=calc_input.is_pumping_main,
            standards=self.standards,
        )

        issues: list[ComplianceIssue] = []
        for check in self.checks:
            found = check.check(context)
            if found:
                log.debug(f"{type(check).__name__}: {', '.join(issue.code.value for issue in found)}")
            issues.extend(found)

        branch_drop = calc_input.branch_drop if isinstance(calc_input, UpstreamInput) else BranchDrop.NONE
        result = CalculationResult(
            mode=calc_input.mode,
            start_node=start_node,
            end_node=end_node,
            distance=distance,
            gradient=profile.gradient,
            fall=profile.fall,
            velocity=velocity,
            issues=tuple(issues),
            pipe=pipe,
            is_pumping_main=calc_input.is_pumping_main,
            branch_drop=branch_drop,
        )
        log.info(
            f"IC {start_node.id} -> IC {end_node.id} ({pipe.id}, 1:{abs(result.gradient):.0f}): "
            f"{'compliant' if result.is_compliant else f'{len(issues)} issue(s)'}"
        )
        return result


_DEFAULT_EVALUATOR = ComplianceEvaluator()


def evaluate(calc_input: CalculationInput, standards: CodeOfPractice | None = None) -> CalculationResult | None:
    """Evaluate a pipe run with the full check battery.

    See ``ComplianceEvaluator.evaluate``.
    """
    if standards is None:
        return _DEFAULT_EVALUATOR.evaluate(calc_input)
    return ComplianceEvaluator(standards=standards).evaluate(calc_input)
