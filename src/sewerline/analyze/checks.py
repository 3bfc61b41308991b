"""Regulatory checks run against an evaluated pipe run.

Each check inspects the resolved run and reports zero or more issues. The
evaluator runs all checks in a fixed order and never stops early, so the
order of ``DEFAULT_CHECKS`` is the order of the reported issues.
"""

from dataclasses import dataclass
from typing import Protocol

from ..models import CalculationMode, ComplianceIssue, IssueCode, Node, PipeSpec
from ..standards import CodeOfPractice


@dataclass(frozen=True)
class CheckContext:
    """Resolved quantities of a run, as seen by the checks."""

    mode: CalculationMode
    start_node: Node
    end_node: Node
    distance: float
    gradient: float
    fall: float
    velocity: float
    pipe: PipeSpec
    is_pumping_main: bool
    standards: CodeOfPractice

    @property
    def abs_gradient(self) -> float:
        return abs(self.gradient)


class IComplianceCheck(Protocol):
    """Protocol for a single regulatory check."""

    def check(self, context: CheckContext) -> list[ComplianceIssue]:
        """Check the run and return the issues found.

        Parameters
        ----------
        context : CheckContext
            Resolved quantities of the run

        Returns
        -------
        list[ComplianceIssue]
            Issues found, empty if the run passes
        """
        ...


class MaxLengthCheck(IComplianceCheck):
    """Drain-line length between two chambers, independent of the mode."""

    def check(self, context: CheckContext) -> list[ComplianceIssue]:
        max_length = context.standards.max_length
        if context.distance <= max_length:
            return []
        message = f"Drain-line length {context.distance:.2f}m exceeds max {max_length:g}m."
        return [ComplianceIssue(IssueCode.MAX_LENGTH, message)]


class MinGradientCheck(IComplianceCheck):
    """Gradients flatter than the pipe minimum risk silting."""

    def check(self, context: CheckContext) -> list[ComplianceIssue]:
        if context.is_pumping_main:
            return []
        pipe = context.pipe
        if context.abs_gradient <= pipe.min_gradient:
            return []
        message = (
            f"Gradient 1:{context.abs_gradient:.0f} is flatter than min 1:{pipe.min_gradient} "
            f"for {pipe.label}. Risk of silting."
        )
        return [ComplianceIssue(IssueCode.MIN_GRADIENT, message)]


class MaxGradientCheck(IComplianceCheck):
    """Gradients steeper than the code maximum risk scouring."""

    def check(self, context: CheckContext) -> list[ComplianceIssue]:
        if context.is_pumping_main:
            return []
        max_gradient = context.standards.max_gradient
        if not 0 < context.abs_gradient < max_gradient:
            return []
        message = (
            f"Gradient 1:{context.abs_gradient:.0f} is steeper than max 1:{max_gradient:g}. Risk of scouring."
        )
        return [ComplianceIssue(IssueCode.MAX_GRADIENT, message)]


class GravityFlowCheck(IComplianceCheck):
    """Measured profiles must fall from start to end."""

    def check(self, context: CheckContext) -> list[ComplianceIssue]:
        if context.mode != CalculationMode.VERIFY or context.is_pumping_main:
            return []
        start_il = context.start_node.invert_level
        end_il = context.end_node.invert_level
        if start_il > end_il:
            return []
        message = f"Start IL {start_il:.3f} is lower than or equal to end IL {end_il:.3f}. No gravity flow."
        return [ComplianceIssue(IssueCode.NO_GRAVITY_FLOW, message)]


class MinDepthCheck(IComplianceCheck):
    """Minimum chamber depth, checked for each end with a supplied top level."""

    def check(self, context: CheckContext) -> list[ComplianceIssue]:
        issues = []
        ends = (
            ("Upstream", context.start_node, IssueCode.MIN_DEPTH_UPSTREAM),
            ("Downstream", context.end_node, IssueCode.MIN_DEPTH_DOWNSTREAM),
        )
        min_depth = context.standards.min_depth
        for name, node, code in ends:
            if not node.has_top_level or node.depth >= min_depth:
                continue
            message = f"{name} depth {node.depth:.2f}m is less than {min_depth * 1000:.0f}mm min."
            issues.append(ComplianceIssue(code, message))
        return issues


class VelocityCheck(IComplianceCheck):
    """Self-cleansing and scouring velocity limits."""

    def check(self, context: CheckContext) -> list[ComplianceIssue]:
        issues = []
        velocity = context.velocity
        min_velocity = context.standards.min_velocity(context.is_pumping_main)
        max_velocity = context.standards.max_velocity
        if 0 < velocity < min_velocity:
            message = f"Velocity {velocity:.2f} m/s is below {min_velocity:g} m/s. Self-cleansing fail."
            issues.append(ComplianceIssue(IssueCode.LOW_VELOCITY, message))
        if velocity > max_velocity:
            message = f"Velocity {velocity:.2f} m/s exceeds {max_velocity:g} m/s. Scouring risk."
            issues.append(ComplianceIssue(IssueCode.HIGH_VELOCITY, message))
        return issues


class DropStructureCheck(IComplianceCheck):
    """Falls above the thresholds need an energy dissipating structure."""

    def check(self, context: CheckContext) -> list[ComplianceIssue]:
        if context.is_pumping_main:
            return []
        fall = context.fall
        standards = context.standards
        if fall >= standards.vortex_min_fall:
            message = (
                f"Hydraulic drop {fall:.2f}m ≥ {standards.vortex_min_fall:g}m. Vortex drop structure required."
            )
            return [ComplianceIssue(IssueCode.VORTEX_DROP, message)]
        if fall >= standards.backdrop_min_fall:
            message = (
                f"Hydraulic drop {fall:.2f}m ≥ {standards.backdrop_min_fall:g}m. "
                "Backdrop or tumbling bay required."
            )
            return [ComplianceIssue(IssueCode.BACKDROP, message)]
        return []


DEFAULT_CHECKS: tuple[IComplianceCheck, ...] = (
    MaxLengthCheck(),
    MinGradientCheck(),
    MaxGradientCheck(),
    GravityFlowCheck(),
    MinDepthCheck(),
    VelocityCheck(),
    DropStructureCheck(),
)
