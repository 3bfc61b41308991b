from .checks import (
    DEFAULT_CHECKS,
    CheckContext,
    DropStructureCheck,
    GravityFlowCheck,
    IComplianceCheck,
    MaxGradientCheck,
    MaxLengthCheck,
    MinDepthCheck,
    MinGradientCheck,
    VelocityCheck,
)
from .evaluator import ComplianceEvaluator, ResolvedProfile, evaluate, resolve_profile
from .hydraulics import manning_velocity

__all__ = [
    "DEFAULT_CHECKS",
    "CheckContext",
    "IComplianceCheck",
    "MaxLengthCheck",
    "MinGradientCheck",
    "MaxGradientCheck",
    "GravityFlowCheck",
    "MinDepthCheck",
    "VelocityCheck",
    "DropStructureCheck",
    "ComplianceEvaluator",
    "ResolvedProfile",
    "evaluate",
    "resolve_profile",
    "manning_velocity",
]
