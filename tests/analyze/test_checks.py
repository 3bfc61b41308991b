"""Tests for the single regulatory checks."""

import pytest

from sewerline.analyze.checks import (
    DEFAULT_CHECKS,
    CheckContext,
    DropStructureCheck,
    GravityFlowCheck,
    MaxGradientCheck,
    MaxLengthCheck,
    MinDepthCheck,
    MinGradientCheck,
    VelocityCheck,
)
from sewerline.models import CalculationMode, IssueCode, Node
from sewerline.standards import DEFAULT_STANDARDS, CodeOfPractice


@pytest.fixture
def make_context(vcp_200):
    """Return a factory for check contexts of a compliant default run."""

    def _make_context(**overrides):
        values = {
            "mode": CalculationMode.DOWNSTREAM,
            "start_node": Node(id="1", top_level=19.50, invert_level=18.43),
            "end_node": Node(id="2", top_level=19.45, invert_level=18.23),
            "distance": 20.0,
            "gradient": 100.0,
            "fall": 0.2,
            "velocity": 1.2,
            "pipe": vcp_200,
            "is_pumping_main": False,
            "standards": DEFAULT_STANDARDS,
        }
        values.update(overrides)
        return CheckContext(**values)

    return _make_context


def codes(issues):
    return [issue.code for issue in issues]


class TestMaxLengthCheck:
    """Test the drain-line length limit."""

    def test_boundary_is_exclusive(self, make_context):
        """Test 50m passes and 51m fails."""
        check = MaxLengthCheck()
        assert check.check(make_context(distance=50.0)) == []
        issues = check.check(make_context(distance=51.0))
        assert codes(issues) == [IssueCode.MAX_LENGTH]
        assert "51.00m" in issues[0].message

    def test_configured_limit(self, make_context):
        """Test the limit comes from the code of practice."""
        standards = CodeOfPractice(max_length=60.0)
        assert MaxLengthCheck().check(make_context(distance=55.0, standards=standards)) == []


class TestGradientChecks:
    """Test the silting and scouring gradient limits."""

    def test_flatter_than_pipe_minimum(self, make_context):
        """Test 1:121 is too flat for a 200mm VCP (min 1:120)."""
        assert MinGradientCheck().check(make_context(gradient=120.0)) == []
        issues = MinGradientCheck().check(make_context(gradient=121.0))
        assert codes(issues) == [IssueCode.MIN_GRADIENT]
        assert "1:121" in issues[0].message
        assert "1:120" in issues[0].message

    def test_negative_gradient_uses_magnitude(self, make_context):
        """Test the sign of the gradient is ignored."""
        assert codes(MinGradientCheck().check(make_context(gradient=-200.0))) == [IssueCode.MIN_GRADIENT]

    def test_steeper_than_maximum(self, make_context):
        """Test gradients below 1:20 are too steep."""
        assert MaxGradientCheck().check(make_context(gradient=20.0)) == []
        assert codes(MaxGradientCheck().check(make_context(gradient=19.0))) == [IssueCode.MAX_GRADIENT]

    def test_zero_gradient_is_not_steep(self, make_context):
        """Test a level run is not reported as too steep."""
        assert MaxGradientCheck().check(make_context(gradient=0.0)) == []

    def test_pumping_main_skips_gradient_checks(self, make_context):
        """Test pumping mains are exempt from the gradient limits."""
        context = make_context(is_pumping_main=True, gradient=500.0)
        assert MinGradientCheck().check(context) == []
        context = make_context(is_pumping_main=True, gradient=5.0)
        assert MaxGradientCheck().check(context) == []


class TestGravityFlowCheck:
    """Test the flow direction of measured profiles."""

    def test_only_in_verify_mode(self, make_context):
        """Test derived profiles are not checked."""
        reversed_end = Node(id="2", top_level=19.45, invert_level=18.60)
        context = make_context(mode=CalculationMode.DOWNSTREAM, end_node=reversed_end)
        assert GravityFlowCheck().check(context) == []

    @pytest.mark.parametrize("end_invert_level", [18.43, 18.60])
    def test_flat_or_reversed_profile(self, make_context, end_invert_level):
        """Test level and uphill profiles have no gravity flow."""
        end_node = Node(id="2", top_level=19.45, invert_level=end_invert_level)
        context = make_context(mode=CalculationMode.VERIFY, end_node=end_node)
        assert codes(GravityFlowCheck().check(context)) == [IssueCode.NO_GRAVITY_FLOW]

    def test_falling_profile(self, make_context):
        """Test a falling profile passes."""
        assert GravityFlowCheck().check(make_context(mode=CalculationMode.VERIFY)) == []

    def test_pumping_main_skips_check(self, make_context):
        """Test pumping mains may run uphill."""
        end_node = Node(id="2", top_level=19.45, invert_level=18.60)
        context = make_context(mode=CalculationMode.VERIFY, end_node=end_node, is_pumping_main=True)
        assert GravityFlowCheck().check(context) == []


class TestMinDepthCheck:
    """Test the minimum chamber depth."""

    def test_both_ends_too_shallow(self, make_context):
        """Test one issue per shallow chamber, upstream first."""
        context = make_context(
            start_node=Node(id="1", top_level=19.00, invert_level=18.50),
            end_node=Node(id="2", top_level=18.90, invert_level=18.30),
        )
        issues = MinDepthCheck().check(context)

        assert codes(issues) == [IssueCode.MIN_DEPTH_UPSTREAM, IssueCode.MIN_DEPTH_DOWNSTREAM]
        assert "0.50m" in issues[0].message
        assert "0.60m" in issues[1].message

    def test_exact_minimum_passes(self, make_context):
        """Test a depth of exactly 0.75m passes."""
        context = make_context(start_node=Node(id="1", top_level=19.25, invert_level=18.50))
        assert MinDepthCheck().check(context) == []

    def test_missing_top_level_is_skipped(self, make_context):
        """Test chambers without top level are not checked."""
        context = make_context(start_node=Node(id="1", top_level=0.0, invert_level=18.43))
        assert MinDepthCheck().check(context) == []


class TestVelocityCheck:
    """Test the velocity limits."""

    def test_gravity_limits(self, make_context):
        """Test self-cleansing and scouring limits of gravity sewers."""
        assert VelocityCheck().check(make_context(velocity=0.9)) == []
        assert VelocityCheck().check(make_context(velocity=2.4)) == []
        assert codes(VelocityCheck().check(make_context(velocity=0.85))) == [IssueCode.LOW_VELOCITY]
        assert codes(VelocityCheck().check(make_context(velocity=2.5))) == [IssueCode.HIGH_VELOCITY]

    def test_pumping_main_minimum(self, make_context):
        """Test pumping mains use their own minimum velocity."""
        issues = VelocityCheck().check(make_context(velocity=0.95, is_pumping_main=True))
        assert codes(issues) == [IssueCode.LOW_VELOCITY]
        assert "1 m/s" in issues[0].message
        assert VelocityCheck().check(make_context(velocity=0.95)) == []

    def test_pumping_main_maximum_is_shared(self, make_context):
        """Test the scouring limit also applies to pumping mains."""
        context = make_context(velocity=2.5, is_pumping_main=True)
        assert codes(VelocityCheck().check(context)) == [IssueCode.HIGH_VELOCITY]

    def test_zero_velocity_is_not_reported(self, make_context):
        """Test a level run has no velocity issue."""
        assert VelocityCheck().check(make_context(velocity=0.0)) == []


class TestDropStructureCheck:
    """Test the drop structure thresholds."""

    def test_below_backdrop_threshold(self, make_context):
        """Test falls below 0.5m need no structure."""
        assert DropStructureCheck().check(make_context(fall=0.49)) == []

    def test_backdrop_boundary_is_inclusive(self, make_context):
        """Test a fall of exactly 0.5m needs a backdrop."""
        assert codes(DropStructureCheck().check(make_context(fall=0.5))) == [IssueCode.BACKDROP]

    def test_vortex_boundary_is_inclusive(self, make_context):
        """Test a fall of exactly 6.0m needs a vortex drop only."""
        issues = DropStructureCheck().check(make_context(fall=6.0))
        assert codes(issues) == [IssueCode.VORTEX_DROP]
        assert "6.00m" in issues[0].message

    def test_negative_fall(self, make_context):
        """Test uphill runs need no drop structure."""
        assert DropStructureCheck().check(make_context(fall=-7.0)) == []

    def test_pumping_main_skips_check(self, make_context):
        """Test pumping mains need no drop structure."""
        assert DropStructureCheck().check(make_context(fall=7.0, is_pumping_main=True)) == []


def test_default_check_order():
    """Test the battery runs in the regulatory order."""
    assert [type(check) for check in DEFAULT_CHECKS] == [
        MaxLengthCheck,
        MinGradientCheck,
        MaxGradientCheck,
        GravityFlowCheck,
        MinDepthCheck,
        VelocityCheck,
        DropStructureCheck,
    ]
