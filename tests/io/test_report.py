"""Tests for the plain text layouts."""

from dataclasses import replace
from datetime import datetime

import pytest

from sewerline.io.report import (
    REPORT_TITLE,
    format_node_snippet,
    format_project_schedule,
    format_schedule_row,
    format_segment_report,
)
from sewerline.models import BranchDrop, CalculationMode, CalculationResult, ComplianceIssue, IssueCode, Node


@pytest.fixture
def result(vcp_200):
    """Return a compliant run between IC 1 and IC 2."""
    return CalculationResult(
        mode=CalculationMode.DOWNSTREAM,
        start_node=Node(id="1", top_level=19.50, invert_level=18.43),
        end_node=Node(id="2", top_level=19.45, invert_level=18.23),
        distance=20.0,
        gradient=100.0,
        fall=0.2,
        velocity=1.234,
        issues=(),
        pipe=vcp_200,
    )


class TestNodeSnippet:
    """Test the CAD snippet of a chamber."""

    def test_layout(self):
        """Test the four line layout and decimal places."""
        node = Node(id="1", top_level=19.5, invert_level=18.43)
        assert format_node_snippet(node) == "IC 1\nTL: 19.50\nIL: 18.430\nD: 1.070 m"


class TestProjectSchedule:
    """Test the numbered schedule of saved runs."""

    def test_schedule_row(self, result):
        """Test diameter, material, distance and gradient of a row."""
        assert format_schedule_row(result, "Run 1") == "Run 1: ø200 VCP 20.00m 1:100"

    def test_negative_gradient_row(self, result):
        """Test the gradient is shown without sign."""
        assert format_schedule_row(replace(result, gradient=-60.0), "Run 2").endswith("1:60")

    def test_schedule(self, result, upvc_300):
        """Test title, date and run numbering."""
        second = replace(result, pipe=upvc_300, distance=12.5, gradient=220.0)

        text = format_project_schedule([result, second], date=datetime(2024, 3, 5))

        assert text == (
            "PROJECT SCHEDULE - PIPE RUNS\n"
            f"{'=' * 28}\n"
            "Date: 2024-03-05\n"
            "\n"
            "Run 1: ø200 VCP 20.00m 1:100\n"
            "Run 2: ø300 UPVC 12.50m 1:220\n"
        )

    def test_empty_schedule(self):
        """Test a schedule without runs has only the header."""
        text = format_project_schedule([], date=datetime(2024, 3, 5))
        assert text.splitlines()[-1] == ""
        assert "Run" not in text


class TestSegmentReport:
    """Test the report block of a single run."""

    def test_compliant_report(self, result):
        """Test the report of a compliant run."""
        text = format_segment_report(result, date=datetime(2024, 3, 5, 14, 30))
        lines = text.splitlines()

        assert lines[0] == REPORT_TITLE
        assert "Date: 2024-03-05 14:30:00" in lines
        assert "PIPE SEGMENT: IC 1 to IC 2" in lines
        assert "Material:   VCP" in lines
        assert "Distance:   20.000 m" in lines
        assert "Gradient:   1 : 100" in lines
        assert "Velocity:   1.23 m/s" in lines
        assert "UPSTREAM MANHOLE (IC 1)" in lines
        assert "Invert Level: 18.430 m" in lines
        assert "DOWNSTREAM MANHOLE (IC 2)" in lines
        assert text.endswith("COMPLIANCE STATUS: PASSED\n\n")
        assert "Issues:" not in lines

    def test_chamber_rules(self, result):
        """Test the chamber headers are underlined with fixed widths."""
        lines = format_segment_report(result).splitlines()

        upstream = lines.index("UPSTREAM MANHOLE (IC 1)")
        downstream = lines.index("DOWNSTREAM MANHOLE (IC 2)")
        assert lines[upstream + 1] == "-" * 28
        assert lines[downstream + 1] == "-" * 30

    def test_failed_report_lists_issues(self, result):
        """Test the issues are listed in order after a FAILED status."""
        issues = (
            ComplianceIssue(IssueCode.MAX_LENGTH, "first"),
            ComplianceIssue(IssueCode.BACKDROP, "second"),
        )
        text = format_segment_report(replace(result, issues=issues))

        assert text.endswith("COMPLIANCE STATUS: FAILED\nIssues:\n- first\n- second\n")

    def test_pumping_main_marker(self, result, catalog):
        """Test pumping mains are marked next to the diameter."""
        pumping = replace(result, pipe=catalog.lookup_by_id("100-upvc", is_pumping_main=True), is_pumping_main=True)
        assert "Diameter:   100mm (Pumping Main)" in format_segment_report(pumping)

    def test_displayed_start_node(self, result):
        """Test a displayed start node replaces the evaluated one."""
        displayed = result.start_node.with_invert_level(18.53)
        text = format_segment_report(result, start_node=displayed)
        assert "Invert Level: 18.530 m" in text
        assert "Invert Level: 18.430 m" not in text

    def test_branch_drop_of_result(self, result):
        """Test the upstream chamber is shown with the branch drop by default."""
        text = format_segment_report(replace(result, branch_drop=BranchDrop.DROP_75))

        assert "Invert Level: 18.505 m" in text
        assert "Depth:        0.995 m" in text
