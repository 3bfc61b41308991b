"""Plain text layouts of calculation results.

The layouts are pasted into CAD drawings and project documents, so the
field order and the decimal places are fixed.
"""

from collections.abc import Iterable
from datetime import datetime

from ..models import CalculationResult, Node

REPORT_TITLE = "SEWERAGE LINE DATA (PUB COMPLIANCE CHECK)"
SCHEDULE_TITLE = "PROJECT SCHEDULE - PIPE RUNS"
UPSTREAM_RULE_WIDTH = 28
DOWNSTREAM_RULE_WIDTH = 30


def format_node_snippet(node: Node) -> str:
    """Format a chamber for pasting into a CAD drawing.

    Parameters
    ----------
    node : Node
        Chamber to format

    Returns
    -------
    str
        Four line block with the chamber id, top level, invert level and depth
    """
    return f"IC {node.id}\nTL: {node.top_level:.2f}\nIL: {node.invert_level:.3f}\nD: {node.depth:.3f} m"


def format_schedule_row(result: CalculationResult, label: str) -> str:
    pipe = result.pipe
    return f"{label}: ø{pipe.diameter_mm} {pipe.material} {result.distance:.2f}m 1:{abs(result.gradient):.0f}"


def format_project_schedule(results: Iterable[CalculationResult], date: datetime | None = None) -> str:
    """Format saved runs as a numbered project schedule.

    Parameters
    ----------
    results : Iterable[CalculationResult]
        Results in saved order, numbered from 1
    date : datetime | None
        Date of the schedule, today if None

    Returns
    -------
    str
        Schedule text with a trailing newline
    """
    date = date or datetime.now()
    rows = [format_schedule_row(result, f"Run {index}") for index, result in enumerate(results, start=1)]
    lines = [
        SCHEDULE_TITLE,
        "=" * len(SCHEDULE_TITLE),
        f"Date: {date:%Y-%m-%d}",
        "",
        *rows,
    ]
    return "\n".join(lines) + "\n"


def _format_chamber(title: str, node: Node, rule_width: int) -> list[str]:
    return [
        f"{title} MANHOLE (IC {node.id})",
        "-" * rule_width,
        f"Top Level:    {node.top_level:.3f} m",
        f"Invert Level: {node.invert_level:.3f} m",
        f"Depth:        {node.depth:.3f} m",
    ]


def format_segment_report(
    result: CalculationResult,
    start_node: Node | None = None,
    date: datetime | None = None,
) -> str:
    """Format a single pipe run as report block.

    Parameters
    ----------
    result : CalculationResult
        Evaluated run
    start_node : Node | None
        Upstream chamber as displayed, the result's start node with its
        branch drop if None
    date : datetime | None
        Timestamp of the report, now if None

    Returns
    -------
    str
        Report text with a trailing newline
    """
    date = date or datetime.now()
    start_node = start_node or result.display_start_node
    end_node = result.end_node
    pipe = result.pipe
    pumping = "(Pumping Main)" if result.is_pumping_main else ""

    lines = [
        REPORT_TITLE,
        "=" * len(REPORT_TITLE),
        f"Date: {date:%Y-%m-%d %H:%M:%S}",
        "",
        f"PIPE SEGMENT: IC {start_node.id} to IC {end_node.id}",
        "-" * len(REPORT_TITLE),
        f"Material:   {pipe.material}",
        f"Diameter:   {pipe.diameter_mm}mm {pumping}",
        f"Distance:   {result.distance:.3f} m",
        f"Gradient:   1 : {abs(result.gradient):.0f}",
        f"Velocity:   {result.velocity:.2f} m/s",
        "",
        *_format_chamber("UPSTREAM", start_node, UPSTREAM_RULE_WIDTH),
        "",
        *_format_chamber("DOWNSTREAM", end_node, DOWNSTREAM_RULE_WIDTH),
        "",
        f"COMPLIANCE STATUS: {'PASSED' if result.is_compliant else 'FAILED'}",
    ]
    if result.is_compliant:
        lines.append("")
    else:
        lines.append("Issues:")
        lines.extend(f"- {message}" for message in result.compliance_issues)
    return "\n".join(lines) + "\n"
