from .dxf_writer import ProfileDxfWriter
from .json_exporter import JsonExporter, export_result
from .report import (
    format_node_snippet,
    format_project_schedule,
    format_schedule_row,
    format_segment_report,
)

__all__ = [
    "ProfileDxfWriter",
    "JsonExporter",
    "export_result",
    "format_node_snippet",
    "format_project_schedule",
    "format_schedule_row",
    "format_segment_report",
]
