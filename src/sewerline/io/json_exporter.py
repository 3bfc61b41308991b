"""JSON export of evaluated pipe runs."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..models import CalculationResult, Node, PipeSpec

log = logging.getLogger(__name__)


def _export_node(node: Node) -> dict[str, Any]:
    return {
        "id": node.id,
        "top_level": node.top_level,
        "invert_level": node.invert_level,
        "depth": node.depth,
    }


def _export_pipe(pipe: PipeSpec) -> dict[str, Any]:
    return {
        "id": pipe.id,
        "label": pipe.label,
        "material": pipe.material,
        "diameter_mm": pipe.diameter_mm,
        "mannings_n": pipe.mannings_n,
        "min_gradient": pipe.min_gradient,
    }


def export_result(result: CalculationResult) -> dict[str, Any]:
    """Convert a result to a JSON compatible dictionary.

    ``start_node`` holds the evaluated levels the checks ran on,
    ``display_start_node`` the upstream chamber with the branch drop applied.
    """
    return {
        "mode": result.mode.value,
        "pipe": _export_pipe(result.pipe),
        "is_pumping_main": result.is_pumping_main,
        "start_node": _export_node(result.start_node),
        "branch_drop": result.branch_drop.value,
        "display_start_node": _export_node(result.display_start_node),
        "end_node": _export_node(result.end_node),
        "distance": result.distance,
        "gradient": result.gradient,
        "gradient_percent": result.gradient_percent,
        "fall": result.fall,
        "velocity": result.velocity,
        "is_compliant": result.is_compliant,
        "issues": [{"code": issue.code.value, "message": issue.message} for issue in result.issues],
    }


class JsonExporter:
    """Exports evaluated pipe runs to a JSON file."""

    def __init__(self, output_path: Path) -> None:
        """Initialize JSON exporter with output file path.

        Parameters
        ----------
        output_path : Path
            Path where the JSON file will be saved
        """
        self.output_path = output_path
        self.exported_count = 0

    def export_results(self, results: Iterable[CalculationResult]) -> None:
        export_data = [export_result(result) for result in results]
        try:
            with open(self.output_path, "w", encoding="utf-8") as json_file:
                json.dump(export_data, json_file, indent=2, ensure_ascii=False)
        except OSError as e:
            raise OSError(f"Cannot write JSON file {self.output_path}: {e}") from e
        self.exported_count = len(export_data)
        log.info(f"Exported {self.exported_count} run(s) to {self.output_path}")
