"""DXF long-section drawing of an evaluated pipe run."""

import logging
from pathlib import Path

import ezdxf
import numpy as np
from ezdxf.document import Drawing
from ezdxf.enums import TextEntityAlignment
from ezdxf.layouts import Modelspace

from ..models import CalculationResult, Node
from .report import format_node_snippet, format_schedule_row

log = logging.getLogger(__name__)

LAYER_GROUND = "SEWER_GROUND"
LAYER_INVERT = "SEWER_INVERT"
LAYER_CHAMBER = "SEWER_CHAMBER"
LAYER_TEXT = "SEWER_TEXT"

LAYER_COLORS = {
    LAYER_GROUND: 3,  # green
    LAYER_INVERT: 4,  # cyan
    LAYER_CHAMBER: 7,  # white/black
    LAYER_TEXT: 2,  # yellow
}

DATUM_BUFFER = 0.15  # Share of the level range kept below the lowest level


class ProfileDxfWriter:
    """Draws the long section of a single pipe run.

    Chainage runs along the x axis in meters, levels along the y axis
    relative to a datum below the lowest level, scaled by the vertical
    exaggeration.
    """

    def __init__(self, output_path: Path, vertical_exaggeration: float = 10.0, text_height: float = 0.5) -> None:
        """Initialize the writer.

        Parameters
        ----------
        output_path : Path
            Path of the DXF file to write
        vertical_exaggeration : float
            Scale factor of the levels relative to the chainage
        text_height : float
            Height of the annotation texts in drawing units
        """
        if vertical_exaggeration <= 0:
            raise ValueError(f"Vertical exaggeration must be positive, got {vertical_exaggeration}")
        self.output_path = output_path
        self.vertical_exaggeration = vertical_exaggeration
        self.text_height = text_height
        self.datum = 0.0

    def _levels(self, result: CalculationResult) -> np.ndarray:
        levels = [result.start_node.invert_level, result.end_node.invert_level]
        levels.extend(node.top_level for node in (result.start_node, result.end_node) if node.has_top_level)
        return np.array(levels, dtype=float)

    def calculate_datum(self, result: CalculationResult) -> float:
        """Get the level drawn at y = 0."""
        levels = self._levels(result)
        level_range = float(np.ptp(levels))
        if np.isclose(level_range, 0.0):
            level_range = 1.0
        return float(levels.min() - DATUM_BUFFER * level_range)

    def _to_drawing(self, chainage: float, level: float) -> tuple[float, float]:
        return chainage, (level - self.datum) * self.vertical_exaggeration

    def _create_document(self) -> Drawing:
        doc = ezdxf.new("R2010")
        for name, color in LAYER_COLORS.items():
            doc.layers.add(name=name, color=color)
        return doc

    def _add_chamber(self, msp: Modelspace, node: Node, chainage: float, label_node: Node | None = None) -> None:
        bottom = self._to_drawing(chainage, node.invert_level)
        if node.has_top_level:
            top = self._to_drawing(chainage, node.top_level)
            msp.add_line(bottom, top, dxfattribs={"layer": LAYER_CHAMBER})
        else:
            top = bottom
        insert = (top[0], top[1] + self.text_height * 6)
        msp.add_mtext(
            format_node_snippet(label_node or node),
            dxfattribs={"layer": LAYER_TEXT, "char_height": self.text_height, "insert": insert},
        )

    def draw(self, msp: Modelspace, result: CalculationResult) -> None:
        """Draw the profile of a result into a modelspace.

        The upstream chamber is labelled with its branch drop, the invert
        line follows the evaluated levels.
        """
        self.datum = self.calculate_datum(result)
        start = result.start_node
        end = result.end_node

        msp.add_line(
            self._to_drawing(0.0, start.invert_level),
            self._to_drawing(result.distance, end.invert_level),
            dxfattribs={"layer": LAYER_INVERT},
        )
        if start.has_top_level and end.has_top_level:
            msp.add_line(
                self._to_drawing(0.0, start.top_level),
                self._to_drawing(result.distance, end.top_level),
                dxfattribs={"layer": LAYER_GROUND},
            )
        self._add_chamber(msp, start, 0.0, label_node=result.display_start_node)
        self._add_chamber(msp, end, result.distance)

        middle_level = (start.invert_level + end.invert_level) / 2
        label = msp.add_text(
            format_schedule_row(result, f"IC {start.id}-{end.id}"),
            dxfattribs={"layer": LAYER_TEXT, "height": self.text_height},
        )
        x, y = self._to_drawing(result.distance / 2, middle_level)
        label.set_placement((x, y - self.text_height * 2), align=TextEntityAlignment.TOP_CENTER)

    def write(self, result: CalculationResult) -> Path:
        """Write the long section of a result to the output file.

        Raises
        ------
        OSError
            If the file cannot be written
        """
        doc = self._create_document()
        self.draw(doc.modelspace(), result)
        try:
            doc.saveas(self.output_path)
        except OSError as e:
            raise OSError(f"Cannot write DXF file {self.output_path}: {e}") from e
        log.info(f"Long section written to {self.output_path}")
        return self.output_path
