import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .catalog import DEFAULT_PIPE_ID, GRAVITY_PIPES, PUMPING_PIPES, PipeCatalog
from .models import PipeSpec, is_float
from .standards import DEFAULT_STANDARDS, CodeOfPractice

log = logging.getLogger(__name__)


STANDARD_KEYS = {
    "MaxLength": "max_length",
    "MaxGradient": "max_gradient",
    "MinDepth": "min_depth",
    "GravityMinVelocity": "gravity_min_velocity",
    "PumpingMinVelocity": "pumping_min_velocity",
    "MaxVelocity": "max_velocity",
    "BackdropMinFall": "backdrop_min_fall",
    "VortexMinFall": "vortex_min_fall",
}

SECTIONS = ("Standards", "Pipes", "PumpingPipes", "Defaults")


class ConfigurationError(ValueError):
    """Raised when a configuration file contains invalid values."""


@dataclass(frozen=True)
class Defaults:
    pipe_id: str = DEFAULT_PIPE_ID
    start_id: str = "1"
    end_id: str = "2"


def sample_config() -> dict[str, Any]:
    """Get a sample configuration with the built-in values."""
    return {
        "Standards": {key: getattr(DEFAULT_STANDARDS, name) for key, name in STANDARD_KEYS.items()},
        "Pipes": [
            {
                "Id": "250-upvc",
                "Label": "250mm UPVC",
                "Material": "UPVC",
                "Diameter": 250,
                "ManningsN": 0.011,
                "MinGradient": 190,
            }
        ],
        "PumpingPipes": [],
        "Defaults": {"PipeId": DEFAULT_PIPE_ID, "StartId": "1", "EndId": "2"},
    }


class ConfigurationHandler:
    """Loads code of practice thresholds and catalog extensions from JSON.

    Without a loaded file the built-in standards and pipe tables apply.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration handler.

        Parameters
        ----------
        config_path : Path | None
            Path to JSON configuration file, built-in values only if None
        """
        self.config_path = config_path
        self.standards = DEFAULT_STANDARDS
        self.catalog = PipeCatalog()
        self.defaults = Defaults()

    def _create_standards(self, values: dict[str, Any]) -> CodeOfPractice:
        overrides = {}
        for key, value in values.items():
            name = STANDARD_KEYS.get(key)
            if name is None:
                log.warning(f"Unknown standard '{key}' in {self.config_path}, ignored")
                continue
            if isinstance(value, bool) or not is_float(value):
                raise ConfigurationError(f"Standard '{key}' must be a number, got {value!r}")
            overrides[name] = float(value)
        try:
            return replace(DEFAULT_STANDARDS, **overrides)
        except ValueError as e:
            raise ConfigurationError(f"Invalid standards in {self.config_path}: {e}") from e

    def _create_pipe(self, pipe_data: dict[str, Any]) -> PipeSpec:
        try:
            diameter = int(pipe_data["Diameter"])
            material = str(pipe_data["Material"])
            return PipeSpec(
                id=str(pipe_data.get("Id", f"{diameter}-{material.lower()}")),
                label=str(pipe_data.get("Label", f"{diameter}mm {material}")),
                material=material,
                diameter_mm=diameter,
                mannings_n=float(pipe_data["ManningsN"]),
                min_gradient=int(pipe_data["MinGradient"]),
            )
        except KeyError as e:
            raise ConfigurationError(f"Pipe definition is missing {e}: {pipe_data}") from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid pipe definition {pipe_data}: {e}") from e

    def _create_pipes(self, pipes_data: list[dict[str, Any]]) -> list[PipeSpec]:
        if not isinstance(pipes_data, list):
            raise ConfigurationError(f"Pipe definitions must be a list, got {type(pipes_data).__name__}")
        return [self._create_pipe(pipe_data) for pipe_data in pipes_data]

    def _create_catalog(self, config_data: dict[str, Any]) -> PipeCatalog:
        gravity = self._create_pipes(config_data.get("Pipes", []))
        pumping = self._create_pipes(config_data.get("PumpingPipes", []))
        for pipe in gravity:
            if pipe.is_pumping_only:
                raise ConfigurationError(
                    f"Pipe {pipe.id} is below {PipeSpec.MIN_GRAVITY_DIAMETER}mm, add it to 'PumpingPipes'"
                )
        try:
            return PipeCatalog(GRAVITY_PIPES + tuple(gravity), PUMPING_PIPES + tuple(pumping))
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def _create_defaults(self, values: dict[str, Any]) -> Defaults:
        return Defaults(
            pipe_id=str(values.get("PipeId", DEFAULT_PIPE_ID)),
            start_id=str(values.get("StartId", "1")),
            end_id=str(values.get("EndId", "2")),
        )

    def load_config(self) -> None:
        """Load standards, pipes and defaults from the JSON file.

        Expected JSON format:
        {
            "Standards": {"MaxLength": 50, "GravityMinVelocity": 0.9},
            "Pipes": [{"Id": "250-upvc", "Material": "UPVC", "Diameter": 250,
                       "ManningsN": 0.011, "MinGradient": 190}],
            "PumpingPipes": [],
            "Defaults": {"PipeId": "200-vcp", "StartId": "1", "EndId": "2"}
        }

        Raises
        ------
        FileNotFoundError
            If configuration file does not exist
        json.JSONDecodeError
            If configuration file is not valid JSON
        ConfigurationError
            If a value is invalid
        """
        if self.config_path is None:
            return
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(f"Invalid JSON in configuration file: {e}", e.doc, e.pos) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration root must be an object: {self.config_path}")
        for section in config_data:
            if section not in SECTIONS:
                log.warning(f"Unknown section '{section}' in {self.config_path}, ignored")

        self.standards = self._create_standards(config_data.get("Standards", {}))
        self.catalog = self._create_catalog(config_data)
        self.defaults = self._create_defaults(config_data.get("Defaults", {}))
        log.info(f"Loaded configuration {self.config_path}: {len(self.catalog.all_pipes())} pipes")
