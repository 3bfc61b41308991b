"""Pipe catalog with the gravity and pumping-main pipe tables.

Pumping-main mode adds the 100 mm pipes to the selectable set. Outside of
pumping-main mode those pipes are excluded from every lookup, plain gravity
drain-lines may not use pipes below 150 mm.
"""

import logging
from collections.abc import Iterable

from .models import PipeSpec

log = logging.getLogger(__name__)


GRAVITY_PIPES: tuple[PipeSpec, ...] = (
    PipeSpec("150-vcp", "150mm VCP", "VCP", 150, 0.013, 80),
    PipeSpec("150-di", "150mm Ductile Iron", "Ductile Iron", 150, 0.011, 100),
    PipeSpec("150-upvc", "150mm UPVC", "UPVC", 150, 0.011, 100),
    PipeSpec("200-vcp", "200mm VCP", "VCP", 200, 0.013, 120),
    PipeSpec("200-di", "200mm Ductile Iron", "Ductile Iron", 200, 0.011, 150),
    PipeSpec("200-upvc", "200mm UPVC", "UPVC", 200, 0.011, 150),
    PipeSpec("225-vcp", "225mm VCP", "VCP", 225, 0.013, 135),
    PipeSpec("225-di", "225mm Ductile Iron", "Ductile Iron", 225, 0.011, 170),
    PipeSpec("225-upvc", "225mm UPVC", "UPVC", 225, 0.011, 170),
    PipeSpec("300-conc", "300mm Concrete", "Concrete", 300, 0.013, 180),
    PipeSpec("300-di", "300mm Ductile Iron", "Ductile Iron", 300, 0.011, 220),
    PipeSpec("300-upvc", "300mm UPVC", "UPVC", 300, 0.011, 220),
)

PUMPING_PIPES: tuple[PipeSpec, ...] = (
    PipeSpec("100-vcp", "100mm VCP", "VCP", 100, 0.013, 60),
    PipeSpec("100-di", "100mm Ductile Iron", "Ductile Iron", 100, 0.011, 80),
    PipeSpec("100-upvc", "100mm UPVC", "UPVC", 100, 0.011, 80),
)

DEFAULT_PIPE_ID = "200-vcp"


class PipeCatalog:
    """Lookup and filtering of the selectable pipes.

    Every lookup that misses falls back to the first pipe of the effective
    catalog, which is the first gravity pipe.
    """

    def __init__(
        self,
        gravity_pipes: Iterable[PipeSpec] = GRAVITY_PIPES,
        pumping_pipes: Iterable[PipeSpec] = PUMPING_PIPES,
    ) -> None:
        """Initialize the catalog with its two pipe tables.

        Parameters
        ----------
        gravity_pipes : Iterable[PipeSpec]
            Pipes valid for gravity sewers and pumping mains
        pumping_pipes : Iterable[PipeSpec]
            Pipes only valid for pumping mains

        Raises
        ------
        ValueError
            If the gravity table is empty or ids are not unique
        """
        self.gravity_pipes = tuple(gravity_pipes)
        self.pumping_pipes = tuple(pumping_pipes)
        if len(self.gravity_pipes) == 0:
            raise ValueError("Pipe catalog needs at least one gravity pipe")
        ids = [pipe.id for pipe in self.all_pipes()]
        duplicates = sorted({pipe_id for pipe_id in ids if ids.count(pipe_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate pipe ids in catalog: {', '.join(duplicates)}")

    def all_pipes(self) -> tuple[PipeSpec, ...]:
        return self.gravity_pipes + self.pumping_pipes

    def effective_catalog(self, is_pumping_main: bool) -> tuple[PipeSpec, ...]:
        """Get the pipes selectable in the given mode."""
        if is_pumping_main:
            return self.all_pipes()
        return self.gravity_pipes

    def fallback(self, is_pumping_main: bool) -> PipeSpec:
        """Get the pipe used when a lookup misses."""
        return self.effective_catalog(is_pumping_main)[0]

    def find_by_id(self, pipe_id: str, is_pumping_main: bool = False) -> PipeSpec | None:
        for pipe in self.effective_catalog(is_pumping_main):
            if pipe.id == pipe_id:
                return pipe
        return None

    def lookup_by_id(self, pipe_id: str, is_pumping_main: bool = False) -> PipeSpec:
        """Get a pipe by id, falling back to the first catalog entry."""
        pipe = self.find_by_id(pipe_id, is_pumping_main)
        if pipe is not None:
            return pipe
        pipe = self.fallback(is_pumping_main)
        log.warning(f"Pipe '{pipe_id}' not available, falling back to '{pipe.id}'")
        return pipe

    def select(self, material: str, diameter_mm: int, is_pumping_main: bool = False) -> PipeSpec:
        """Get a pipe by material and diameter, falling back to the first catalog entry."""
        for pipe in self.effective_catalog(is_pumping_main):
            if pipe.material.lower() == material.lower() and pipe.diameter_mm == diameter_mm:
                return pipe
        pipe = self.fallback(is_pumping_main)
        log.warning(f"No {diameter_mm}mm {material} pipe available, falling back to '{pipe.id}'")
        return pipe

    def list_by_material(self, material: str, include_pumping: bool = False) -> list[PipeSpec]:
        """Get the pipes of a material sorted by diameter ascending."""
        pipes = [pipe for pipe in self.effective_catalog(include_pumping) if pipe.material.lower() == material.lower()]
        return sorted(pipes, key=lambda pipe: pipe.diameter_mm)

    def materials(self, is_pumping_main: bool = False) -> list[str]:
        materials = []
        for pipe in self.effective_catalog(is_pumping_main):
            if pipe.material in materials:
                continue
            materials.append(pipe.material)
        return materials

    def diameters(self, material: str, is_pumping_main: bool = False) -> list[int]:
        return [pipe.diameter_mm for pipe in self.list_by_material(material, is_pumping_main)]


DEFAULT_CATALOG = PipeCatalog()
