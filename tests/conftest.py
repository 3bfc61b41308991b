"""Pytest configuration and fixtures for sewerline tests."""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def catalog():
    """Return the built-in pipe catalog."""
    from sewerline.catalog import PipeCatalog

    return PipeCatalog()


@pytest.fixture
def vcp_200(catalog):
    """Return the 200mm VCP pipe (n=0.013, min 1:120)."""
    return catalog.lookup_by_id("200-vcp")


@pytest.fixture
def upvc_300(catalog):
    """Return the 300mm UPVC pipe (n=0.011, min 1:220)."""
    return catalog.lookup_by_id("300-upvc")


@pytest.fixture
def downstream_input(vcp_200):
    """Return the default downstream run between IC 1 and IC 2."""
    from sewerline.models import DownstreamInput

    return DownstreamInput(
        pipe=vcp_200,
        start_id="1",
        end_id="2",
        start_top_level=19.50,
        start_invert_level=18.43,
        end_top_level=19.45,
        distance=30.0,
        gradient=60.0,
    )


@pytest.fixture
def downstream_result(downstream_input):
    """Return the evaluated default downstream run."""
    from sewerline.analyze import evaluate

    return evaluate(downstream_input)
