"""
pytest configuration and shared fixtures.
"""

import numpy as np
import pytest

from stencil_cg.offload import HostMemoryManager
from stencil_cg.kernels import LinearAlgebraKernels
from stencil_cg.problem import generate
from stencil_cg.stencil import assemble


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture(scope="session")
def matrix16():
    """Stencil matrix of the 16 x 16 benchmark grid (vec_size 256)."""
    return assemble(16)


@pytest.fixture(scope="session")
def problem16(matrix16):
    """(x_sol, rhs) generated for matrix16."""
    return generate(matrix16)


@pytest.fixture
def memory():
    """Host memory manager with residency checks enforced."""
    return HostMemoryManager()


@pytest.fixture
def kernels(memory):
    return LinearAlgebraKernels(memory, profiling=False)
