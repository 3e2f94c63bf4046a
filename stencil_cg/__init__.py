# ------------------------------------------------------------------------------
#
# Stencil CG: conjugate gradient benchmark over a fixed-bandwidth 9-point
# stencil operator, with host (numba parallel) and CUDA offload execution
#
# ------------------------------------------------------------------------------
#
# Kernel layout, timers and report format follow the NPB Python versions:
# 	https://github.com/danidomenico/NPB-PYTHON
#
# ------------------------------------------------------------------------------

from stencil_cg.exceptions import (
	AllocationError,
	DeviceUnavailableError,
	NumericalBreakdownError,
	ResidencyViolationError,
	StencilCGError,
	ValidationError,
)
from stencil_cg.grid import Grid, SubRange
from stencil_cg.stencil import StencilMatrix, assemble
from stencil_cg.problem import error_norm, generate
from stencil_cg.offload import (
	CudaMemoryManager,
	HostMemoryManager,
	OffloadMemoryManager,
	OffloadRegion,
	create_memory_manager,
)
from stencil_cg.kernels import LinearAlgebraKernels
from stencil_cg.solver import CGResult, CGSolver, SolverState

__version__ = "1.0.0"
