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

import math
import numpy
from numba import njit

from stencil_cg.exceptions import AllocationError
from stencil_cg.kernels_cpu import spmv_cpu


@njit
def create_solution(xsol):
	for i in range(xsol.shape[0]):
		xsol[i] = math.sin(i*0.1) + math.cos(i*0.01)
#END create_solution()


# ---------------------------------------------------------------------
# the reference solution is analytic, the right-hand side is A.xsol
# ---------------------------------------------------------------------
def generate(matrix):
	vec_size = matrix.vec_size
	try:
		xsol = numpy.zeros(vec_size, dtype=numpy.float64)
		rhs = numpy.zeros(vec_size, dtype=numpy.float64)
	except MemoryError as exc:
		raise AllocationError("cannot allocate the solution and rhs vectors",
			name="rhs", nbytes=2 * vec_size * 8) from exc

	create_solution(xsol)
	spmv_cpu(0, vec_size, matrix.values, matrix.columns, xsol, rhs)
	return xsol, rhs
#END generate()


@njit
def error_norm_cpu(offset, nsize, x, xsol):
	norm2 = 0.0
	for i in range(offset, offset + nsize):
		norm2 += (x[i] - xsol[i]) * (x[i] - xsol[i])
	return math.sqrt(norm2)
#END error_norm_cpu()


def error_norm(x, xsol, rng):
	return float(error_norm_cpu(rng.offset, rng.length, x, xsol))
