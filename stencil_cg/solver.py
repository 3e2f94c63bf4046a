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

import enum
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy

from stencil_cg.common import cgparams
from stencil_cg.exceptions import AllocationError, NumericalBreakdownError, ValidationError
from stencil_cg.kernels import LinearAlgebraKernels, make_matrix_resident
from stencil_cg.offload import HostMemoryManager

# smallest normal double and machine epsilon, for the underflow test
TINY = numpy.finfo(numpy.float64).tiny
EPSILON = numpy.finfo(numpy.float64).eps

# why the iteration stopped
STOP_BUDGET = "budget"
STOP_TOLERANCE = "tolerance"
STOP_EXACT = "exact"
STOP_UNDERFLOW = "underflow"


class SolverState(enum.Enum):
	INIT = "init"
	RESIDUAL_SETUP = "residual_setup"
	ITERATING = "iterating"
	DONE = "done"


@dataclass
class CGResult:
	x: numpy.ndarray
	iterations: int
	residual: float
	history: List[Tuple[int, float]] = field(default_factory=list)
	converged: bool = False
	offset: int = 0
	length: int = 0
	stop_reason: str = STOP_BUDGET


class CGSolver:
	"""
	Conjugate gradient over a StencilMatrix, on the target of `memory`.

	The default is the fixed-budget benchmark: `iterations` steps, no
	convergence test. Passing `tolerance` adds an early exit once the
	squared residual norm drops below it. Every `report_every`-th step
	the pair (iteration, squared residual) is appended to the result
	history and handed to `monitor`.

	Once the residual has vanished below what float64 resolves, p.Ap may
	underflow to zero. That ends the solve as converged
	(stop_reason "underflow") instead of raising a breakdown.
	"""

	def __init__(self, matrix, memory=None, kernels=None,
			iterations: int = cgparams.ITERATIONS,
			report_every: int = cgparams.REPORT_EVERY,
			tolerance: Optional[float] = None,
			monitor: Optional[Callable[[int, float], None]] = None,
			sync_iterates: bool = False):
		if iterations < 0:
			raise ValidationError("iterations must be non-negative, got %d" % iterations)
		if report_every < 1:
			raise ValidationError("report_every must be positive, got %d" % report_every)
		if tolerance is not None and tolerance < 0.0:
			raise ValidationError("tolerance must be non-negative, got %r" % tolerance)
		if memory is None:
			memory = kernels.memory if kernels is not None else HostMemoryManager()
		if kernels is None:
			kernels = LinearAlgebraKernels(memory)
		elif kernels.memory is not memory:
			raise ValidationError("kernels and solver must share one memory manager")

		self.matrix = matrix
		self.memory = memory
		self.kernels = kernels
		self.iterations = iterations
		self.report_every = report_every
		self.tolerance = tolerance
		self.monitor = monitor
		self.sync_iterates = sync_iterates
		self.state = SolverState.INIT

	def solve(self, rhs, x0=None, subrange=None) -> CGResult:
		grid = self.matrix.grid
		rng = grid.full_range() if subrange is None else subrange
		if rng.vec_size != grid.vec_size:
			raise ValidationError("range belongs to a grid of %d points, matrix has %d"
				% (rng.vec_size, grid.vec_size))
		self._check_vector("rhs", rhs)
		if x0 is not None:
			self._check_vector("x0", x0)

		# -------------------------------------------------------------
		# INIT: solver-owned buffers, residency for the active range
		# -------------------------------------------------------------
		self.state = SolverState.INIT
		x, r, p, ax = self._allocate(x0)
		span_offset, span_length = self.matrix.column_span(rng)
		memory = self.memory
		# only regions this solve added are released, residency the caller
		# set up beforehand survives
		entered = []
		try:
			make_matrix_resident(memory, self.matrix, rng, entered)
			for name, array, offset, length in (
					("rhs", rhs, rng.offset, rng.length),
					("x", x, span_offset, span_length),
					("r", r, rng.offset, rng.length),
					("p", p, span_offset, span_length),
					("Ax", ax, rng.offset, rng.length)):
				gaps = memory.missing_regions(name, offset, length, array)
				memory.make_resident(name, array, offset, length)
				entered.extend(gaps)

			result = self._iterate(rng)
			memory.sync_to_host("x", rng.offset, rng.length)
			result.x = x
			return result
		finally:
			# -------------------------------------------------------------
			# DONE: what INIT added is released on every exit path
			# -------------------------------------------------------------
			for region in entered:
				memory.release(region.name, region.offset, region.length)
			self.state = SolverState.DONE
	#END solve()

	def _iterate(self, rng):
		kernels = self.kernels
		matrix = self.matrix

		# -------------------------------------------------------------
		# RESIDUAL_SETUP: r = rhs - A.x, p = r
		# -------------------------------------------------------------
		self.state = SolverState.RESIDUAL_SETUP
		kernels.copy("rhs", "r", rng)
		kernels.spmv(matrix, "x", "Ax", rng)
		kernels.axpy(-1.0, "Ax", "r", rng)
		kernels.copy("r", "p", rng)
		self.memory.sync_to_host("r", rng.offset, rng.length)
		rho0 = kernels.dot("r", "r", rng)
		if not math.isfinite(rho0):
			raise NumericalBreakdownError(0, "rho0", rho0)

		# -------------------------------------------------------------
		# ITERATING
		# -------------------------------------------------------------
		self.state = SolverState.ITERATING
		history = []
		rho_start = rho0
		rho1 = rho0
		converged = False
		stop_reason = STOP_BUDGET
		k = 0
		while k < self.iterations:
			# the residual vanished: exactly for the initial guess, by
			# underflow once iterating
			if rho0 == 0.0:
				converged = True
				stop_reason = STOP_EXACT if k == 0 else STOP_UNDERFLOW
				break

			# q = A.p
			kernels.spmv(matrix, "p", "Ax", rng)

			# alpha = rho / (p.q)
			denom = kernels.dot("p", "Ax", rng)
			if not math.isfinite(denom):
				raise NumericalBreakdownError(k, "denom", denom)
			if abs(denom) < TINY:
				# p.q underflowed after the residual fell below float64 resolution
				if _negligible(rho0, rho_start):
					converged = True
					stop_reason = STOP_UNDERFLOW
					break
				if denom == 0.0:
					raise NumericalBreakdownError(k, "denom", denom)
			alpha = rho0 / denom
			if not math.isfinite(alpha):
				raise NumericalBreakdownError(k, "alpha", alpha)

			# x = x + alpha*p and r = r - alpha*q
			kernels.axpy(alpha, "p", "x", rng)
			kernels.axpy(-alpha, "Ax", "r", rng)
			if self.sync_iterates:
				self.memory.sync_to_host("x", rng.offset, rng.length)
				self.memory.sync_to_host("r", rng.offset, rng.length)

			rho1 = kernels.dot("r", "r", rng)
			if not math.isfinite(rho1):
				raise NumericalBreakdownError(k, "rho1", rho1)

			if k % self.report_every == 0:
				history.append((k, rho1))
				if self.monitor is not None:
					self.monitor(k, rho1)

			k += 1
			if self.tolerance is not None and rho1 < self.tolerance:
				converged = True
				stop_reason = STOP_TOLERANCE
				break

			# p = r + beta*p
			beta = rho1 / rho0
			kernels.xpby("r", beta, "p", rng)
			rho0 = rho1

		return CGResult(x=None, iterations=k, residual=rho1, history=history,
			converged=converged, offset=rng.offset, length=rng.length,
			stop_reason=stop_reason)
	#END _iterate()

	def _check_vector(self, name, vector):
		if vector.ndim != 1 or len(vector) != self.matrix.vec_size:
			raise ValidationError("%s must be a vector of length %d, got shape %s"
				% (name, self.matrix.vec_size, vector.shape))

	def _allocate(self, x0):
		vec_size = self.matrix.vec_size
		try:
			if x0 is None:
				x = numpy.zeros(vec_size, dtype=numpy.float64)
			else:
				x = numpy.array(x0, dtype=numpy.float64)
			r = numpy.zeros(vec_size, dtype=numpy.float64)
			p = numpy.zeros(vec_size, dtype=numpy.float64)
			ax = numpy.zeros(vec_size, dtype=numpy.float64)
		except MemoryError as exc:
			raise AllocationError("cannot allocate CG working vectors",
				nbytes=4 * vec_size * 8) from exc
		return x, r, p, ax
#END CGSolver


# squared residual at or below the smallest normal double, or reduced by
# machine epsilon in norm relative to the start
def _negligible(rho, rho_start):
	return rho <= TINY or rho <= rho_start * EPSILON * EPSILON
