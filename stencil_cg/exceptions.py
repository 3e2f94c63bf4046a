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

"""
Exception hierarchy for the stencil CG benchmark.

Every error raised by the package derives from StencilCGError, so the
driver can report any of them with a single handler.
"""


class StencilCGError(Exception):
	"""Base exception for all stencil CG errors."""
	pass


class ValidationError(StencilCGError):
	"""
	Input validation failed.

	Raised once, at construction time, for bad grid sizes, sub-ranges,
	array lengths, problem classes or execution targets.
	"""
	pass


class AllocationError(StencilCGError):
	"""Host or device memory for a matrix or working vector could not be allocated."""

	def __init__(self, message, name=None, nbytes=None):
		super().__init__(message)
		self.name = name
		self.nbytes = nbytes


class NumericalBreakdownError(StencilCGError):
	"""
	The CG iteration produced a zero or non-finite scalar.

	Attributes:
		iteration: CG step at which the breakdown was detected
		quantity: name of the offending scalar: rho0 during residual
			setup, denom, alpha or rho1 inside the iteration
		value: its value
	"""

	def __init__(self, iteration, quantity, value):
		self.iteration = iteration
		self.quantity = quantity
		self.value = value
		super().__init__(
			"CG breakdown at iteration %d: %s = %r" % (iteration, quantity, value))


class ResidencyViolationError(StencilCGError):
	"""A kernel touched a region that is not resident on the executing device."""

	def __init__(self, name, offset, length):
		self.name = name
		self.offset = offset
		self.length = length
		super().__init__(
			"region %s[%d:%d] is not resident" % (name, offset, offset + length))


class DeviceUnavailableError(StencilCGError):
	"""CUDA execution was requested but no Nvidia GPU is available."""
	pass
