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

import numbers
from dataclasses import dataclass

from stencil_cg.common import cgparams
from stencil_cg.exceptions import ValidationError

# column indices are stored as int32 on both targets
INDEX_LIMIT = 2**31 - 1


@dataclass(frozen=True)
class Grid:
	"""Logical n x n grid, linearised row-major as i + j*n."""
	n: int

	def __post_init__(self):
		if isinstance(self.n, bool) or not isinstance(self.n, numbers.Integral):
			raise ValidationError("grid size must be an integer, got %r" % (self.n,))
		object.__setattr__(self, "n", int(self.n))
		if self.n < 1:
			raise ValidationError("grid size must be positive, got %d" % self.n)
		if self.n * self.n * cgparams.ROWSIZE > INDEX_LIMIT:
			raise ValidationError("grid size %d overflows 32-bit matrix indices" % self.n)

	@property
	def vec_size(self):
		return self.n * self.n

	def index(self, i, j):
		return i + j * self.n

	@property
	def center(self):
		return self.index(self.n // 2, self.n // 2)

	def subrange(self, offset=0, length=None):
		if length is None:
			length = self.vec_size - offset
		return SubRange(offset, length, self.vec_size)

	def full_range(self):
		return SubRange(0, self.vec_size, self.vec_size)
#END Grid


@dataclass(frozen=True)
class SubRange:
	"""
	Contiguous [offset, offset+length) partition of a grid's flat arrays.

	Validated once here so kernels and the solver can trust it.
	"""
	offset: int
	length: int
	vec_size: int

	def __post_init__(self):
		if self.offset < 0 or self.offset >= self.vec_size:
			raise ValidationError("offset %d outside vector of size %d" % (self.offset, self.vec_size))
		if self.length < 1:
			raise ValidationError("length must be positive, got %d" % self.length)
		if self.offset + self.length > self.vec_size:
			raise ValidationError("range [%d, %d) exceeds vector size %d"
				% (self.offset, self.offset + self.length, self.vec_size))

	@property
	def start(self):
		return self.offset

	@property
	def stop(self):
		return self.offset + self.length

	def slots(self):
		# (offset, length) of the matrix entries holding the range's rows
		return self.offset * cgparams.ROWSIZE, self.length * cgparams.ROWSIZE
#END SubRange
