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

from dataclasses import dataclass

import numpy
from numba import njit

from stencil_cg.common import cgparams
from stencil_cg.exceptions import AllocationError
from stencil_cg.grid import Grid

ROWSIZE = cgparams.ROWSIZE
CENTER_SLOT = cgparams.CENTER_SLOT
CENTER_COEFFICIENT = cgparams.CENTER_COEFFICIENT
OFF_DIAGONAL = -cgparams.CENTER_COEFFICIENT / (cgparams.ROWSIZE - 1)


@dataclass(frozen=True, eq=False)
class StencilMatrix:
	"""
	Fixed-bandwidth matrix with exactly ROWSIZE slots per row.

	values[row*ROWSIZE + slot] holds the coefficient and
	columns[row*ROWSIZE + slot] the column it multiplies.
	"""
	grid: Grid
	values: numpy.ndarray
	columns: numpy.ndarray

	@property
	def n(self):
		return self.grid.n

	@property
	def vec_size(self):
		return self.grid.vec_size

	@property
	def rowsize(self):
		return ROWSIZE

	def diagonal(self):
		return self.values[CENTER_SLOT::ROWSIZE]

	def column_span(self, subrange):
		# rows reach at most two grid rows up or down
		reach = 2 * self.n
		start = max(0, subrange.start - reach)
		stop = min(self.vec_size, subrange.stop + reach)
		return start, stop - start

	def to_dense(self):
		dense = numpy.zeros((self.vec_size, self.vec_size))
		rows = numpy.repeat(numpy.arange(self.vec_size), ROWSIZE)
		numpy.add.at(dense, (rows, self.columns), self.values)
		return dense
#END StencilMatrix


# ---------------------------------------------------------------------
# rows are numbered by the traversal: j outer, i inner, row = i + j*n.
# only the linear index is range checked, so horizontal neighbours of
# the first and last columns wrap onto the adjacent grid row.
# ---------------------------------------------------------------------
@njit
def fill_matrix(n, vals, cols):
	indx = numpy.empty(ROWSIZE, dtype=numpy.int64)
	vec_size = n * n
	row_count = 0
	for j in range(n):
		for i in range(n):
			indx[0] = i     + (j - 2)*n
			indx[1] = i     + (j - 1)*n
			indx[2] = i - 2 +       j*n
			indx[3] = i - 1 +       j*n
			indx[4] = i     +       j*n
			indx[5] = i + 1 +       j*n
			indx[6] = i + 2 +       j*n
			indx[7] = i     + (j + 1)*n
			indx[8] = i     + (j + 2)*n

			for slot in range(ROWSIZE):
				k = slot + row_count*ROWSIZE
				if indx[slot] < 0 or indx[slot] >= vec_size:
					# zero-weight self reference keeps the row width fixed
					cols[k] = i + j*n
					vals[k] = 0.0
				else:
					cols[k] = indx[slot]
					if slot == CENTER_SLOT:
						vals[k] = CENTER_COEFFICIENT
					else:
						vals[k] = OFF_DIAGONAL
			row_count += 1
#END fill_matrix()


def assemble(n):
	grid = n if isinstance(n, Grid) else Grid(n)
	nz = grid.vec_size * ROWSIZE
	try:
		vals = numpy.zeros(nz, dtype=numpy.float64)
		cols = numpy.zeros(nz, dtype=numpy.int32)
	except MemoryError as exc:
		raise AllocationError("cannot allocate a %dx%d stencil matrix" % (grid.n, grid.n),
			name="A", nbytes=nz * 12) from exc

	fill_matrix(grid.n, vals, cols)

	# interior rows sum to zero: perturb the centre diagonal off singularity
	vals[CENTER_SLOT + grid.center*ROWSIZE] *= cgparams.CENTER_PERTURBATION

	vals.flags.writeable = False
	cols.flags.writeable = False
	return StencilMatrix(grid, vals, cols)
#END assemble()
