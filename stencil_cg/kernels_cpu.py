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

from numba import njit, prange

from stencil_cg.common import cgparams

ROWSIZE = cgparams.ROWSIZE


#*****************************************************************
#************************* CPU FUNCTIONS *************************
#*****************************************************************
# every kernel forks one worker loop over [offset, offset+nsize) and
# joins before returning; no two iterations write the same index

@njit(parallel=True)
def spmv_cpu(offset, nsize, vals, cols, x, y):
	end_offset = offset + nsize
	for i in prange(offset, end_offset):
		summ = 0.0
		for j in range(ROWSIZE):
			summ += vals[ROWSIZE*i + j] * x[cols[ROWSIZE*i + j]]
		y[i] = summ
#END spmv_cpu()


@njit(parallel=True)
def axpy_cpu(offset, nsize, alpha, x, y):
	end_offset = offset + nsize
	for i in prange(offset, end_offset):
		y[i] = alpha * x[i] + y[i]
#END axpy_cpu()


# the partial sums of each worker are combined in an order that depends
# on the thread count, so results can differ in the last bits
@njit(parallel=True)
def dot_product_cpu(offset, nsize, vector1, vector2):
	total = 0.0
	end_offset = offset + nsize
	for i in prange(offset, end_offset):
		total += vector1[i] * vector2[i]
	return total
#END dot_product_cpu()


@njit(parallel=True)
def copy_cpu(offset, nsize, src, dst):
	end_offset = offset + nsize
	for i in prange(offset, end_offset):
		dst[i] = src[i]
#END copy_cpu()


# y = x + beta*y
@njit(parallel=True)
def xpby_cpu(offset, nsize, x, beta, y):
	end_offset = offset + nsize
	for i in prange(offset, end_offset):
		y[i] = x[i] + beta * y[i]
#END xpby_cpu()
