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
import numba
from numba import cuda

from stencil_cg.common import cgparams
from stencil_cg.config import gpu_config

ROWSIZE = cgparams.ROWSIZE

stream = 0


def setup_threads_per_block(device_prop):
	# define threads_per_block
	def pick(aux_threads_per_block, power_of_two=False):
		if aux_threads_per_block >= 1 and aux_threads_per_block <= device_prop.MAX_THREADS_PER_BLOCK:
			if not power_of_two or (aux_threads_per_block & (aux_threads_per_block - 1)) == 0:
				return aux_threads_per_block
		return device_prop.WARP_SIZE

	return {
		"spmv": pick(gpu_config.CG_THREADS_PER_BLOCK_ON_KERNEL_SPMV),
		"axpy": pick(gpu_config.CG_THREADS_PER_BLOCK_ON_KERNEL_AXPY),
		"dot": pick(gpu_config.CG_THREADS_PER_BLOCK_ON_KERNEL_DOT, power_of_two=True),
		"copy": pick(gpu_config.CG_THREADS_PER_BLOCK_ON_KERNEL_COPY),
		"xpby": pick(gpu_config.CG_THREADS_PER_BLOCK_ON_KERNEL_XPBY),
	}
#END setup_threads_per_block()


def blocks_per_grid(nsize, threads_per_block):
	return math.ceil(nsize / threads_per_block)


#*****************************************************************
#************************* GPU FUNCTIONS *************************
#*****************************************************************
@cuda.jit('void(int32, int32, float64[:], int32[:], float64[:], float64[:])')
def spmv_gpu_kernel(offset, nsize, vals, cols, x, y):
	i = offset + cuda.blockIdx.x * cuda.blockDim.x + cuda.threadIdx.x
	if i >= offset + nsize:
		return
	# the 9-term row sum stays sequential inside the thread
	summ = 0.0
	for j in range(ROWSIZE):
		summ += vals[ROWSIZE*i + j] * x[cols[ROWSIZE*i + j]]
	y[i] = summ
#END spmv_gpu_kernel()


def spmv_gpu(offset, nsize, vals, cols, x, y, threads_per_block):
	spmv_gpu_kernel[blocks_per_grid(nsize, threads_per_block),
		threads_per_block](offset, nsize, vals, cols, x, y)
#END spmv_gpu()


@cuda.jit('void(int32, int32, float64, float64[:], float64[:])')
def axpy_gpu_kernel(offset, nsize, alpha, x, y):
	i = offset + cuda.blockIdx.x * cuda.blockDim.x + cuda.threadIdx.x
	if i >= offset + nsize:
		return
	y[i] = alpha * x[i] + y[i]
#END axpy_gpu_kernel()


def axpy_gpu(offset, nsize, alpha, x, y, threads_per_block):
	axpy_gpu_kernel[blocks_per_grid(nsize, threads_per_block),
		threads_per_block](offset, nsize, alpha, x, y)
#END axpy_gpu()


@cuda.jit('void(int32, int32, float64[:], float64[:], float64[:])')
def dot_product_gpu_kernel(offset, nsize, vector1, vector2, global_data):
	share_data = cuda.shared.array(shape=0, dtype=numba.float64)

	thread_id = cuda.blockIdx.x * cuda.blockDim.x + cuda.threadIdx.x
	local_id = cuda.threadIdx.x

	# threads past the end contribute zero but still reach every barrier
	value = 0.0
	if thread_id < nsize:
		value = vector1[offset + thread_id] * vector2[offset + thread_id]
	share_data[local_id] = value

	cuda.syncthreads()
	i = cuda.blockDim.x // 2
	while i > 0:
		if local_id < i:
			share_data[local_id] += share_data[local_id+i]
		cuda.syncthreads()
		i >>= 1

	if local_id == 0:
		global_data[cuda.blockIdx.x] = share_data[0]
#END dot_product_gpu_kernel()


# global_data_device holds one partial sum per block; the partials are
# copied back and summed on the host, which also synchronizes the stream
def dot_product_gpu(offset, nsize, vector1, vector2, global_data_device, threads_per_block):
	blocks = blocks_per_grid(nsize, threads_per_block)
	size_shared_data = threads_per_block * global_data_device.dtype.itemsize
	dot_product_gpu_kernel[blocks,
		threads_per_block,
		stream,
		size_shared_data](offset, nsize, vector1, vector2, global_data_device)

	local_data_reduce = 0.0
	local_data = global_data_device[:blocks].copy_to_host()
	for i in range(blocks):
		local_data_reduce += local_data[i]
	return local_data_reduce
#END dot_product_gpu()


def partial_sums_device(nsize, threads_per_block):
	return cuda.device_array(blocks_per_grid(nsize, threads_per_block), numpy.float64)


@cuda.jit('void(int32, int32, float64[:], float64[:])')
def copy_gpu_kernel(offset, nsize, src, dst):
	i = offset + cuda.blockIdx.x * cuda.blockDim.x + cuda.threadIdx.x
	if i >= offset + nsize:
		return
	dst[i] = src[i]
#END copy_gpu_kernel()


def copy_gpu(offset, nsize, src, dst, threads_per_block):
	copy_gpu_kernel[blocks_per_grid(nsize, threads_per_block),
		threads_per_block](offset, nsize, src, dst)
#END copy_gpu()


@cuda.jit('void(int32, int32, float64[:], float64, float64[:])')
def xpby_gpu_kernel(offset, nsize, x, beta, y):
	i = offset + cuda.blockIdx.x * cuda.blockDim.x + cuda.threadIdx.x
	if i >= offset + nsize:
		return
	y[i] = x[i] + beta*y[i]
#END xpby_gpu_kernel()


def xpby_gpu(offset, nsize, x, beta, y, threads_per_block):
	xpby_gpu_kernel[blocks_per_grid(nsize, threads_per_block),
		threads_per_block](offset, nsize, x, beta, y)
#END xpby_gpu()
