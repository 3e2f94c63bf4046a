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

# device used when more than one GPU is present
GPU_DEVICE = 0

# time every kernel call and print a per-kernel table at the end
PROFILING = False

# threads per block (out of range values fall back to the warp size)
CG_THREADS_PER_BLOCK_ON_KERNEL_SPMV = 128
CG_THREADS_PER_BLOCK_ON_KERNEL_AXPY = 128
CG_THREADS_PER_BLOCK_ON_KERNEL_DOT = 128 # must be a power of two
CG_THREADS_PER_BLOCK_ON_KERNEL_COPY = 128
CG_THREADS_PER_BLOCK_ON_KERNEL_XPBY = 128
