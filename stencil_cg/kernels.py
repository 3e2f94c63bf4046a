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
Linear algebra primitives of the CG loop, dispatched to the target of a
memory manager.

Arrays are referred to by the name they were made resident under. Each
call checks with the manager that every region it reads or writes is
resident, then launches the host or CUDA kernel on the arrays the manager
hands out.
"""

from stencil_cg import kernels_cpu
from stencil_cg.common import c_timers
from stencil_cg.config import gpu_config

# names a StencilMatrix is registered under
MATRIX_VALUES = "A.values"
MATRIX_COLUMNS = "A.columns"


class LinearAlgebraKernels:

	def __init__(self, memory, profiling=None):
		self.memory = memory
		self.profiling = gpu_config.PROFILING if profiling is None else profiling
		self.threads_per_block = None
		self._partials = None
		self._gpu = None
		if memory.target == "cuda":
			# compiling the CUDA kernels needs a device, import on demand
			from stencil_cg import kernels_gpu
			self._gpu = kernels_gpu
			self.threads_per_block = kernels_gpu.setup_threads_per_block(memory.device_prop)

	@property
	def target(self):
		return self.memory.target

	def _start(self, timer):
		if self.profiling:
			c_timers.timer_start(timer)

	def _stop(self, timer):
		if self.profiling:
			c_timers.timer_stop(timer)

	# -----------------------------------------------------------------
	# y = A.x over the rows of rng
	# x is read over the whole column span of those rows
	# -----------------------------------------------------------------
	def spmv(self, matrix, x, y, rng):
		memory = self.memory
		slot_offset, slot_length = rng.slots()
		span_offset, span_length = matrix.column_span(rng)
		memory.require(MATRIX_VALUES, slot_offset, slot_length)
		memory.require(MATRIX_COLUMNS, slot_offset, slot_length)
		memory.require(x, span_offset, span_length)
		memory.require(y, rng.offset, rng.length)

		vals = memory.device_array(MATRIX_VALUES)
		cols = memory.device_array(MATRIX_COLUMNS)
		self._start(c_timers.T_KERNEL_SPMV)
		if self._gpu is None:
			kernels_cpu.spmv_cpu(rng.offset, rng.length, vals, cols,
				memory.device_array(x), memory.device_array(y))
		else:
			self._gpu.spmv_gpu(rng.offset, rng.length, vals, cols,
				memory.device_array(x), memory.device_array(y),
				self.threads_per_block["spmv"])
		self._stop(c_timers.T_KERNEL_SPMV)
	#END spmv()

	# y = alpha*x + y
	def axpy(self, alpha, x, y, rng):
		self._require(rng, x, y)
		self._start(c_timers.T_KERNEL_AXPY)
		if self._gpu is None:
			kernels_cpu.axpy_cpu(rng.offset, rng.length, alpha,
				self.memory.device_array(x), self.memory.device_array(y))
		else:
			self._gpu.axpy_gpu(rng.offset, rng.length, alpha,
				self.memory.device_array(x), self.memory.device_array(y),
				self.threads_per_block["axpy"])
		self._stop(c_timers.T_KERNEL_AXPY)
	#END axpy()

	# returns u.v as a host float
	def dot(self, u, v, rng):
		self._require(rng, u, v)
		self._start(c_timers.T_KERNEL_DOT)
		if self._gpu is None:
			total = kernels_cpu.dot_product_cpu(rng.offset, rng.length,
				self.memory.device_array(u), self.memory.device_array(v))
		else:
			total = self._gpu.dot_product_gpu(rng.offset, rng.length,
				self.memory.device_array(u), self.memory.device_array(v),
				self._partial_sums(rng.length), self.threads_per_block["dot"])
		self._stop(c_timers.T_KERNEL_DOT)
		return float(total)
	#END dot()

	# dst = src
	def copy(self, src, dst, rng):
		self._require(rng, src, dst)
		self._start(c_timers.T_KERNEL_COPY)
		if self._gpu is None:
			kernels_cpu.copy_cpu(rng.offset, rng.length,
				self.memory.device_array(src), self.memory.device_array(dst))
		else:
			self._gpu.copy_gpu(rng.offset, rng.length,
				self.memory.device_array(src), self.memory.device_array(dst),
				self.threads_per_block["copy"])
		self._stop(c_timers.T_KERNEL_COPY)
	#END copy()

	# y = x + beta*y
	def xpby(self, x, beta, y, rng):
		self._require(rng, x, y)
		self._start(c_timers.T_KERNEL_XPBY)
		if self._gpu is None:
			kernels_cpu.xpby_cpu(rng.offset, rng.length,
				self.memory.device_array(x), beta, self.memory.device_array(y))
		else:
			self._gpu.xpby_gpu(rng.offset, rng.length,
				self.memory.device_array(x), beta, self.memory.device_array(y),
				self.threads_per_block["xpby"])
		self._stop(c_timers.T_KERNEL_XPBY)
	#END xpby()

	def _require(self, rng, *names):
		for name in names:
			self.memory.require(name, rng.offset, rng.length)

	def _partial_sums(self, nsize):
		blocks = self._gpu.blocks_per_grid(nsize, self.threads_per_block["dot"])
		if self._partials is None or len(self._partials) < blocks:
			self._partials = self._gpu.partial_sums_device(nsize, self.threads_per_block["dot"])
		return self._partials
#END LinearAlgebraKernels


def make_matrix_resident(memory, matrix, rng, entered=None):
	"""
	Makes the slots of the rows of rng resident. Regions that were not
	resident before are appended to `entered`, so a caller can release
	exactly what it added.
	"""
	slot_offset, slot_length = rng.slots()
	for name, array in ((MATRIX_VALUES, matrix.values), (MATRIX_COLUMNS, matrix.columns)):
		gaps = memory.missing_regions(name, slot_offset, slot_length, array)
		memory.make_resident(name, array, slot_offset, slot_length)
		if entered is not None:
			entered.extend(gaps)
#END make_matrix_resident()
