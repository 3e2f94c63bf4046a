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
Residency bookkeeping for arrays shared between the host and the device.

Every array a kernel touches is registered under a name. The manager
records which half-open intervals of it are resident on the executing
device and is the only place where host/device transfers happen. Kernels
ask it to `require` a region before they launch.
"""

from collections import namedtuple

from numba import cuda
from numba.cuda.cudadrv.driver import CudaAPIError

from stencil_cg.exceptions import (
	AllocationError,
	DeviceUnavailableError,
	ResidencyViolationError,
	ValidationError,
)

OffloadRegion = namedtuple("OffloadRegion", ["name", "offset", "length"])

TARGETS = ("auto", "cpu", "cuda")


# ---------------------------------------------------------------------
# interval helpers, intervals are sorted disjoint [start, stop) lists
# ---------------------------------------------------------------------
def _merge(intervals, start, stop):
	merged = []
	for a, b in sorted(intervals + [(start, stop)]):
		if merged and a <= merged[-1][1]:
			merged[-1] = (merged[-1][0], max(merged[-1][1], b))
		else:
			merged.append((a, b))
	return merged


def _subtract(intervals, start, stop):
	remaining = []
	for a, b in intervals:
		if b <= start or a >= stop:
			remaining.append((a, b))
			continue
		if a < start:
			remaining.append((a, start))
		if b > stop:
			remaining.append((stop, b))
	return remaining


def _missing(intervals, start, stop):
	gaps = []
	cursor = start
	for a, b in intervals:
		if b <= cursor:
			continue
		if a >= stop:
			break
		if a > cursor:
			gaps.append((cursor, a))
		cursor = max(cursor, b)
		if cursor >= stop:
			break
	if cursor < stop:
		gaps.append((cursor, stop))
	return gaps


class OffloadMemoryManager:
	"""
	Base manager: tracks resident regions per named array.

	Subclasses implement the transfers (_allocate, _copy_in, _copy_out,
	_free) and device_array.
	"""

	target = None

	def __init__(self):
		self._arrays = {}
		self._regions = {}

	def _bounds(self, name, offset, length, array=None):
		size = len(self._arrays[name] if array is None else array)
		if length is None:
			length = size - offset
		if offset < 0 or length < 0 or offset + length > size:
			raise ValidationError("region [%d, %d) out of bounds for %s of size %d"
				% (offset, offset + length, name, size))
		return offset, offset + length

	def make_resident(self, name, array=None, offset=0, length=None):
		if name not in self._arrays:
			if array is None:
				raise ValidationError("array %s was never registered" % name)
			start, stop = self._bounds(name, offset, length, array)
			self._arrays[name] = array
			self._regions[name] = []
			self._allocate(name)
		elif array is not None and array is not self._arrays[name]:
			raise ValidationError("name %s is already bound to another array" % name)
		else:
			start, stop = self._bounds(name, offset, length)

		if start == stop:
			return
		for a, b in _missing(self._regions[name], start, stop):
			self._copy_in(name, a, b)
		self._regions[name] = _merge(self._regions[name], start, stop)
	#END make_resident()

	def release(self, name, offset=0, length=None):
		if name not in self._arrays:
			return
		start, stop = self._bounds(name, offset, length)
		self._regions[name] = _subtract(self._regions[name], start, stop)
		if not self._regions[name]:
			self._free(name)
			del self._regions[name]
			del self._arrays[name]
	#END release()

	def release_all(self):
		for name in list(self._arrays):
			self.release(name)

	def is_resident(self, name, offset, length):
		if name not in self._arrays:
			return False
		if length == 0:
			return True
		return not _missing(self._regions[name], offset, offset + length)

	def missing_regions(self, name, offset=0, length=None, array=None):
		"""Parts of [offset, offset+length) that make_resident would still copy."""
		if name not in self._arrays:
			if array is None:
				return []
			start, stop = self._bounds(name, offset, length, array)
			return [OffloadRegion(name, start, stop - start)] if stop > start else []
		start, stop = self._bounds(name, offset, length)
		return [OffloadRegion(name, a, b - a) for a, b in _missing(self._regions[name], start, stop)]

	def require(self, name, offset, length):
		if not self.is_resident(name, offset, length):
			raise ResidencyViolationError(name, offset, length)

	def sync_to_host(self, name, offset=0, length=None):
		start, stop = self._resident_bounds(name, offset, length)
		self._copy_out(name, start, stop)

	def sync_to_device(self, name, offset=0, length=None):
		start, stop = self._resident_bounds(name, offset, length)
		self._copy_in(name, start, stop)

	def _resident_bounds(self, name, offset, length):
		if name not in self._arrays:
			raise ResidencyViolationError(name, offset, length or 0)
		start, stop = self._bounds(name, offset, length)
		self.require(name, start, stop - start)
		return start, stop

	def regions(self, name):
		return [OffloadRegion(name, a, b - a) for a, b in self._regions.get(name, [])]

	def names(self):
		return list(self._arrays)

	def host_array(self, name):
		return self._arrays[name]

	def device_array(self, name):
		raise NotImplementedError

	def _allocate(self, name):
		pass

	def _copy_in(self, name, start, stop):
		pass

	def _copy_out(self, name, start, stop):
		pass

	def _free(self, name):
		pass
#END OffloadMemoryManager


class HostMemoryManager(OffloadMemoryManager):
	"""
	CPU target: kernels run on the host arrays, transfers are no-ops.

	With check_residency=False every region reports resident, which is the
	unified-memory behaviour; by default the bookkeeping is still enforced.
	"""

	target = "cpu"

	def __init__(self, check_residency=True):
		super().__init__()
		self.check_residency = check_residency

	def is_resident(self, name, offset, length):
		if not self.check_residency:
			return True
		return super().is_resident(name, offset, length)

	def device_array(self, name):
		return self._arrays[name]

	@property
	def device_name(self):
		return "host"
#END HostMemoryManager


class CudaMemoryManager(OffloadMemoryManager):
	"""CUDA target: full-length device buffers, sub-range transfers."""

	target = "cuda"

	def __init__(self, device_id=0):
		super().__init__()
		if not cuda.is_available():
			raise DeviceUnavailableError("No Nvidia GPU found!")
		total_devices = len(cuda.gpus)
		if device_id < 0 or device_id >= total_devices:
			device_id = 0
		cuda.select_device(device_id)
		self.device_id = device_id
		self.device_prop = cuda.get_current_device()
		self._device = {}

	@property
	def device_name(self):
		name = self.device_prop.name
		return name.decode() if isinstance(name, bytes) else name

	def device_array(self, name):
		return self._device[name]

	def _allocate(self, name):
		array = self._arrays[name]
		try:
			self._device[name] = cuda.device_array(array.shape, array.dtype)
		except (CudaAPIError, MemoryError) as exc:
			del self._arrays[name]
			del self._regions[name]
			raise AllocationError("cannot allocate %s on the device" % name,
				name=name, nbytes=array.nbytes) from exc

	def _copy_in(self, name, start, stop):
		self._device[name][start:stop].copy_to_device(self._arrays[name][start:stop])

	def _copy_out(self, name, start, stop):
		self._device[name][start:stop].copy_to_host(self._arrays[name][start:stop])

	def _free(self, name):
		# numba returns the buffer to the context once the last reference goes
		del self._device[name]
#END CudaMemoryManager


def create_memory_manager(target="auto", device_id=0, check_residency=True):
	if target not in TARGETS:
		raise ValidationError("unknown target %r, expected one of %s" % (target, ", ".join(TARGETS)))
	if target == "auto":
		target = "cuda" if cuda.is_available() else "cpu"
	if target == "cuda":
		return CudaMemoryManager(device_id)
	return HostMemoryManager(check_residency=check_residency)
#END create_memory_manager()
