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

import time
import numpy
from numba import cuda

# timer slots
T_SOLVE = 0
T_KERNEL_SPMV = 1
T_KERNEL_AXPY = 2
T_KERNEL_DOT = 3
T_KERNEL_COPY = 4
T_KERNEL_XPBY = 5
T_LAST = 6

KERNEL_TIMERS = (
	(" spmv", T_KERNEL_SPMV),
	(" axpy", T_KERNEL_AXPY),
	(" dot", T_KERNEL_DOT),
	(" copy", T_KERNEL_COPY),
	(" xpby", T_KERNEL_XPBY),
)

# Global variables
start = numpy.repeat(0.0, T_LAST)
elapsed = numpy.repeat(0.0, T_LAST)

# set by the driver when the timed code launches CUDA kernels
device_sync = False

#*****************************************************************
#******            T  I  M  E  R  _  C  L  E  A  R          ******
#*****************************************************************
def timer_clear(n):
	global elapsed
	elapsed[n] = 0.0

def timer_clear_all():
	for n in range(T_LAST):
		timer_clear(n)

#*****************************************************************
#******            T  I  M  E  R  _  S  T  A  R  T          ******
#*****************************************************************
def timer_start(n):
	global start
	start[n] = time.time()

#*****************************************************************
#******            T  I  M  E  R  _  S  T  O  P             ******
#*****************************************************************
# kernel launches return before the device is done
def timer_stop(n):
	global elapsed
	if device_sync:
		cuda.synchronize()
	t = (time.time() - start[n])
	elapsed[n] += t

#*****************************************************************
#******            T  I  M  E  R  _  R  E  A  D             ******
#*****************************************************************
def timer_read(n):
	return elapsed[n]
