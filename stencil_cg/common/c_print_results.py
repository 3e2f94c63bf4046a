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

import sys

from stencil_cg.common import cgparams

#*****************************************************************
#******     C  _  P  R  I  N  T  _  R  E  S  U  L  T  S     ******
#*****************************************************************
def c_print_results(name,
					class_npb,
					n,
					offset,
					length,
					niter,
					t,
					mops,
					optype,
					passed_verification,
					device_name,
					config_string=None):
	print("\n\n %s Benchmark Completed" % (name))
	print(" class           =                        %s" % (class_npb))
	print(" Size            =                %4dx%4d" % (n, n))
	print(" Range           =   offset %8d size %8d" % (offset, length))
	print(" Iterations      =             %12d" % (niter))
	print(" Time in seconds =             %12.2f" % (t))
	print(" Mop/s total     =             %12.2f" % (mops))
	print(" Operation type  = %24s" % (optype))
	if passed_verification is None:
		print(" Verification    =            NOT PERFORMED")
	elif passed_verification:
		print(" Verification    =               SUCCESSFUL")
	else:
		print(" Verification    =             UNSUCCESSFUL")

	print(" Version         =             %12s" % (cgparams.VERSION))
	print(" Python Version  = %s" % (sys.version.replace("\n", "")))
	print(" Device          = %s" % (device_name))

	if config_string:
		print("\n%s" % (config_string))
	print("\n")
#END c_print_results()
