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


# This utility configures the stencil CG benchmark for a specific class
from stencil_cg.exceptions import ValidationError

VERSION = "1.0"

# Stencil
ROWSIZE = 9
CENTER_SLOT = 4
CENTER_COEFFICIENT = 0.95
CENTER_PERTURBATION = 1.001

# CG
ITERATIONS = 500
REPORT_EVERY = 20
VERIFY_EPSILON = 1.0e-3

# grid side per class
CLASS_SIZES = {
	'S': 64,
	'W': 128,
	'A': 256,
	'B': 512,
	'C': 1024,
}
DEFAULT_CLASS = 'A'

# Global variables
CLASS = ""
N = 0


def set_cg_info(class_npb):
	global CLASS, N

	if class_npb not in CLASS_SIZES:
		raise ValidationError("unknown problem class %r, expected one of %s"
			% (class_npb, ", ".join(sorted(CLASS_SIZES))))

	CLASS = class_npb
	N = CLASS_SIZES[class_npb]
#END set_cg_info()
