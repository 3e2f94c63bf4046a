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
