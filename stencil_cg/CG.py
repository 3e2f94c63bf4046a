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


import argparse
import sys

from stencil_cg.common import cgparams
from stencil_cg.common import c_timers
from stencil_cg.common import c_print_results
from stencil_cg.config import gpu_config
from stencil_cg.exceptions import StencilCGError
from stencil_cg.kernels import LinearAlgebraKernels
from stencil_cg.offload import TARGETS, create_memory_manager
from stencil_cg.problem import error_norm, generate
from stencil_cg.solver import CGSolver
from stencil_cg.stencil import assemble


def print_residual(iteration, residual):
	print("Iteration %d, residual %e" % (iteration, residual))


# ---------------------------------------------------------------------
# floating point operations of the solve phase
# setup: spmv + axpy + dot, each iteration: spmv + 3 dot + 2 axpy + xpby
# ---------------------------------------------------------------------
def solve_mops(length, niter, t):
	if t == 0.0:
		return 0.0
	setup = (2.0 * cgparams.ROWSIZE + 4.0) * length
	per_iteration = (2.0 * cgparams.ROWSIZE + 12.0) * length
	return (setup + niter * per_iteration) / t / 1000000.0


def kernel_config_string(kernels):
	if kernels.threads_per_block is None:
		config_string = "%5s\t%25s\n" % ("CPU Kernel", "Time in Seconds") if kernels.profiling else ""
	elif kernels.profiling:
		config_string = "%5s\t%25s\t%25s\t%25s\n" % ("GPU Kernel", "Threads Per Block", "Time in Seconds", "Time in Percentage")
	else:
		config_string = "%5s\t%25s\n" % ("GPU Kernel", "Threads Per Block")

	tt = c_timers.timer_read(c_timers.T_SOLVE)
	for label, timer in c_timers.KERNEL_TIMERS:
		key = label.strip()
		t1 = c_timers.timer_read(timer)
		if kernels.threads_per_block is None:
			if kernels.profiling:
				config_string += "%29s\t%25f\n" % (label, t1)
		elif kernels.profiling:
			percent = (t1 * 100 / tt) if tt != 0.0 else 0.0
			config_string += "%29s\t%25d\t%25f\t%24.2f%%\n" % (label, kernels.threads_per_block[key], t1, percent)
		else:
			config_string += "%29s\t%25d\n" % (label, kernels.threads_per_block[key])
	return config_string
#END kernel_config_string()


def main(argv=None):
	parser = argparse.ArgumentParser(description='Stencil CG benchmark')
	parser.add_argument("-c", "--CLASS", default=cgparams.DEFAULT_CLASS,
		help="problem class (S, W, A, B, C)")
	parser.add_argument("-t", "--target", default="auto", choices=TARGETS,
		help="execution target")
	parser.add_argument("--offset", type=int, default=0, help="first row of the solved range")
	parser.add_argument("--length", type=int, default=None, help="rows in the solved range")
	parser.add_argument("--tolerance", type=float, default=None,
		help="stop once the squared residual drops below this value")
	args = parser.parse_args(argv)

	try:
		return run(args)
	except StencilCGError as exc:
		print("\n\n\n%s\n" % (exc))
		return 1
#END main()


def run(args):
	cgparams.set_cg_info(args.CLASS)
	memory = create_memory_manager(args.target, device_id=gpu_config.GPU_DEVICE)
	kernels = LinearAlgebraKernels(memory)

	if kernels.profiling:
		print(" PROFILING mode on")
	c_timers.timer_clear_all()
	c_timers.device_sync = memory.target == "cuda"

	print("\n\n Stencil CG Benchmark - Python version\n")
	print(" Size: %5dx%5d" % (cgparams.N, cgparams.N))
	print(" Iterations: %5d" % (cgparams.ITERATIONS))
	print(" Target: %s" % (memory.target))

	matrix = assemble(cgparams.N)
	xsol, rhs = generate(matrix)
	rng = matrix.grid.subrange(args.offset, args.length)

	solver = CGSolver(matrix, memory=memory, kernels=kernels,
		tolerance=args.tolerance, monitor=print_residual)

	# untimed warm up compiles every kernel for the argument types in use
	CGSolver(matrix, memory=memory, kernels=kernels, iterations=1).solve(rhs, subrange=rng)
	c_timers.timer_clear_all()

	c_timers.timer_start(c_timers.T_SOLVE)
	result = solver.solve(rhs, subrange=rng)
	c_timers.timer_stop(c_timers.T_SOLVE)
	t = c_timers.timer_read(c_timers.T_SOLVE)

	norm2 = error_norm(result.x, xsol, rng)
	print("Error norm: %e, offset %d, size %d" % (norm2, rng.offset, rng.length))
	print("Time: %f" % (t))

	verified = norm2 <= cgparams.VERIFY_EPSILON
	if verified:
		print(" VERIFICATION SUCCESSFUL")
	else:
		print(" VERIFICATION FAILED")
		print(" Error norm          %20.13e" % (norm2))
		print(" Accepted error norm %20.13e" % (cgparams.VERIFY_EPSILON))

	c_print_results.c_print_results("CG",
			cgparams.CLASS,
			cgparams.N,
			rng.offset,
			rng.length,
			result.iterations,
			t,
			solve_mops(rng.length, result.iterations, t),
			"          floating point",
			verified,
			memory.device_name,
			kernel_config_string(kernels))
	return 0
#END run()


#Starting of execution
if __name__ == "__main__":
	sys.exit(main())
