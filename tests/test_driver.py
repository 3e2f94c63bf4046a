"""
Tests for the benchmark driver, its configuration and the exception
hierarchy.
"""

import pytest

from stencil_cg import CG
from stencil_cg.common import c_timers, cgparams
from stencil_cg.exceptions import (
    AllocationError,
    DeviceUnavailableError,
    NumericalBreakdownError,
    ResidencyViolationError,
    StencilCGError,
    ValidationError,
)


@pytest.fixture
def tiny_class(monkeypatch):
    """Registers a 16 x 16 problem class 'T' for fast driver runs."""
    monkeypatch.setitem(cgparams.CLASS_SIZES, "T", 16)
    return "T"


class TestCgParams:

    def test_set_cg_info(self):
        cgparams.set_cg_info("C")
        assert (cgparams.CLASS, cgparams.N) == ("C", 1024)

    def test_unknown_class(self):
        with pytest.raises(ValidationError):
            cgparams.set_cg_info("Z")

    def test_default_class_exists(self):
        assert cgparams.DEFAULT_CLASS in cgparams.CLASS_SIZES


class TestTimers:

    def test_accumulates(self):
        c_timers.timer_clear(c_timers.T_SOLVE)
        c_timers.timer_start(c_timers.T_SOLVE)
        c_timers.timer_stop(c_timers.T_SOLVE)
        first = c_timers.timer_read(c_timers.T_SOLVE)
        assert first >= 0.0
        c_timers.timer_start(c_timers.T_SOLVE)
        c_timers.timer_stop(c_timers.T_SOLVE)
        assert c_timers.timer_read(c_timers.T_SOLVE) >= first

    def test_clear_all(self):
        c_timers.elapsed[c_timers.T_KERNEL_DOT] = 3.0
        c_timers.timer_clear_all()
        assert c_timers.timer_read(c_timers.T_KERNEL_DOT) == 0.0


class TestMain:

    def test_cpu_run(self, tiny_class, capsys):
        assert CG.main(["-c", tiny_class, "-t", "cpu"]) == 0
        out = capsys.readouterr().out
        assert "Iteration 0, residual" in out
        assert "Iteration 440, residual" in out
        assert "Error norm:" in out
        assert "offset 0, size 256" in out
        assert "Time:" in out
        assert "VERIFICATION SUCCESSFUL" in out
        assert "CG Benchmark Completed" in out

    def test_sub_range_run(self, tiny_class, capsys):
        assert CG.main(["-c", tiny_class, "-t", "cpu", "--offset", "32", "--length", "64"]) == 0
        out = capsys.readouterr().out
        assert "offset 32, size 64" in out

    def test_tolerance_run(self, tiny_class, capsys):
        assert CG.main(["-c", tiny_class, "-t", "cpu", "--tolerance", "1e-10"]) == 0
        out = capsys.readouterr().out
        assert "Iteration 440, residual" not in out

    def test_unknown_class_reported(self, capsys):
        assert CG.main(["-c", "Z", "-t", "cpu"]) == 1
        assert "unknown problem class" in capsys.readouterr().out

    def test_bad_range_reported(self, tiny_class, capsys):
        assert CG.main(["-c", tiny_class, "-t", "cpu", "--offset", "300"]) == 1
        assert "offset 300 outside vector of size 256" in capsys.readouterr().out

    def test_solve_mops(self):
        assert CG.solve_mops(100, 10, 0.0) == 0.0
        assert CG.solve_mops(1000000, 1, 1.0) == pytest.approx(52.0)


class TestExceptions:

    @pytest.mark.parametrize("cls", [
        ValidationError,
        AllocationError,
        DeviceUnavailableError,
    ])
    def test_plain_errors_are_stencil_errors(self, cls):
        with pytest.raises(StencilCGError):
            raise cls("failed")

    def test_breakdown_attributes(self):
        exc = NumericalBreakdownError(12, "denom", 0.0)
        assert (exc.iteration, exc.quantity, exc.value) == (12, "denom", 0.0)
        assert "iteration 12" in str(exc)
        assert isinstance(exc, StencilCGError)

    def test_residency_attributes(self):
        exc = ResidencyViolationError("p", 10, 5)
        assert (exc.name, exc.offset, exc.length) == ("p", 10, 5)
        assert "p[10:15]" in str(exc)

    def test_allocation_attributes(self):
        exc = AllocationError("no memory", name="A", nbytes=64)
        assert (exc.name, exc.nbytes) == ("A", 64)
