"""
Tests for the diffgeom command-line interface.
"""
import logging

import pytest

from diffgeom.cli import main
from diffgeom.utils.logging import ROOT_LOGGER


@pytest.fixture(autouse=True)
def restore_log_level():
    """main() sets the package log level; put it back afterwards."""
    root = logging.getLogger(ROOT_LOGGER)
    level = root.level
    yield
    root.setLevel(level)


class TestInfo:

    def test_info(self, capsys):
        assert main(["info"]) == 0
        out = capsys.readouterr().out
        assert "Tensor" in out
        assert "Conversion" in out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestDemo:

    def test_polar_default_point(self, capsys):
        assert main(["demo", "polar"]) == 0
        out = capsys.readouterr().out
        assert "Polar metric" in out
        assert "Round trip" in out

    def test_polar_custom_point(self, capsys):
        assert main(["demo", "polar", "--x", "1", "--y", "0"]) == 0
        assert "diag(1, 1.000000)" in capsys.readouterr().out

    def test_polar_origin_is_singular(self, capsys):
        assert main(["demo", "polar", "--x", "0", "--y", "0"]) == 1
        assert "singular" in capsys.readouterr().out

    def test_unknown_demo(self):
        with pytest.raises(SystemExit):
            main(["demo", "hyperbolic"])


class TestCheck:

    @pytest.mark.parametrize("dim", [1, 2, 3, 4])
    def test_invariants_hold(self, dim, capsys):
        assert main(["check", "invariants", "--dim", str(dim)]) == 0
        assert "8/8 invariants hold" in capsys.readouterr().out

    def test_verbose_flag(self, capsys):
        assert main(["-v", "check", "invariants", "--dim", "2", "--seed", "7"]) == 0
        assert logging.getLogger(ROOT_LOGGER).level == logging.DEBUG

    def test_dimension_must_be_positive(self):
        with pytest.raises(SystemExit):
            main(["check", "invariants", "--dim", "0"])
