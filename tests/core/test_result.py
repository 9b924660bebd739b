"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default warnings and has_warning()
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pymixgam.core.result import Result


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


class TestResult:

    def test_basic_creation(self):
        result = Result(
            params=FakeParams(value=42.0),
            info={"method": "test"},
            timing={"total_seconds": 0.01},
            backend_name="cpu",
        )
        assert result.params.value == 42.0
        assert result.info["method"] == "test"
        assert result.timing["total_seconds"] == 0.01
        assert result.backend_name == "cpu"

    def test_default_warnings_empty(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name="cpu")
        assert result.warnings == ()
        assert not result.has_warning("anything")

    def test_has_warning_substring(self):
        result = Result(
            params=FakeParams(1.0), info={}, timing=None, backend_name="cpu",
            warnings=("Optimizer did not converge: max iterations",),
        )
        assert result.has_warning("did not converge")
        assert not result.has_warning("singular")

    def test_frozen(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name="cpu")
        with pytest.raises(FrozenInstanceError):
            result.backend_name = "gpu"
