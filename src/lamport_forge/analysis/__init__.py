"""Key-reuse analysis: coverage of revealed preimages and forge difficulty."""

from __future__ import annotations

from lamport_forge.analysis.coverage import CoverageState, build_coverage
from lamport_forge.analysis.difficulty import (
    assemble_signature,
    estimate_difficulty,
    expected_attempts,
    forgeable_mask,
    is_forgeable,
    success_probability,
    unreachable_positions,
)

__all__ = [
    "CoverageState",
    "assemble_signature",
    "build_coverage",
    "estimate_difficulty",
    "expected_attempts",
    "forgeable_mask",
    "is_forgeable",
    "success_probability",
    "unreachable_positions",
]
