from __future__ import annotations

from typing import Literal

Strategy = Literal["proof", "interactive", "interpret"]

DEFAULT_PROOF_MARKER = "tests/proofs/"
DEFAULT_INTERACTIVE_MARKER = "tests/interactive/"


def classify(
    test_id: str,
    proof_marker: str = DEFAULT_PROOF_MARKER,
    interactive_marker: str = DEFAULT_INTERACTIVE_MARKER,
) -> Strategy:
    path = test_id.replace("\\", "/")
    if proof_marker and proof_marker in path:
        return "proof"
    if interactive_marker and interactive_marker in path:
        return "interactive"
    return "interpret"
