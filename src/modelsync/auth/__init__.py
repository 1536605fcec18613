"""Authorization types and candidate sources."""
from __future__ import annotations

from modelsync.auth.candidates import (
    AuthCandidate,
    CandidateSource,
    Fixed,
    RuleDerived,
    candidates_for_schema,
)
from modelsync.auth.types import AuthorizationType

__all__ = [
    "AuthorizationType",
    "AuthCandidate",
    "CandidateSource",
    "Fixed",
    "RuleDerived",
    "candidates_for_schema",
]
