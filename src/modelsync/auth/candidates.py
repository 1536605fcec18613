"""Authorization candidate sources.

A candidate source tells the subscription orchestrator which
authorization mechanisms to try, in order.  It is a tagged variant:

``Fixed``
    A single mechanism, chosen by the caller.  Its request is always
    decorated before it is submitted.
``RuleDerived``
    An ordered, possibly lazy or endless, sequence of ``AuthCandidate``
    values derived from a schema's authorization rules.  Only candidates
    that come from an ``OWNER`` rule are decorated.

``candidates_for_schema`` derives the source for a model schema.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from modelsync.auth.types import AuthorizationType

if TYPE_CHECKING:
    from modelsync.schema.nodes import AuthRule, AuthStrategy, ModelSchema


@dataclass(frozen=True, slots=True)
class AuthCandidate:
    """One authorization mechanism to attempt.

    Parameters
    ----------
    auth_type:
        Mechanism used to authorize the attempt.
    is_owner_strategy:
        Whether the candidate descends from an ``OWNER`` rule.
    strategy:
        Strategy of the originating rule, when there is one.
    """

    auth_type: AuthorizationType
    is_owner_strategy: bool = False
    strategy: "AuthStrategy | None" = None


@dataclass(frozen=True, slots=True)
class Fixed:
    """A candidate source holding exactly one mechanism."""

    auth_type: AuthorizationType

    def __iter__(self) -> Iterator[AuthCandidate]:
        yield AuthCandidate(self.auth_type)


@dataclass(frozen=True)
class RuleDerived:
    """An ordered sequence of candidates derived from authorization rules.

    *candidates* may be any iterable, including a generator that never
    ends.  It is consumed once, by a single thread.
    """

    candidates: Iterable[AuthCandidate]

    def __iter__(self) -> Iterator[AuthCandidate]:
        return iter(self.candidates)


CandidateSource = Union[Fixed, RuleDerived]


# Strategy and provider ranks: lower is tried first.
_STRATEGY_ORDER = ("owner", "groups", "private", "public")
_PROVIDER_ORDER = ("userPools", "oidc", "function", "iam", "apiKey")


def _rule_rank(rule: "AuthRule") -> tuple[int, int]:
    return (
        _STRATEGY_ORDER.index(rule.strategy.value),
        _PROVIDER_ORDER.index(rule.effective_provider.value),
    )


def candidates_for_schema(
    schema: "ModelSchema",
    default: AuthorizationType = AuthorizationType.API_KEY,
) -> CandidateSource:
    """Return the candidate source for subscriptions to *schema*.

    Rules are tried owner first, then group, private and public; rules
    with the same strategy are ordered by provider (user pools, OIDC,
    Lambda, IAM, API key).  Rules that map to an already listed
    ``(auth_type, is_owner_strategy)`` pair are skipped.  A schema
    without rules yields ``Fixed(default)``.
    """
    from modelsync.schema.nodes import AuthStrategy

    if not schema.auth_rules:
        return Fixed(default)
    seen: set[tuple[AuthorizationType, bool]] = set()
    candidates: list[AuthCandidate] = []
    for rule in sorted(schema.auth_rules, key=_rule_rank):
        is_owner = rule.strategy is AuthStrategy.OWNER
        key = (rule.authorization_type, is_owner)
        if key in seen:
            continue
        seen.add(key)
        candidates.append(AuthCandidate(rule.authorization_type, is_owner, rule.strategy))
    return RuleDerived(tuple(candidates))
