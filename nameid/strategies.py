"""
Gender inference strategies.

A strategy decides which token of a tokenized record is treated as the first name when looking up
gender. Strategies form a closed set of variants:

- **ByIndex(i)**: pick the token at position ``i`` (negative indices count from the end, so
  ``ByIndex(-1)`` is the last token). A record with a single token always yields that token.
- **ByRegex(pattern)**: declared placeholder, fails with ``StrategyNotImplementedError``.
- **FindSalutation()**: declared placeholder, fails with ``StrategyNotImplementedError``.

The placeholders are kept so that configurations naming them fail loudly instead of silently
falling back to an index rule. Only ``ByIndex`` variants appear in ``NAME_DETECT_STRATEGIES``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple, Union

from nameid.consts import MALE_PROBABILITY_CUTOFF, GenderStrings


class StrategyNotImplementedError(NotImplementedError):
    """Raised when a declared but unimplemented strategy is asked to select a token."""


@dataclass(frozen=True)
class ByIndex:
    index: int

    @property
    def strategy_id(self) -> str:
        return f"ByIndex({self.index})"

    def __str__(self) -> str:
        return self.strategy_id


@dataclass(frozen=True)
class ByRegex:
    pattern: re.Pattern

    @property
    def strategy_id(self) -> str:
        return f"ByRegex({self.pattern.pattern})"

    def __str__(self) -> str:
        return self.strategy_id


@dataclass(frozen=True)
class FindSalutation:
    @property
    def strategy_id(self) -> str:
        return "FindSalutation()"

    def __str__(self) -> str:
        return self.strategy_id


NameDetectStrategy = Union[ByIndex, ByRegex, FindSalutation]

# Order matters: ties in strategy selection go to the earliest entry
NAME_DETECT_STRATEGIES: Tuple[NameDetectStrategy, ...] = (ByIndex(0), ByIndex(-1))


def token_at_index(tokens: Sequence[str], index: int) -> Optional[str]:
    """Index into tokens, accepting negative indices; a lone token is returned for any index."""
    if not tokens:
        return None
    if len(tokens) == 1:
        return tokens[0]
    return tokens[(index + len(tokens)) % len(tokens)]


def select_token(strategy: NameDetectStrategy, tokens: Sequence[str]) -> Optional[str]:
    """Return the token the strategy treats as the first name, or None for an empty record."""
    if isinstance(strategy, ByIndex):
        return token_at_index(tokens, strategy.index)
    raise StrategyNotImplementedError(f"strategy not implemented: {strategy}")


def gender_of(name: Optional[str], gender_probabilities: Mapping[str, float]) -> str:
    if name is None:
        return GenderStrings.NA
    prob_male = gender_probabilities.get(name)
    if prob_male is None:
        return GenderStrings.NA
    return GenderStrings.MALE if prob_male >= MALE_PROBABILITY_CUTOFF else GenderStrings.FEMALE


def identify_gender(
    tokens: Sequence[str], strategy: NameDetectStrategy, gender_probabilities: Mapping[str, float]
) -> str:
    """Resolve one of Male / Female / NA for a tokenized record under a strategy."""
    return gender_of(select_token(strategy, tokens), gender_probabilities)


def parse_strategy_id(strategy_id: str) -> NameDetectStrategy:
    """Inverse of ``strategy_id`` for the variants that can be written back as text."""
    match = re.fullmatch(r"ByIndex\((-?\d+)\)", strategy_id)
    if match:
        return ByIndex(int(match.group(1)))
    if strategy_id == "FindSalutation()":
        return FindSalutation()
    match = re.fullmatch(r"ByRegex\((.*)\)", strategy_id, flags=re.DOTALL)
    if match:
        return ByRegex(re.compile(match.group(1)))
    raise ValueError(f"unknown strategy id: {strategy_id!r}")
