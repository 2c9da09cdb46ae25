"""
Combinable statistics for name detection.

Every statistic in this module is a commutative monoid: ``empty()`` is the identity and ``combine``
(also spelled ``+``) is associative and commutative. Per-record singletons can therefore be reduced
in any order, over any number of partitions and in any reduction-tree shape, and always arrive at
the same aggregate.

- **Moments**: count and raw power sums of a sample. With integer samples (token counts, character
  lengths) the sums stay exact Python integers, so mean and variance are exact regardless of
  partitioning.
- **AveragedValue**: (sum, count) pair for a running mean.
- **GenderStats**: male / female / unknown tallies for one strategy.
- **GuardCheckStats**: the quantities behind the dataset-level guard checks.
- **NameDetectStats**: the composite reduced across all records.

Values are never mutated after construction; ``combine`` always builds a new value.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from nameid.hll import HyperLogLog

Number = Union[int, float]


@dataclass(frozen=True)
class Moments:
    """Count, sum and sum of squares of a sample."""

    count: int = 0
    total: Number = 0
    total_sq: Number = 0

    @classmethod
    def empty(cls) -> "Moments":
        return cls()

    @classmethod
    def of(cls, value: Number) -> "Moments":
        return cls(count=1, total=value, total_sq=value * value)

    def combine(self, other: "Moments") -> "Moments":
        return Moments(self.count + other.count, self.total + other.total, self.total_sq + other.total_sq)

    __add__ = combine

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0

    @property
    def variance(self) -> float:
        """Population variance."""
        if self.count == 0:
            return 0.0
        # n * sum(x^2) - sum(x)^2 is exact for integer samples
        spread = self.count * self.total_sq - self.total * self.total
        return max(spread, 0) / (self.count * self.count)

    @property
    def stddev(self) -> float:
        return math.sqrt(self.variance)

    def isclose(self, other: "Moments", rel_tol: float = 1e-9) -> bool:
        return (
            self.count == other.count
            and math.isclose(self.total, other.total, rel_tol=rel_tol)
            and math.isclose(self.total_sq, other.total_sq, rel_tol=rel_tol)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "mean": self.mean, "stddev": self.stddev}


@dataclass(frozen=True)
class AveragedValue:
    total: float = 0.0
    count: int = 0

    @classmethod
    def empty(cls) -> "AveragedValue":
        return cls()

    @classmethod
    def of(cls, value: float) -> "AveragedValue":
        return cls(total=float(value), count=1)

    def combine(self, other: "AveragedValue") -> "AveragedValue":
        return AveragedValue(self.total + other.total, self.count + other.count)

    __add__ = combine

    @property
    def value(self) -> float:
        """Mean of the samples; 0.0 when nothing was averaged."""
        return self.total / self.count if self.count else 0.0

    def isclose(self, other: "AveragedValue", abs_tol: float = 1e-9) -> bool:
        return self.count == other.count and math.isclose(self.total, other.total, rel_tol=1e-9, abs_tol=abs_tol)

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "value": self.value}


@dataclass(frozen=True)
class GenderStats:
    num_male: int = 0
    num_female: int = 0
    num_other: int = 0

    @classmethod
    def empty(cls) -> "GenderStats":
        return cls()

    def combine(self, other: "GenderStats") -> "GenderStats":
        return GenderStats(
            self.num_male + other.num_male, self.num_female + other.num_female, self.num_other + other.num_other
        )

    __add__ = combine

    def to_dict(self) -> Dict[str, int]:
        return {"numMale": self.num_male, "numFemale": self.num_female, "numOther": self.num_other}


@dataclass(frozen=True)
class GuardCheckStats:
    count_below_max_num_tokens: int = 0
    count_above_min_char_length: int = 0
    moments_of_num_tokens: Moments = field(default_factory=Moments)
    moments_of_char_length: Moments = field(default_factory=Moments)
    approx_num_unique: HyperLogLog = field(default_factory=HyperLogLog)

    @classmethod
    def empty(cls) -> "GuardCheckStats":
        return cls()

    def combine(self, other: "GuardCheckStats") -> "GuardCheckStats":
        return GuardCheckStats(
            count_below_max_num_tokens=self.count_below_max_num_tokens + other.count_below_max_num_tokens,
            count_above_min_char_length=self.count_above_min_char_length + other.count_above_min_char_length,
            moments_of_num_tokens=self.moments_of_num_tokens + other.moments_of_num_tokens,
            moments_of_char_length=self.moments_of_char_length + other.moments_of_char_length,
            approx_num_unique=self.approx_num_unique + other.approx_num_unique,
        )

    __add__ = combine

    @property
    def count(self) -> int:
        """Number of records summarized."""
        return self.moments_of_num_tokens.count

    def isclose(self, other: "GuardCheckStats") -> bool:
        return (
            self.count_below_max_num_tokens == other.count_below_max_num_tokens
            and self.count_above_min_char_length == other.count_above_min_char_length
            and self.moments_of_num_tokens.isclose(other.moments_of_num_tokens)
            and self.moments_of_char_length.isclose(other.moments_of_char_length)
            and self.approx_num_unique == other.approx_num_unique
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "countBelowMaxNumTokens": self.count_below_max_num_tokens,
            "countAboveMinCharLength": self.count_above_min_char_length,
            "momentsOfNumTokens": self.moments_of_num_tokens.to_dict(),
            "momentsOfCharLength": self.moments_of_char_length.to_dict(),
            "approxNumUnique": self.approx_num_unique.to_dict(),
        }


def _combine_gender_results(
    left: Mapping[str, GenderStats], right: Mapping[str, GenderStats]
) -> Dict[str, GenderStats]:
    combined = dict(left)
    for strategy_id, stats in right.items():
        combined[strategy_id] = combined[strategy_id] + stats if strategy_id in combined else stats
    return combined


@dataclass(frozen=True)
class NameDetectStats:
    """The unit of distributed reduction: one singleton per record, one aggregate per dataset."""

    guard_check_quantities: GuardCheckStats = field(default_factory=GuardCheckStats)
    dict_check_result: AveragedValue = field(default_factory=AveragedValue)
    gender_results_by_strategy: Mapping[str, GenderStats] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "NameDetectStats":
        return cls()

    def combine(self, other: "NameDetectStats") -> "NameDetectStats":
        return NameDetectStats(
            guard_check_quantities=self.guard_check_quantities + other.guard_check_quantities,
            dict_check_result=self.dict_check_result + other.dict_check_result,
            gender_results_by_strategy=_combine_gender_results(
                self.gender_results_by_strategy, other.gender_results_by_strategy
            ),
        )

    __add__ = combine

    def isclose(self, other: "NameDetectStats") -> bool:
        """Equality up to floating-point rounding in the averaged dictionary score."""
        return (
            self.guard_check_quantities.isclose(other.guard_check_quantities)
            and self.dict_check_result.isclose(other.dict_check_result)
            and dict(self.gender_results_by_strategy) == dict(other.gender_results_by_strategy)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guardCheckQuantities": self.guard_check_quantities.to_dict(),
            "dictCheckResult": self.dict_check_result.to_dict(),
            "genderResultsByStrategy": {
                strategy_id: stats.to_dict() for strategy_id, stats in self.gender_results_by_strategy.items()
            },
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def combine(left: NameDetectStats, right: NameDetectStats) -> NameDetectStats:
    return left.combine(right)


def fold(stats: Iterable[NameDetectStats]) -> NameDetectStats:
    """Sequential left fold from the identity."""
    return reduce(combine, stats, NameDetectStats.empty())


def tree_reduce(stats: Iterable[NameDetectStats]) -> NameDetectStats:
    """Pairwise reduction, halving the number of partial aggregates at each level."""
    level: List[NameDetectStats] = list(stats)
    if not level:
        return NameDetectStats.empty()
    while len(level) > 1:
        paired = [level[i] + level[i + 1] for i in range(0, len(level) - 1, 2)]
        if len(level) % 2:
            paired.append(level[-1])
        level = paired
    return level[0]
