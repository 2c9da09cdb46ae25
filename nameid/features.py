"""
Per-record feature extraction: one raw text value in, one NameDetectStats singleton out.

Extraction is a pure function of the record and the read-only dictionaries, so it can run on any
number of workers in any order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from nameid.config import GuardCheckLimits, NameIdentifierConfig
from nameid.consts import GenderStrings
from nameid.dictionaries import GenderDictionary, NameDictionary
from nameid.hll import HyperLogLog
from nameid.stats import AveragedValue, GenderStats, GuardCheckStats, Moments, NameDetectStats
from nameid.strategies import NameDetectStrategy, identify_gender
from nameid.tokenizer import tokenize


def compute_guard_check_quantities(
    text: Optional[str], tokens: Sequence[str], limits: GuardCheckLimits, hll_bits: int
) -> GuardCheckStats:
    raw = text or ""
    return GuardCheckStats(
        count_below_max_num_tokens=1 if len(tokens) <= limits.max_num_tokens else 0,
        count_above_min_char_length=1 if len(raw) > limits.min_char_length else 0,
        moments_of_num_tokens=Moments.of(len(tokens)),
        moments_of_char_length=Moments.of(len(raw)),
        # absent values are not distinct entries
        approx_num_unique=HyperLogLog.create(text, hll_bits) if text is not None else HyperLogLog.empty(hll_bits),
    )


def dict_check(tokens: Sequence[str], name_dictionary: NameDictionary) -> AveragedValue:
    """Fraction of tokens found in the name dictionary; an empty record carries zero weight."""
    if not tokens:
        return AveragedValue.empty()
    hits = sum(1 for token in tokens if token in name_dictionary)
    return AveragedValue.of(hits / len(tokens))


def compute_results_by_strategy(
    tokens: Sequence[str], strategies: Sequence[NameDetectStrategy], gender_dictionary: GenderDictionary
) -> Dict[str, GenderStats]:
    results = {}
    for strategy in strategies:
        gender = identify_gender(tokens, strategy, gender_dictionary.value)
        results[strategy.strategy_id] = GenderStats(
            num_male=1 if gender == GenderStrings.MALE else 0,
            num_female=1 if gender == GenderStrings.FEMALE else 0,
            num_other=1 if gender == GenderStrings.NA else 0,
        )
    return results


@dataclass(frozen=True)
class NameStatsExtractor:
    """Picklable extraction function bound to dictionary snapshots and extraction settings."""

    name_dictionary: NameDictionary
    gender_dictionary: GenderDictionary
    strategies: Tuple[NameDetectStrategy, ...]
    guard_limits: GuardCheckLimits
    hll_bits: int

    @classmethod
    def from_config(
        cls, config: NameIdentifierConfig, name_dictionary: NameDictionary, gender_dictionary: GenderDictionary
    ) -> "NameStatsExtractor":
        return cls(name_dictionary, gender_dictionary, config.strategies, config.guard_limits, config.hll_bits)

    def __call__(self, text: Optional[str]) -> NameDetectStats:
        return compute_results(
            text,
            self.name_dictionary,
            self.gender_dictionary,
            self.strategies,
            self.guard_limits,
            self.hll_bits,
        )


def compute_results(
    text: Optional[str],
    name_dictionary: NameDictionary,
    gender_dictionary: GenderDictionary,
    strategies: Sequence[NameDetectStrategy],
    guard_limits: GuardCheckLimits,
    hll_bits: int,
) -> NameDetectStats:
    tokens = tokenize(text)
    return NameDetectStats(
        guard_check_quantities=compute_guard_check_quantities(text, tokens, guard_limits, hll_bits),
        dict_check_result=dict_check(tokens, name_dictionary),
        gender_results_by_strategy=compute_results_by_strategy(tokens, strategies, gender_dictionary),
    )
