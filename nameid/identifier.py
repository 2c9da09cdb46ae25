"""
Human Name Identification

Decides whether a text column holds human names and, if it does, labels every record with the
gender most associated with its first name.

## Overview

Fitting makes a single pass over the column:

1. **Extraction**: every record becomes a ``NameDetectStats`` singleton (guard-check quantities,
   fraction of tokens found in the name dictionary, gender tallies per strategy).
2. **Reduction**: singletons are combined, in parallel and in any order, into one aggregate.
3. **Decision**: the aggregate is turned into ``FittedParameters``:
   - the guard checks must all pass,
   - the averaged dictionary-hit fraction must reach the threshold,
   - the strategy leaving the fewest records with an unknown gender is chosen.

Applying the fitted model is stateless per record: a column not treated as names yields empty
mappings, otherwise each record yields ``{isNameIndicator, originalName, gender}``.

## Guard Checks

All four must hold for the column to be treated as names:

- at least 3/4 of the records have no more than 10 tokens
- at least 3/4 of the records are longer than 3 characters
- fewer than 10 records, or the token count or character length varies (stddev > 0.05)
- fewer than 100 records, or more than 10 distinct values (approximate)

## Usage Examples

```python
from nameid.identifier import HumanNameIdentifier

identifier = HumanNameIdentifier().set_threshold(0.6)
model = identifier.fit(["Alice Smith", "Bob Jones", "Carol White"])
model.metadata
# {"treatAsName": True, "predictedNameProbability": 0.83..., "bestStrategy": "ByIndex(0)"}
model.transform_one("Alice Smith")
# {"isNameIndicator": "true", "originalName": "Alice Smith", "gender": "Female"}
```
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from nameid.config import GuardCheckLimits, NameIdentifierConfig
from nameid.consts import BooleanStrings, Keys, MetadataKeys
from nameid.dictionaries import GenderDictionary, NameDictionary, load_gender_dictionary, load_name_dictionary
from nameid.features import NameStatsExtractor
from nameid.parallel import map_reduce
from nameid.stats import GenderStats, GuardCheckStats, NameDetectStats
from nameid.strategies import ByIndex, NameDetectStrategy, gender_of, parse_strategy_id, token_at_index
from nameid.tokenizer import tokenize


class NameProbabilityError(ValueError):
    """The averaged dictionary score left [0, 1]; the reduction upstream is broken."""


class UnresolvableIndexError(ValueError):
    """A multi-token record has no index to pick its first name from."""


# ════════════════════════════════════════════════════════════════════════════════
# DECISION ENGINE
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class GuardCheckResult:
    below_max_num_tokens: bool
    above_min_char_length: bool
    enough_spread: bool
    enough_unique: bool

    @property
    def passed(self) -> bool:
        return self.below_max_num_tokens and self.above_min_char_length and self.enough_spread and self.enough_unique


def perform_guard_checks(
    stats: GuardCheckStats, limits: GuardCheckLimits, total: Optional[float] = None
) -> GuardCheckResult:
    """
    Evaluate the dataset-level guard checks.

    ``total`` is the (approximate) number of records; it defaults to the count kept in the moments.
    """
    count = stats.count
    total = count if total is None else total
    fraction_below_max = stats.count_below_max_num_tokens / count if count else 0.0
    fraction_above_min = stats.count_above_min_char_length / count if count else 0.0
    spread = max(stats.moments_of_num_tokens.stddev, stats.moments_of_char_length.stddev)
    return GuardCheckResult(
        below_max_num_tokens=fraction_below_max >= limits.min_fraction,
        above_min_char_length=fraction_above_min >= limits.min_fraction,
        enough_spread=total < limits.stddev_bypass_count or spread > limits.min_stddev,
        enough_unique=total < limits.unique_bypass_count
        or stats.approx_num_unique.estimate() > limits.min_num_unique,
    )


def predicted_name_probability(stats: NameDetectStats) -> float:
    probability = stats.dict_check_result.value
    if math.isnan(probability) or not 0.0 <= probability <= 1.0:
        raise NameProbabilityError(f"Predicted name probability must be in [0, 1], got {probability}")
    return probability


def best_strategy(
    gender_results: Mapping[str, GenderStats], strategies: Sequence[NameDetectStrategy]
) -> NameDetectStrategy:
    """Strategy with the fewest unknown genders; ties go to the earliest strategy."""
    if not strategies:
        raise ValueError("at least one strategy is required")
    return min(strategies, key=lambda s: gender_results.get(s.strategy_id, GenderStats.empty()).num_other)


@dataclass(frozen=True)
class FittedParameters:
    treat_as_name: bool
    strategy: NameDetectStrategy
    index_first_name: Optional[int] = None

    @property
    def resolved_index(self) -> Optional[int]:
        """Explicit first-name index if one was set, otherwise the fitted strategy's index."""
        if self.index_first_name is not None:
            return self.index_first_name
        if isinstance(self.strategy, ByIndex):
            return self.strategy.index
        return None

    def with_first_name_index(self, index: Optional[int]) -> "FittedParameters":
        return replace(self, index_first_name=index)

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Any], index_first_name: Optional[int] = None) -> "FittedParameters":
        """Rebuild the fitted parameters from a model's published metadata."""
        try:
            treat_as_name = metadata[MetadataKeys.TREAT_AS_NAME]
            strategy_id = metadata[MetadataKeys.BEST_STRATEGY]
        except KeyError as e:
            raise ValueError(f"metadata is missing {e.args[0]!r}") from e
        if not isinstance(treat_as_name, bool):
            raise ValueError(f"{MetadataKeys.TREAT_AS_NAME} must be a boolean, got {treat_as_name!r}")
        return cls(
            treat_as_name=treat_as_name,
            strategy=parse_strategy_id(strategy_id),
            index_first_name=index_first_name,
        )


@dataclass(frozen=True)
class Decision:
    fitted: FittedParameters
    guard_checks: GuardCheckResult
    predicted_name_probability: float

    @property
    def metadata(self) -> Dict[str, Any]:
        return {
            MetadataKeys.TREAT_AS_NAME: self.fitted.treat_as_name,
            MetadataKeys.PREDICTED_NAME_PROBABILITY: self.predicted_name_probability,
            MetadataKeys.BEST_STRATEGY: self.fitted.strategy.strategy_id,
        }


def decide(stats: NameDetectStats, config: NameIdentifierConfig, total: Optional[float] = None) -> Decision:
    """Turn the fully reduced aggregate into fitted parameters."""
    guard_checks = perform_guard_checks(stats.guard_check_quantities, config.guard_limits, total)
    probability = predicted_name_probability(stats)
    treat_as_name = guard_checks.passed and probability >= config.threshold
    strategy = best_strategy(stats.gender_results_by_strategy, config.strategies)
    return Decision(
        fitted=FittedParameters(treat_as_name=treat_as_name, strategy=strategy),
        guard_checks=guard_checks,
        predicted_name_probability=probability,
    )


# ════════════════════════════════════════════════════════════════════════════════
# ESTIMATOR AND MODEL
# ════════════════════════════════════════════════════════════════════════════════


class HumanNameIdentifier:
    """Fits a HumanNameIdentifierModel from one text column."""

    def __init__(self, config: Optional[NameIdentifierConfig] = None):
        self._config = config or NameIdentifierConfig.create_default()

    @property
    def config(self) -> NameIdentifierConfig:
        return self._config

    def set_threshold(self, value: float) -> "HumanNameIdentifier":
        return HumanNameIdentifier(self._config.with_threshold(value))

    def load_dictionaries(self) -> Tuple[NameDictionary, GenderDictionary]:
        name_dictionary = load_name_dictionary(self._config.name_dictionary_path)
        gender_dictionary = load_gender_dictionary(
            self._config.gender_dictionary_path, self._config.gender_probability_column
        )
        return name_dictionary, gender_dictionary

    def compute_stats(
        self,
        records: Iterable[Optional[str]],
        name_dictionary: Optional[NameDictionary] = None,
        gender_dictionary: Optional[GenderDictionary] = None,
    ) -> NameDetectStats:
        """Single parallel pass producing the reduced aggregate."""
        if name_dictionary is None or gender_dictionary is None:
            loaded_names, loaded_genders = self.load_dictionaries()
            name_dictionary = loaded_names if name_dictionary is None else name_dictionary
            gender_dictionary = loaded_genders if gender_dictionary is None else gender_dictionary
        extractor = NameStatsExtractor.from_config(self._config, name_dictionary, gender_dictionary)
        return map_reduce(records, extractor, n_jobs=self._config.n_jobs, chunk_size=self._config.chunk_size)

    def fit(self, records: Iterable[Optional[str]], total: Optional[float] = None) -> "HumanNameIdentifierModel":
        name_dictionary, gender_dictionary = self.load_dictionaries()
        stats = self.compute_stats(records, name_dictionary, gender_dictionary)
        logging.debug(f"Aggregated name statistics: {stats.to_json()}")

        decision = decide(stats, self._config, total)
        if not decision.guard_checks.passed:
            logging.info(f"Guard checks failed: {decision.guard_checks}")
        logging.info(
            f"Name identification: treatAsName={decision.fitted.treat_as_name} "
            f"predictedNameProbability={decision.predicted_name_probability:.3f} "
            f"bestStrategy={decision.fitted.strategy}"
        )
        return HumanNameIdentifierModel(decision.fitted, gender_dictionary, metadata=decision.metadata)


class HumanNameIdentifierModel:
    """Applies fitted parameters to individual records."""

    def __init__(
        self,
        params: FittedParameters,
        gender_dictionary: GenderDictionary,
        metadata: Optional[Mapping[str, Any]] = None,
    ):
        self._params = params
        self._gender_dictionary = gender_dictionary
        self._metadata = MappingProxyType(dict(metadata or {}))

    @classmethod
    def from_metadata(
        cls,
        metadata: Mapping[str, Any],
        gender_dictionary: GenderDictionary,
        index_first_name: Optional[int] = None,
    ) -> "HumanNameIdentifierModel":
        """Model equivalent to the one that published ``metadata``, without refitting."""
        params = FittedParameters.from_metadata(metadata, index_first_name)
        return cls(params, gender_dictionary, metadata=metadata)

    @property
    def params(self) -> FittedParameters:
        return self._params

    @property
    def treat_as_name(self) -> bool:
        return self._params.treat_as_name

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self._metadata

    def with_first_name_index(self, index: Optional[int]) -> "HumanNameIdentifierModel":
        return HumanNameIdentifierModel(
            self._params.with_first_name_index(index), self._gender_dictionary, metadata=self._metadata
        )

    def transform_one(self, text: Optional[str]) -> Dict[str, str]:
        if not self._params.treat_as_name:
            return {}
        tokens = tokenize(text)
        index = self._params.resolved_index
        if index is None:
            if len(tokens) > 1:
                raise UnresolvableIndexError(
                    f"cannot pick a first name from {len(tokens)} tokens without an index "
                    f"(strategy {self._params.strategy})"
                )
            index = 0
        gender = gender_of(token_at_index(tokens, index), self._gender_dictionary.value)
        return {
            Keys.IS_NAME_INDICATOR: BooleanStrings.TRUE,
            Keys.ORIGINAL_NAME: text or "",
            Keys.GENDER: gender,
        }

    def transform(self, records: Iterable[Optional[str]]) -> List[Dict[str, str]]:
        return [self.transform_one(record) for record in records]


# ════════════════════════════════════════════════════════════════════════════════
# MODULE-LEVEL CONVENIENCE FUNCTIONS
# ════════════════════════════════════════════════════════════════════════════════

_default_identifier: Optional[HumanNameIdentifier] = None


def _get_default_identifier() -> HumanNameIdentifier:
    global _default_identifier
    if _default_identifier is None:
        _default_identifier = HumanNameIdentifier()
    return _default_identifier


def fit(records: Iterable[Optional[str]], threshold: Optional[float] = None) -> HumanNameIdentifierModel:
    """Fit with the default dictionaries, optionally overriding the threshold."""
    identifier = _get_default_identifier()
    if threshold is not None:
        identifier = identifier.set_threshold(threshold)
    return identifier.fit(records)


def identify_names(
    records: Iterable[Optional[str]], threshold: Optional[float] = None
) -> Tuple[Mapping[str, Any], List[Dict[str, str]]]:
    """
    Fit on a column and label every record of it.

    Returns:
        Tuple of (metadata, per-record labels)
    """
    records = list(records)
    model = fit(records, threshold)
    return model.metadata, model.transform(records)
