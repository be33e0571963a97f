import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from simhash import Simhash

from .matcher import SequenceMatcher
from .metrics import MetricFactory, SimilarityMetric
from .models import AnalysisResult, MatchingConfig, MatchResult, Text, Token
from .tokenizers import TokenizationStrategy, available_tokenizers, get_tokenizer


@dataclass
class ExclusionContext:
    """Identifiers left out of ranked listings."""

    excluded: Set[str] = field(default_factory=set)

    def exclude(self, identifier: str) -> None:
        self.excluded.add(identifier)

    def include(self, identifier: str) -> bool:
        if identifier not in self.excluded:
            return False
        self.excluded.discard(identifier)
        return True

    def is_excluded(self, identifier: str) -> bool:
        return identifier in self.excluded

    def allows(self, result: MatchResult) -> bool:
        return not (
            self.is_excluded(result.text_a.identifier)
            or self.is_excluded(result.text_b.identifier)
        )


@dataclass
class RankedResult:
    result: MatchResult
    value: float
    formatted: str


@dataclass
class _PreparedText:
    text: Text
    tokens: Sequence[Token]
    simhash: Optional[int]


class TextMatchingService:
    """Pairwise matching over a registry of texts."""

    def __init__(
        self,
        texts: Iterable[Text] = (),
        config: Optional[MatchingConfig] = None,
        exclusions: Optional[ExclusionContext] = None,
    ) -> None:
        self.config = config or MatchingConfig()
        self.exclusions = exclusions or ExclusionContext()
        self.matcher = SequenceMatcher()
        self._texts: Dict[str, Text] = {}
        self._last_analysis: Optional[AnalysisResult] = None
        for text in texts:
            self.add_text(text)

    @property
    def texts(self) -> Sequence[Text]:
        return [self._texts[key] for key in sorted(self._texts)]

    @property
    def last_analysis(self) -> Optional[AnalysisResult]:
        return self._last_analysis

    def add_text(self, text: Text) -> bool:
        if text is None:
            raise ValueError("Text cannot be None")
        replaced = text.identifier in self._texts
        self._texts[text.identifier] = text
        logging.debug(
            "%s text %s (%d characters)",
            "Replaced" if replaced else "Added",
            text.identifier,
            text.length,
        )
        if replaced:
            self._drop_results(text.identifier)
        return replaced

    def get_text(self, identifier: str) -> Optional[Text]:
        return self._texts.get(identifier)

    def remove_text(self, identifier: str) -> bool:
        if self._texts.pop(identifier, None) is None:
            return False
        self._drop_results(identifier)
        return True

    def _drop_results(self, identifier: str) -> None:
        if self._last_analysis is None:
            return
        kept = self._last_analysis.without(identifier)
        dropped = len(self._last_analysis) - len(kept)
        if dropped:
            logging.debug("Dropped %d stale results for %s", dropped, identifier)
        self._last_analysis = kept

    def clear(self) -> None:
        self._texts = {}
        self._last_analysis = None

    def analyze(
        self,
        strategy_name: Optional[str] = None,
        min_match_length: Optional[int] = None,
    ) -> AnalysisResult:
        strategy_name = strategy_name or self.config.strategy
        if min_match_length is None:
            min_match_length = self.config.min_match_length
        if not 1 <= min_match_length <= self.config.max_min_match_length:
            raise ValueError(
                "Minimum match length must be between 1 and "
                f"{self.config.max_min_match_length}"
            )
        strategy = get_tokenizer(strategy_name)
        if strategy is None:
            raise ValueError(
                f"Unknown tokenization strategy: {strategy_name}."
                f" Available strategies: {', '.join(available_tokenizers())}"
            )
        if len(self._texts) < 2:
            raise ValueError("Need at least 2 texts to perform analysis")

        started = time.perf_counter()
        prepared = [self._prepare_text(text, strategy) for text in self.texts]
        results: List[MatchResult] = []
        skipped = 0
        for i, first in enumerate(prepared):
            for second in prepared[i + 1 :]:
                if not self._passes_prefilter(first, second):
                    skipped += 1
                    matches = []
                else:
                    matches = self.matcher.find_matches(
                        first.tokens, second.tokens, min_match_length
                    )
                results.append(
                    MatchResult(
                        text_a=first.text,
                        text_b=second.text,
                        sequence_a=first.tokens,
                        sequence_b=second.tokens,
                        matches=matches,
                        strategy_name=strategy.name,
                        min_match_length=min_match_length,
                    )
                )
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        self._last_analysis = AnalysisResult(
            results=tuple(results),
            strategy_name=strategy.name,
            min_match_length=min_match_length,
            elapsed_ms=elapsed_ms,
        )
        logging.info(
            "Analysis of %d pairs (%s, mml=%d) took %.0fms",
            len(results),
            strategy.name,
            min_match_length,
            elapsed_ms,
        )
        if skipped:
            logging.debug(
                "%d pairs skipped: simhash below %.3f",
                skipped,
                self.config.simhash_threshold,
            )
        return self._last_analysis

    def get_result(self, id_a: str, id_b: str) -> MatchResult:
        if self._last_analysis is None:
            raise KeyError("No analysis has been performed")
        result = self._last_analysis.get_result(id_a, id_b)
        if result is None:
            raise KeyError(f"No result for pair {id_a} / {id_b}")
        return result

    def revise_result(self, new_result: MatchResult) -> AnalysisResult:
        if self._last_analysis is None:
            raise KeyError("No analysis has been performed")
        self._last_analysis = self._last_analysis.replace_result(new_result)
        logging.debug(
            "Revised %s / %s: %d matches",
            new_result.text_a.identifier,
            new_result.text_b.identifier,
            len(new_result.matches),
        )
        return self._last_analysis

    def score(
        self, id_a: str, id_b: str, metric_name: Optional[str] = None
    ) -> Tuple[float, str]:
        metric = self._resolve_metric(metric_name)
        value = metric.calculate(self.get_result(id_a, id_b))
        return value, metric.format(value)

    def top_results(
        self, metric_name: Optional[str] = None, limit: Optional[int] = None
    ) -> List[RankedResult]:
        if self._last_analysis is None:
            raise KeyError("No analysis has been performed")
        metric = self._resolve_metric(metric_name)
        limit = self.config.top_k if limit is None else limit
        ranked = [
            RankedResult(result=result, value=value, formatted=metric.format(value))
            for result, value in (
                (result, metric.calculate(result))
                for result in self._last_analysis.results
                if self.exclusions.allows(result)
            )
        ]
        ranked.sort(
            key=lambda item: (
                -item.value,
                item.result.text_a.identifier,
                item.result.text_b.identifier,
            )
        )
        return ranked[: max(limit, 0)]

    def _resolve_metric(self, metric_name: Optional[str]) -> SimilarityMetric:
        name = metric_name or self.config.default_metric
        metric = MetricFactory.create(name)
        if metric is None:
            raise ValueError(
                f"Unknown metric: {name}."
                f" Available metrics: {', '.join(MetricFactory.available())}"
            )
        return metric

    def _prepare_text(
        self, text: Text, strategy: TokenizationStrategy
    ) -> _PreparedText:
        tokens = strategy.tokenize(text.content)
        simhash = None
        if self.config.simhash_threshold > 0:
            simhash = self._compute_simhash(tokens)
        return _PreparedText(text=text, tokens=tokens, simhash=simhash)

    def _passes_prefilter(self, first: _PreparedText, second: _PreparedText) -> bool:
        threshold = self.config.simhash_threshold
        if threshold <= 0:
            return True
        similarity = self._simhash_similarity(first.simhash, second.simhash)
        if similarity < threshold:
            logging.debug(
                "Pair %s -> %s skipped: simhash %.3f < %.3f",
                first.text.identifier,
                second.text.identifier,
                similarity,
                threshold,
            )
            return False
        return True

    def _compute_simhash(self, tokens: Sequence[Token]) -> int:
        if not tokens:
            return 0
        values = [token.value for token in tokens]
        return Simhash(values, f=self.config.simhash_bits).value

    def _simhash_similarity(self, hash_a: int, hash_b: int) -> float:
        if hash_a == hash_b:
            return 1.0
        bits = max(1, self.config.simhash_bits)
        xor = hash_a ^ hash_b
        distance = xor.bit_count()
        return 1.0 - (distance / bits)
