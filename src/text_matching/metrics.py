from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence, Type

from .models import MatchResult


class SimilarityMetric(ABC):
    name: str = ""
    percentage: bool = True

    @abstractmethod
    def calculate(self, result: MatchResult) -> float: ...

    def is_percentage(self) -> bool:
        return self.percentage

    def format(self, value: float) -> str:
        if self.percentage:
            return f"{value:.2f}%"
        return str(int(value))


class _RatioMetric(SimilarityMetric):
    def calculate(self, result: MatchResult) -> float:
        length_a = len(result.sequence_a)
        length_b = len(result.sequence_b)
        if length_a == 0 and length_b == 0:
            return 0.0
        matched = result.total_matching_tokens
        ratio_a = matched / length_a if length_a else 0.0
        ratio_b = matched / length_b if length_b else 0.0
        return self._combine(ratio_a, ratio_b) * 100.0

    @staticmethod
    @abstractmethod
    def _combine(ratio_a: float, ratio_b: float) -> float: ...


class SymmetricSimilarity(SimilarityMetric):
    """``2m / (|A| + |B|)`` as a percentage."""

    name = "AVG"

    def calculate(self, result: MatchResult) -> float:
        total = len(result.sequence_a) + len(result.sequence_b)
        if total == 0:
            return 0.0
        return 2.0 * result.total_matching_tokens / total * 100.0


class MaximalSimilarity(_RatioMetric):
    name = "MAX"

    @staticmethod
    def _combine(ratio_a: float, ratio_b: float) -> float:
        return max(ratio_a, ratio_b)


class MinimalSimilarity(_RatioMetric):
    name = "MIN"

    @staticmethod
    def _combine(ratio_a: float, ratio_b: float) -> float:
        return min(ratio_a, ratio_b)


class MatchSum(SimilarityMetric):
    name = "LEN"
    percentage = False

    def calculate(self, result: MatchResult) -> float:
        return float(result.total_matching_tokens)


class LongestMatch(SimilarityMetric):
    name = "LONG"
    percentage = False

    def calculate(self, result: MatchResult) -> float:
        return float(result.longest_match_length)


class MetricFactory:
    METRICS: Dict[str, Type[SimilarityMetric]] = {
        metric.name: metric
        for metric in (
            SymmetricSimilarity,
            MaximalSimilarity,
            MinimalSimilarity,
            LongestMatch,
            MatchSum,
        )
    }

    @classmethod
    def create(cls, name: str) -> Optional[SimilarityMetric]:
        if name is None:
            return None
        metric_cls = cls.METRICS.get(name.strip().upper())
        return metric_cls() if metric_cls is not None else None

    @classmethod
    def available(cls) -> Sequence[str]:
        return list(cls.METRICS)


def get_metric(name: str) -> Optional[SimilarityMetric]:
    return MetricFactory.create(name)
