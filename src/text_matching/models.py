from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple


@dataclass(frozen=True)
class Text:
    identifier: str
    content: str

    def __post_init__(self) -> None:
        if self.identifier is None or not self.identifier.strip():
            raise ValueError("Identifier cannot be empty")
        if self.content is None:
            raise ValueError("Content cannot be None")

    @property
    def length(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Token:
    """Smallest comparable unit; compared and hashed by ``value`` only."""

    value: str
    start_offset: int = field(default=0, compare=False)
    end_offset: Optional[int] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.value is None:
            raise ValueError("Token value cannot be None")
        if self.end_offset is None:
            object.__setattr__(self, "end_offset", self.start_offset + len(self.value))
        if self.start_offset < 0 or self.end_offset < self.start_offset:
            raise ValueError(
                f"Invalid token offsets [{self.start_offset}, {self.end_offset})"
            )

    @property
    def length(self) -> int:
        return len(self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class Match:
    start_a: int
    start_b: int
    length: int

    def __post_init__(self) -> None:
        if self.start_a < 0 or self.start_b < 0 or self.length <= 0:
            raise ValueError(
                f"Invalid match parameters ({self.start_a}, {self.start_b}, {self.length})"
            )

    @property
    def end_a(self) -> int:
        return self.start_a + self.length

    @property
    def end_b(self) -> int:
        return self.start_b + self.length

    def overlaps_in_a(self, other: "Match") -> bool:
        return not (self.end_a <= other.start_a or other.end_a <= self.start_a)

    def overlaps_in_b(self, other: "Match") -> bool:
        return not (self.end_b <= other.start_b or other.end_b <= self.start_b)

    def overlaps_with(self, other: "Match") -> bool:
        return self.overlaps_in_a(other) or self.overlaps_in_b(other)

    def swapped(self) -> "Match":
        return Match(self.start_b, self.start_a, self.length)

    def __str__(self) -> str:
        return f"Match(length={self.length}, a={self.start_a}, b={self.start_b})"


@dataclass(frozen=True)
class MatchResult:
    """Immutable snapshot of the matches found between two texts.

    Revisions go through :meth:`with_matches`, which returns a new result that
    shares the texts, sequences and parameters of this one.
    """

    text_a: Text
    text_b: Text
    sequence_a: Tuple[Token, ...]
    sequence_b: Tuple[Token, ...]
    matches: Tuple[Match, ...]
    strategy_name: str
    min_match_length: int

    def __post_init__(self) -> None:
        if self.sequence_a is None or self.sequence_b is None:
            raise ValueError("Sequences cannot be None")
        object.__setattr__(self, "sequence_a", tuple(self.sequence_a))
        object.__setattr__(self, "sequence_b", tuple(self.sequence_b))
        object.__setattr__(self, "matches", tuple(self.matches))

    @property
    def a_is_search(self) -> bool:
        return len(self.sequence_a) >= len(self.sequence_b)

    @property
    def search_text(self) -> Text:
        return self.text_a if self.a_is_search else self.text_b

    @property
    def pattern_text(self) -> Text:
        return self.text_b if self.a_is_search else self.text_a

    @property
    def search_sequence(self) -> Tuple[Token, ...]:
        return self.sequence_a if self.a_is_search else self.sequence_b

    @property
    def pattern_sequence(self) -> Tuple[Token, ...]:
        return self.sequence_b if self.a_is_search else self.sequence_a

    @property
    def total_matching_tokens(self) -> int:
        return sum(match.length for match in self.matches)

    @property
    def unique_matching_tokens(self) -> int:
        covered_a: Set[int] = set()
        covered_b: Set[int] = set()
        for match in self.matches:
            covered_a.update(range(match.start_a, match.end_a))
            covered_b.update(range(match.start_b, match.end_b))
        return min(len(covered_a), len(covered_b))

    @property
    def longest_match_length(self) -> int:
        return max((match.length for match in self.matches), default=0)

    def involves(self, id_a: str, id_b: str) -> bool:
        first = self.text_a.identifier
        second = self.text_b.identifier
        return (first == id_a and second == id_b) or (first == id_b and second == id_a)

    def is_first(self, identifier: str) -> bool:
        return self.text_a.identifier == identifier

    def sorted_matches(self, from_identifier: Optional[str] = None) -> List[Match]:
        """Matches ordered by their start in the sequence of ``from_identifier``."""
        if from_identifier is None or self.is_first(from_identifier):
            return sorted(self.matches, key=lambda m: (m.start_a, m.start_b))
        return sorted(self.matches, key=lambda m: (m.start_b, m.start_a))

    def with_matches(self, matches: Iterable[Match]) -> "MatchResult":
        return replace(self, matches=tuple(matches))


def pair_key(id_a: str, id_b: str) -> Tuple[str, str]:
    return (id_a, id_b) if id_a <= id_b else (id_b, id_a)


@dataclass(frozen=True)
class AnalysisResult:
    results: Tuple[MatchResult, ...]
    strategy_name: str
    min_match_length: int
    elapsed_ms: float = 0.0
    _index: Dict[Tuple[str, str], int] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))
        for position, result in enumerate(self.results):
            key = pair_key(result.text_a.identifier, result.text_b.identifier)
            self._index[key] = position

    def get_result(self, id_a: str, id_b: str) -> Optional[MatchResult]:
        position = self._index.get(pair_key(id_a, id_b))
        if position is None:
            return None
        return self.results[position]

    def replace_result(self, new_result: MatchResult) -> "AnalysisResult":
        key = pair_key(new_result.text_a.identifier, new_result.text_b.identifier)
        position = self._index.get(key)
        if position is None:
            raise KeyError(f"No result for pair {key[0]} / {key[1]}")
        results = list(self.results)
        results[position] = new_result
        return AnalysisResult(
            results=tuple(results),
            strategy_name=self.strategy_name,
            min_match_length=self.min_match_length,
            elapsed_ms=self.elapsed_ms,
        )

    def without(self, identifier: str) -> "AnalysisResult":
        """Copy holding only the pairs that do not involve ``identifier``."""
        return AnalysisResult(
            results=tuple(
                r
                for r in self.results
                if identifier not in (r.text_a.identifier, r.text_b.identifier)
            ),
            strategy_name=self.strategy_name,
            min_match_length=self.min_match_length,
            elapsed_ms=self.elapsed_ms,
        )

    def __len__(self) -> int:
        return len(self.results)


@dataclass
class MatchingConfig:
    strategy: str = "WORD"
    min_match_length: int = 3
    max_min_match_length: int = 99
    default_metric: str = "AVG"
    top_k: int = 10
    simhash_bits: int = 64
    simhash_threshold: float = 0.0


def as_tokens(values: Sequence[str]) -> List[Token]:
    """Build value-only tokens, laid out back to back."""
    tokens: List[Token] = []
    offset = 0
    for value in values:
        tokens.append(Token(value, offset, offset + len(value)))
        offset += len(value)
    return tokens
