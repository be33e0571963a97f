from typing import List, Sequence, Set, Tuple

from .models import Match, Token


class SequenceMatcher:
    """Greedy non-overlapping matcher over two token sequences.

    The longer sequence is scanned for windows of the shorter one, from the
    longest window down to ``min_match_length``. The first equal window at a
    given length claims its positions in both sequences, so later (shorter)
    windows can never overlap it. Positions in the returned matches are always
    relative to ``(sequence_a, sequence_b)``.
    """

    def find_matches(
        self,
        sequence_a: Sequence[Token],
        sequence_b: Sequence[Token],
        min_match_length: int,
    ) -> List[Match]:
        if sequence_a is None or sequence_b is None:
            raise ValueError("Sequences cannot be None")
        if min_match_length <= 0:
            raise ValueError("Minimum match length must be positive")

        a_is_search = len(sequence_a) >= len(sequence_b)
        if a_is_search:
            search, pattern = sequence_a, sequence_b
        else:
            search, pattern = sequence_b, sequence_a

        raw = self._find_raw_matches(
            [token.value for token in search],
            [token.value for token in pattern],
            min_match_length,
        )
        if a_is_search:
            return [Match(s, p, length) for s, p, length in raw]
        return [Match(p, s, length) for s, p, length in raw]

    def _find_raw_matches(
        self,
        search: Sequence[str],
        pattern: Sequence[str],
        min_match_length: int,
    ) -> List[Tuple[int, int, int]]:
        matches: List[Tuple[int, int, int]] = []
        excluded_search: Set[int] = set()
        excluded_pattern: Set[int] = set()
        search_length = len(search)
        pattern_length = len(pattern)

        for window in range(pattern_length, min_match_length - 1, -1):
            for pattern_start in range(pattern_length - window + 1):
                pattern_end = pattern_start + window
                if self._is_excluded(pattern_start, pattern_end, excluded_pattern):
                    continue
                window_values = pattern[pattern_start:pattern_end]
                for search_start in range(search_length - window + 1):
                    search_end = search_start + window
                    if self._is_excluded(search_start, search_end, excluded_search):
                        continue
                    if search[search_start:search_end] == window_values:
                        matches.append((search_start, pattern_start, window))
                        excluded_search.update(range(search_start, search_end))
                        excluded_pattern.update(range(pattern_start, pattern_end))
                        break
        return matches

    @staticmethod
    def _is_excluded(start: int, end: int, excluded: Set[int]) -> bool:
        if not excluded:
            return False
        return any(position in excluded for position in range(start, end))


def find_matches(
    sequence_a: Sequence[Token],
    sequence_b: Sequence[Token],
    min_match_length: int,
) -> List[Match]:
    return SequenceMatcher().find_matches(sequence_a, sequence_b, min_match_length)
