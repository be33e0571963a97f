"""Copy-on-write revisions of a :class:`MatchResult`.

Every function returns a new result; the one passed in is never modified.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .errors import MatchBoundsError, MatchOverlapError
from .models import Match, MatchResult, Token


@dataclass(frozen=True)
class MatchContext:
    first_identifier: str
    second_identifier: str
    first_context: str
    second_context: str
    first_span: int
    second_span: int

    def render(self) -> str:
        return "\n".join(
            [
                self.first_context,
                "^" * self.first_span,
                self.second_context,
                "^" * self.second_span,
            ]
        )


def validate_match(
    match: Match, existing: Iterable[Match], ignore: Optional[Match] = None
) -> None:
    for other in existing:
        if ignore is not None and other == ignore:
            continue
        if match.overlaps_with(other):
            raise MatchOverlapError(match, other)


def _check_bounds(result: MatchResult, match: Match) -> None:
    length_a = len(result.sequence_a)
    length_b = len(result.sequence_b)
    if match.end_a > length_a or match.end_b > length_b:
        raise MatchBoundsError(match, length_a, length_b)


def _require_present(result: MatchResult, match: Match) -> None:
    if match not in result.matches:
        raise KeyError(f"{match} is not part of the result")


def add_match(result: MatchResult, match: Match) -> MatchResult:
    _check_bounds(result, match)
    validate_match(match, result.matches)
    return result.with_matches(result.matches + (match,))


def discard_match(result: MatchResult, match: Match) -> MatchResult:
    _require_present(result, match)
    return result.with_matches(m for m in result.matches if m != match)


def _replace(result: MatchResult, old: Match, new: Match) -> MatchResult:
    return result.with_matches(new if m == old else m for m in result.matches)


def extend_match(result: MatchResult, match: Match, amount: int) -> MatchResult:
    """Grow ``match`` by ``amount`` tokens at the end, or at the start when negative."""
    if amount == 0:
        raise ValueError("Extension length cannot be 0")
    _require_present(result, match)
    if amount > 0:
        extended = Match(match.start_a, match.start_b, match.length + amount)
    else:
        start_a = match.start_a + amount
        start_b = match.start_b + amount
        if start_a < 0 or start_b < 0:
            raise ValueError("Extension would result in negative start positions")
        extended = Match(start_a, start_b, match.length - amount)
    _check_bounds(result, extended)
    validate_match(extended, result.matches, ignore=match)
    return _replace(result, match, extended)


def truncate_match(result: MatchResult, match: Match, amount: int) -> MatchResult:
    """Shrink ``match`` from the end, or from the start when ``amount`` is negative.

    The truncated match keeps at least one token.
    """
    if amount == 0:
        raise ValueError("Truncation length cannot be 0")
    _require_present(result, match)
    if amount > 0:
        truncated = Match(match.start_a, match.start_b, max(1, match.length - amount))
    else:
        shift = min(-amount, match.length - 1)
        truncated = Match(
            match.start_a + shift, match.start_b + shift, match.length - shift
        )
    return _replace(result, match, truncated)


def _span(sequence: Sequence[Token], start: int, length: int):
    first = sequence[start]
    last = sequence[min(start + length, len(sequence)) - 1]
    return first.start_offset, last.end_offset


def _excerpt(text: str, start: int, end: int, context_size: int) -> str:
    context_start = max(0, start - context_size)
    context_end = min(len(text), end + context_size)
    prefix = "..." if context_start > 0 else ""
    suffix = "..." if context_end < len(text) else ""
    return f"{prefix}{text[context_start:context_end]}{suffix}"


def match_context(
    result: MatchResult,
    match: Match,
    context_size: int = 0,
    from_identifier: Optional[str] = None,
) -> MatchContext:
    if context_size < 0:
        raise ValueError(f"Context size must be non-negative, got: {context_size}")
    _require_present(result, match)
    _check_bounds(result, match)
    swap = from_identifier is not None and not result.is_first(from_identifier)

    first_text, second_text = result.text_a, result.text_b
    first_seq, second_seq = result.sequence_a, result.sequence_b
    first_pos, second_pos = match.start_a, match.start_b
    if swap:
        first_text, second_text = second_text, first_text
        first_seq, second_seq = second_seq, first_seq
        first_pos, second_pos = second_pos, first_pos

    start_1, end_1 = _span(first_seq, first_pos, match.length)
    start_2, end_2 = _span(second_seq, second_pos, match.length)
    return MatchContext(
        first_identifier=first_text.identifier,
        second_identifier=second_text.identifier,
        first_context=_excerpt(first_text.content, start_1, end_1, context_size),
        second_context=_excerpt(second_text.content, start_2, end_2, context_size),
        first_span=end_1 - start_1,
        second_span=end_2 - start_2,
    )
