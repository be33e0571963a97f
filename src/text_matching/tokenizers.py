from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from .models import Token


def _is_letter_or_digit(char: str) -> bool:
    return char.isalpha() or char.isdecimal()


class TokenizationStrategy(ABC):
    name: str = ""

    @abstractmethod
    def tokenize(self, text: str) -> List[Token]: ...

    @staticmethod
    def _require_text(text: str) -> None:
        if text is None:
            raise ValueError("Text cannot be None")


class CharTokenizer(TokenizationStrategy):
    name = "CHAR"

    def tokenize(self, text: str) -> List[Token]:
        self._require_text(text)
        return [Token(char, idx, idx + 1) for idx, char in enumerate(text)]


class WordTokenizer(TokenizationStrategy):
    """Splits on spaces and line breaks and strips punctuation inside each word.

    Token offsets bracket the separator-delimited span before stripping.
    """

    name = "WORD"
    separators = frozenset(" \r\n")
    special_chars = frozenset(".,:;!_(){}?")

    def tokenize(self, text: str) -> List[Token]:
        self._require_text(text)
        tokens: List[Token] = []
        span_start: Optional[int] = None
        for idx, char in enumerate(text):
            if char in self.separators:
                if span_start is not None:
                    self._emit(tokens, text, span_start, idx)
                    span_start = None
            elif span_start is None:
                span_start = idx
        if span_start is not None:
            self._emit(tokens, text, span_start, len(text))
        return tokens

    def _emit(self, tokens: List[Token], text: str, start: int, end: int) -> None:
        value = "".join(c for c in text[start:end] if c not in self.special_chars)
        if value:
            tokens.append(Token(value, start, end))


class SmartTokenizer(TokenizationStrategy):
    """Alphanumeric runs; runs containing a digit keep interior ``.``, ``:`` and ``,``.

    ``3.14``, ``1,000`` and ``12:30`` stay single tokens, while a trailing
    ``.`` after a number ends it.
    """

    name = "SMART"
    number_chars = frozenset(".:,")

    def tokenize(self, text: str) -> List[Token]:
        self._require_text(text)
        tokens: List[Token] = []
        length = len(text)
        idx = 0
        while idx < length:
            if not _is_letter_or_digit(text[idx]):
                idx += 1
                continue
            start = idx
            while idx < length and _is_letter_or_digit(text[idx]):
                idx += 1
            if any(c.isdecimal() for c in text[start:idx]):
                idx = self._extend_number(text, idx)
            tokens.append(Token(text[start:idx], start, idx))
        return tokens

    def _extend_number(self, text: str, idx: int) -> int:
        length = len(text)
        while idx < length:
            char = text[idx]
            if _is_letter_or_digit(char):
                idx += 1
            elif (
                char in self.number_chars
                and idx + 1 < length
                and _is_letter_or_digit(text[idx + 1])
            ):
                idx += 1
            else:
                break
        return idx


_STRATEGIES: Dict[str, TokenizationStrategy] = {
    strategy.name: strategy
    for strategy in (CharTokenizer(), WordTokenizer(), SmartTokenizer())
}


def get_tokenizer(name: str) -> Optional[TokenizationStrategy]:
    """Look up a strategy by name (case-insensitive); ``None`` when unknown."""
    if name is None:
        return None
    return _STRATEGIES.get(name.strip().upper())


def available_tokenizers() -> Sequence[str]:
    return list(_STRATEGIES)


def tokenize(text: str, strategy_name: str) -> List[Token]:
    strategy = get_tokenizer(strategy_name)
    if strategy is None:
        raise ValueError(
            f"Unknown tokenization strategy: {strategy_name}."
            f" Available strategies: {', '.join(available_tokenizers())}"
        )
    return strategy.tokenize(text)
