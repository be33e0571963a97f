import pytest

from text_matching.tokenizers import (
    CharTokenizer,
    SmartTokenizer,
    WordTokenizer,
    available_tokenizers,
    get_tokenizer,
    tokenize,
)


def _values(tokens):
    return [token.value for token in tokens]


@pytest.mark.parametrize("name", ["CHAR", "WORD", "SMART"])
def test_empty_text_yields_no_tokens(name):
    assert get_tokenizer(name).tokenize("") == []


@pytest.mark.parametrize("name", ["CHAR", "WORD", "SMART"])
def test_none_text_is_rejected(name):
    with pytest.raises(ValueError):
        get_tokenizer(name).tokenize(None)


def test_char_tokenizer_offsets():
    tokens = CharTokenizer().tokenize("ab c")
    assert _values(tokens) == ["a", "b", " ", "c"]
    assert [(t.start_offset, t.end_offset) for t in tokens] == [
        (0, 1),
        (1, 2),
        (2, 3),
        (3, 4),
    ]


def test_word_tokenizer_strips_punctuation():
    tokens = WordTokenizer().tokenize("Hello, world!")
    assert _values(tokens) == ["Hello", "world"]
    # offsets bracket the untrimmed span
    assert [(t.start_offset, t.end_offset) for t in tokens] == [(0, 6), (7, 13)]


def test_word_tokenizer_collapses_separators():
    tokens = WordTokenizer().tokenize("  one \r\n\r\n two\nthree  ")
    assert _values(tokens) == ["one", "two", "three"]
    assert tokens[1].start_offset == 11


def test_word_tokenizer_drops_spans_of_pure_punctuation():
    tokens = WordTokenizer().tokenize("( ) {x}")
    assert _values(tokens) == ["x"]
    assert (tokens[0].start_offset, tokens[0].end_offset) == (4, 7)


def test_word_tokenizer_strips_interior_punctuation():
    assert _values(WordTokenizer().tokenize("foo_bar a.b.c why?")) == [
        "foobar",
        "abc",
        "why",
    ]


def test_word_tokenizer_keeps_other_characters():
    assert _values(WordTokenizer().tokenize("don't e-mail\tme")) == [
        "don't",
        "e-mail\tme",
    ]


def test_smart_tokenizer_keeps_decimal_point():
    tokens = SmartTokenizer().tokenize("Pi is 3.14 today")
    assert _values(tokens) == ["Pi", "is", "3.14", "today"]
    assert (tokens[2].start_offset, tokens[2].end_offset) == (6, 10)


def test_smart_tokenizer_numbers_with_separators():
    tokens = SmartTokenizer().tokenize("It costs 1,000.50 dollars. Meet at 12:30.")
    assert _values(tokens) == ["It", "costs", "1,000.50", "dollars", "Meet", "at", "12:30"]


def test_smart_tokenizer_drops_punctuation_in_words():
    assert _values(SmartTokenizer().tokenize("Hello.World x,y")) == [
        "Hello",
        "World",
        "x",
        "y",
    ]


def test_smart_tokenizer_trailing_punctuation_is_not_kept():
    assert _values(SmartTokenizer().tokenize("end 3. ...4")) == ["end", "3", "4"]


def test_smart_tokenizer_mixed_alphanumeric_run():
    assert _values(SmartTokenizer().tokenize("v2.0-beta")) == ["v2.0", "beta"]


def test_lookup_by_name():
    assert isinstance(get_tokenizer("word"), WordTokenizer)
    assert isinstance(get_tokenizer(" SMART "), SmartTokenizer)
    assert get_tokenizer("nope") is None
    assert get_tokenizer(None) is None
    assert list(available_tokenizers()) == ["CHAR", "WORD", "SMART"]


def test_tokenize_unknown_strategy_lists_valid_names():
    with pytest.raises(ValueError, match="CHAR, WORD, SMART"):
        tokenize("text", "LINE")
    assert _values(tokenize("a b", "word")) == ["a", "b"]


def test_smart_tokenizer_ignores_non_decimal_digits():
    # superscripts and vulgar fractions are digits but not decimal digits
    assert _values(SmartTokenizer().tokenize("x² ½ 1².5")) == ["x", "1", "5"]
