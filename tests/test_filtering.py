from stranger_talk.config import FilterConfig
from stranger_talk.filtering import WordFilter


def _default_filter() -> WordFilter:
    return WordFilter.from_iterable(FilterConfig().banned_words)


def test_clean_text_passes_unchanged() -> None:
    result = _default_filter().filter("Hello there, how are you?")
    assert result.clean
    assert result.display_text == "Hello there, how are you?"


def test_banned_word_is_masked_case_insensitively() -> None:
    result = _default_filter().filter("This is SPAM and a Scam")
    assert not result.clean
    assert result.display_text == "This is **** and a ****"


def test_substring_matches_are_masked() -> None:
    result = _default_filter().filter("sexy drugstore")
    assert not result.clean
    assert result.display_text == "***y *****tore"


def test_empty_text_is_clean() -> None:
    assert _default_filter().filter("").clean


def test_custom_mask_character() -> None:
    word_filter = WordFilter.from_iterable({"bad"}, mask_char="#")
    assert word_filter.mask("so bad") == "so ###"
    assert word_filter.contains_banned("BAD idea")
    assert not word_filter.contains_banned("good idea")


def test_empty_denylist_never_matches() -> None:
    word_filter = WordFilter(set())
    assert word_filter.filter("anything spam").clean
