"""
Unit tests for conversation title derivation.
"""

from llynx.models.conversation import DEFAULT_TITLE, derive_title


def test_short_message_is_the_title():
    assert derive_title("Hello") == "Hello"


def test_keeps_first_eight_words():
    content = "one two three four five six seven eight nine ten"
    assert derive_title(content) == "one two three four five six seven eight"


def test_whitespace_is_collapsed():
    assert derive_title("  how\n\tdo   magnets work  ") == "how do magnets work"


def test_long_words_are_cut_with_ellipsis():
    content = " ".join(["supercalifragilistic"] * 8)

    title = derive_title(content)

    assert len(title) <= 80
    assert title.endswith("…")


def test_empty_content_uses_default():
    assert derive_title("") == DEFAULT_TITLE
    assert derive_title("   \n ") == DEFAULT_TITLE
