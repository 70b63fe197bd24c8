"""
Chapter numbering tests.
"""

from bookmill.number import DEFAULT, HIDDEN, UNNUMBERED, Number, chapter_numbers


def test_default_chapters_count_up():
    assert chapter_numbers([DEFAULT, DEFAULT, DEFAULT]) == [1, 2, 3]


def test_specified_resets_the_counter():
    numbers = [DEFAULT, Number.specified(10), DEFAULT, Number.specified(2), DEFAULT]
    assert chapter_numbers(numbers) == [1, 10, 11, 2, 3]


def test_unnumbered_does_not_count():
    assert chapter_numbers([UNNUMBERED, DEFAULT, UNNUMBERED, DEFAULT]) == [None, 1, None, 2]


def test_hidden_counts_but_shows_nothing():
    assert chapter_numbers([HIDDEN, DEFAULT]) == [None, 2]


def test_duplicate_specified_numbers_are_allowed():
    assert chapter_numbers([Number.specified(3), Number.specified(3)]) == [3, 3]


def test_is_numbered():
    assert DEFAULT.is_numbered()
    assert Number.specified(1).is_numbered()
    assert not HIDDEN.is_numbered()
    assert not UNNUMBERED.is_numbered()


def test_str():
    assert str(Number.specified(4)) == "Specified(4)"
    assert str(HIDDEN) == "Hidden"
