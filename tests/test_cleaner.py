"""
Typographic cleaning tests.
"""

import pytest

from bookmill.cleaner import NB_SPACE, NB_SPACE_NARROW, Default, French, Off, select_cleaner
from bookmill.options import BookOptions


class TestDefault:
    def test_collapses_whitespace(self):
        assert Default().clean("a  \t b\nc") == "a b c"

    def test_keeps_non_breaking_spaces(self):
        assert Default().clean(f"10{NB_SPACE}km") == f"10{NB_SPACE}km"

    def test_smart_quotes(self):
        assert Default().clean('He said "hi" and it\'s fine') == "He said “hi” and it’s fine"

    def test_smart_quotes_disabled(self):
        assert Default(smart_quotes=False).clean('"hi"') == '"hi"'

    def test_dashes_only_when_enabled(self):
        assert Default().clean("a -- b --- c") == "a -- b --- c"
        assert Default(ligature_dashes=True).clean("a -- b --- c") == "a – b — c"

    def test_guillemets_only_when_enabled(self):
        assert Default(ligature_guillemets=True).clean("<<x>>") == "«x»"


class TestFrench:
    def test_narrow_space_before_high_punctuation(self):
        assert French().clean("Quoi ?") == f"Quoi{NB_SPACE_NARROW}?"
        assert French().clean("Quoi!!") == f"Quoi{NB_SPACE_NARROW}!!"
        assert French().clean("a; b") == f"a{NB_SPACE_NARROW}; b"

    def test_latex_gets_regular_non_breaking_space(self):
        assert French().clean("Quoi ?", tex=True) == f"Quoi{NB_SPACE}?"

    def test_colon(self):
        assert French().clean("Note : voir") == f"Note{NB_SPACE}: voir"

    def test_colon_in_url_untouched(self):
        assert French().clean("https://example.org") == "https://example.org"

    def test_guillemets(self):
        assert French().clean("« mot »") == f"«{NB_SPACE}mot{NB_SPACE}»"


def test_off_leaves_text_alone():
    assert Off().clean('  "x" -- ?') == '  "x" -- ?'


class TestSelectCleaner:
    def test_default_language(self):
        assert select_cleaner(BookOptions()) == Default()

    def test_cleaning_disabled(self):
        options = BookOptions()
        options.set("input.clean", "false")
        options.set("lang", "fr")
        assert select_cleaner(options) == Off()

    @pytest.mark.parametrize("lang", ["fr", "fr_FR", "fr-CA", "FR"])
    def test_french(self, lang):
        options = BookOptions()
        options.set("lang", lang)
        assert isinstance(select_cleaner(options), French)

    def test_parameters_follow_options(self):
        options = BookOptions()
        options.set("input.clean.ligature.dashes", "true")
        options.set("input.clean.smart_quotes", "false")
        assert select_cleaner(options) == Default(smart_quotes=False, ligature_dashes=True)

    def test_equality(self):
        assert Off() == Off()
        assert Default() != French()
        assert Default() != Default(ligature_dashes=True)
