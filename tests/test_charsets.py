"""Tests for character set validation and the built-in sets."""

import pytest

from gifascii.charsets import CHAR_SETS, DEFAULT_CHAR_SET, CharacterSet, get_char_set
from gifascii.errors import CharsetError, ValidationError


class TestCharacterSet:

    def test_valid_set(self):
        charset = CharacterSet(" .:#@")
        assert len(charset) == 5
        assert charset[0] == " "
        assert charset[-1] == "@"
        assert list(charset) == [" ", ".", ":", "#", "@"]

    def test_duplicate_rejected(self):
        with pytest.raises(CharsetError) as exc:
            CharacterSet("aa")
        assert "duplicate" in str(exc.value)
        assert isinstance(exc.value, ValidationError)

    @pytest.mark.parametrize("chars", ["a", "", "".join(chr(0x100 + i) for i in range(257))])
    def test_length_bounds(self, chars):
        with pytest.raises(CharsetError):
            CharacterSet(chars)

    def test_max_length_accepted(self):
        chars = "".join(chr(0x100 + i) for i in range(256))
        assert len(CharacterSet(chars)) == 256

    def test_control_characters_rejected(self):
        with pytest.raises(CharsetError):
            CharacterSet(" \x07#")
        with pytest.raises(CharsetError):
            CharacterSet(" \t#")

    def test_tab_and_newline_allowed_from_file(self):
        charset = CharacterSet.from_file_content(" \t\n#@\n")
        assert charset.chars == " \t\n#@"

    def test_other_controls_rejected_from_file(self):
        with pytest.raises(CharsetError):
            CharacterSet.from_file_content(" \x1b#")

    def test_immutable(self):
        charset = CharacterSet(" #")
        with pytest.raises(AttributeError):
            charset.name = "other"

    def test_equality(self):
        assert CharacterSet(" #") == CharacterSet(" #", name="x")
        assert CharacterSet(" #") != CharacterSet("# ")


class TestBuiltinSets:

    @pytest.mark.parametrize("name", list(CHAR_SETS))
    def test_all_builtin_sets_are_valid(self, name):
        charset = CharacterSet.builtin(name)
        assert charset.chars == CHAR_SETS[name]['chars']

    def test_default(self):
        assert get_char_set() == CharacterSet.builtin(DEFAULT_CHAR_SET)
        assert get_char_set().chars.startswith(" ")

    def test_unknown_name(self):
        with pytest.raises(CharsetError):
            CharacterSet.builtin("nope")
