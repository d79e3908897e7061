# SPDX-License-Identifier: AGPL-3.0-only

import re

from patterns.models import ValueType
from patterns.synthesizer import generate_regex_pattern


class TestAccountPatterns:
    """Test account pattern synthesis."""

    def test_letters_and_digits_ranges(self):
        pattern = generate_regex_pattern(["FBNWSTX1234", "SMNWSTX56789"], ValueType.ACCOUNT)
        assert pattern == r"[A-Z]{6,8}\d{4,6}"
        for example in ("FBNWSTX1234", "SMNWSTX56789"):
            assert re.fullmatch(pattern, example)

    def test_floor_of_one(self):
        assert generate_regex_pattern(["A1"], "account") == r"[A-Z]{1,2}\d{1,2}"

    def test_digits_only(self):
        assert generate_regex_pattern(["123456", "12345678"], "account") == r"\d{6,8}"

    def test_no_digits(self):
        assert generate_regex_pattern(["ABCDEF"], "account") == "[A-Z0-9]+"


class TestNamePatterns:
    """Test name pattern synthesis."""

    def test_couple(self):
        pattern = generate_regex_pattern(["John & Mary Smith", "Ann Lee"], ValueType.NAME)
        assert re.fullmatch(pattern, "John & Mary Smith")

    def test_three_words(self):
        pattern = generate_regex_pattern(["John Paul Smith", "Ann Lee"], ValueType.NAME)
        assert re.fullmatch(pattern, "John Paul Smith")
        assert re.fullmatch(pattern, "Ann Lee")

    def test_two_words(self):
        pattern = generate_regex_pattern(["John Smith"], ValueType.NAME)
        assert re.fullmatch(pattern, "Mary Jones")
        assert not re.fullmatch(pattern, "Mary Ann Jones")


class TestGenericPatterns:
    """Test the character-class template used for other types."""

    def test_template_from_first_example(self):
        pattern = generate_regex_pattern(["AB-12 x"], ValueType.DATE)
        assert re.fullmatch(pattern, "XY-99 z")
        assert re.fullmatch(pattern, "XY-99z")
        assert not re.fullmatch(pattern, "XY-9 z")

    def test_later_examples_ignored(self):
        assert generate_regex_pattern(["AB12", "ABCDEF"], "currency") == generate_regex_pattern(["AB12"], "currency")

    def test_special_characters_escaped(self):
        pattern = generate_regex_pattern(["$1.50"], ValueType.CURRENCY)
        assert re.fullmatch(pattern, "$9.99")
        assert not re.fullmatch(pattern, "$9x99")

    def test_empty_examples(self):
        assert generate_regex_pattern([], ValueType.ACCOUNT) == ""
