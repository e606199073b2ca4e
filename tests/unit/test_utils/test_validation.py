"""
Unit tests for validation utilities
"""

import pytest

from utils.validation import DataValidator, QueryValidator
from utils.exceptions import ValidationError, SearchTermTooShortError, ErrorCodes


@pytest.mark.unit
class TestQueryValidator:
    """Test search term validation"""

    @pytest.mark.parametrize("fragment", ["", "a", "ab", None])
    def test_short_fragments_are_rejected(self, fragment):
        with pytest.raises(SearchTermTooShortError) as exc_info:
            QueryValidator.validate_search_term(fragment)

        assert exc_info.value.error_code == ErrorCodes.VALIDATION_SEARCH_TERM_TOO_SHORT
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("fragment", ["abc", "   ", "wisdom"])
    def test_three_or_more_characters_pass(self, fragment):
        assert QueryValidator.validate_search_term(fragment) == fragment

    def test_too_short_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            QueryValidator.validate_search_term("no")


@pytest.mark.unit
class TestDataValidator:
    """Test data validation"""

    def test_validate_text(self):
        assert DataValidator.validate_text("Carpe diem") == "Carpe diem"

    @pytest.mark.parametrize("text", [None, "", "   \n"])
    def test_blank_text_is_rejected(self, text):
        with pytest.raises(ValidationError) as exc_info:
            DataValidator.validate_text(text)

        assert exc_info.value.context == {"field": "text"}

