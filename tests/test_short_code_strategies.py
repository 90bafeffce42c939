"""
Tests for short code generation strategies.
"""
import pytest

from mailshort_app.services.short_code_strategies import (
    BASE62_ALPHABET,
    RandomShortCodeStrategy,
)


class TestRandomStrategy:
    """Test random generation strategy"""

    def test_alphabet_is_62_alphanumerics(self):
        assert len(BASE62_ALPHABET) == 62
        assert len(set(BASE62_ALPHABET)) == 62
        assert BASE62_ALPHABET.isalnum()

    def test_generates_exact_length(self):
        strategy = RandomShortCodeStrategy(length=8)

        for _ in range(50):
            assert len(strategy.generate()) == 8

    def test_uses_only_alphabet_characters(self):
        strategy = RandomShortCodeStrategy()

        for _ in range(50):
            assert set(strategy.generate()) <= set(BASE62_ALPHABET)

    def test_generates_different_codes(self):
        """Random strategy should generate different codes"""
        strategy = RandomShortCodeStrategy()

        codes = {strategy.generate() for _ in range(100)}

        # Should generate mostly unique codes (62^8 combinations)
        assert len(codes) > 95

    def test_rejects_non_positive_length(self):
        with pytest.raises(ValueError):
            RandomShortCodeStrategy(length=0)
