"""Unit tests for the generate_shortcode function in shortener.py.

Test coverage includes:

1. Basic functionality
   - Ensures the function returns a string of the requested length.

2. Output format
   - All characters belong to the Base62 alphabet.

3. Randomness
   - Consecutive calls produce different codes.
   - Bytes at or above the rejection limit are discarded.

4. Error handling
   - Non-integer and non-positive lengths raise.
"""

import string
from unittest.mock import patch

import pytest

from linkshortener.utils import generate_shortcode
from linkshortener.utils import shortener


BASE62 = set(string.digits + string.ascii_uppercase + string.ascii_lowercase)


# -------------------------------
# 1. Basic functionality
# -------------------------------


def test_generate_shortcode_returns_string_of_default_length():
    result = generate_shortcode()
    assert isinstance(result, str)
    assert len(result) == 7


@pytest.mark.parametrize('length', [1, 6, 7, 12, 64])
def test_generate_shortcode_respects_length(length):
    assert len(generate_shortcode(length)) == length


# -------------------------------
# 2. Output format
# -------------------------------


def test_generate_shortcode_uses_base62_alphabet():
    for _ in range(200):
        assert set(generate_shortcode()) <= BASE62


def test_alphabet_order():
    """Ensure byte values map onto digits, then uppercase, then lowercase."""
    assert shortener.ALPHABET[0] == '0'
    assert shortener.ALPHABET[10] == 'A'
    assert shortener.ALPHABET[36] == 'a'
    assert shortener.BASE == 62


# -------------------------------
# 3. Randomness
# -------------------------------


def test_generate_shortcode_is_not_repeating():
    codes = {generate_shortcode() for _ in range(1000)}
    assert len(codes) == 1000


def test_generate_shortcode_maps_bytes_modulo_62():
    with patch.object(shortener.secrets, 'token_bytes', return_value=bytes([0, 10, 36, 61, 62, 73, 98, 1, 2, 3])):
        assert generate_shortcode(7) == '0Aaz0Ba'


def test_generate_shortcode_rejects_biased_bytes():
    """Ensure bytes >= 248 are skipped and another batch is drawn when needed."""
    batches = iter([bytes([255, 248, 1, 249, 2, 250, 251, 252, 253, 254]), bytes([3, 4, 5, 6, 7, 8, 9, 10, 11, 12])])
    with patch.object(shortener.secrets, 'token_bytes', side_effect=lambda n: next(batches)) as token_bytes:
        assert generate_shortcode(7) == '1234567'
        assert token_bytes.call_count == 2


# -------------------------------
# 4. Error handling
# -------------------------------


@pytest.mark.parametrize('length', ['7', 7.0, None, True])
def test_generate_shortcode_with_invalid_length_type(length):
    with pytest.raises(TypeError):
        generate_shortcode(length)


@pytest.mark.parametrize('length', [0, -1])
def test_generate_shortcode_with_non_positive_length(length):
    with pytest.raises(ValueError, match='positive'):
        generate_shortcode(length)
