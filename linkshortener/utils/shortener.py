"""Shortcode generation utility

This module provides a helper function for generating short, random,
unpredictable codes used as URL slugs.

Functions:
    generate_shortcode(length=7):
        Generate a random Base62 code from a cryptographically strong source.

Example:
    >>> from linkshortener.utils import generate_shortcode
    >>> generate_shortcode()
    'q3ZpT0b'
"""

import secrets

from linkshortener.constants import ShortCode


ALPHABET = ShortCode.ALPHABET
BASE = len(ALPHABET)  # 62: 10 digits + 26 uppercase + 26 lowercase
# Largest multiple of BASE that fits in a byte (248). Bytes at or above it are
# rejected so every symbol is equally likely.
_BYTE_LIMIT = 256 - (256 % BASE)


def generate_shortcode(length: int = ShortCode.LENGTH) -> str:
    """Generate a random, fixed-length Base62 short code.

    Random bytes from `secrets` (the OS CSPRNG) are mapped onto the alphabet
    with `byte % 62`. Bytes >= 248 are discarded to avoid modulo bias; new
    batches of random bytes are drawn until `length` characters are filled.

    Args:
        length (int, optional):
            Exact length of the resulting code. Defaults to 7.

    Returns:
        str: A random alphanumeric code of exactly `length` characters.

    Raises:
        TypeError: If `length` is not an integer.
        ValueError: If `length` is not positive.

    NOTE:
        - Uniqueness is NOT guaranteed here. Collisions are resolved by the
          store's conditional create-if-absent write.
        - 62^7 ≈ 3.5 * 10^12 possible codes.
    """
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')

    chars: list[str] = []
    # On average 248/256 of the bytes are kept, so the first batch almost always suffices
    batch_size = max(ShortCode.BATCH_BYTES, length + length // 2)
    while len(chars) < length:
        for byte in secrets.token_bytes(batch_size):
            if byte >= _BYTE_LIMIT:
                continue
            chars.append(ALPHABET[byte % BASE])
            if len(chars) == length:
                break

    return ''.join(chars)
