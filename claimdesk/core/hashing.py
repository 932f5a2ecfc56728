"""
Seeded Hashing

Polynomial rolling hashes used wherever the prototype needs "random" but
reproducible output. Every function folds the string one code point at a
time with ``h = h * 31 + ord(ch)`` and differs only in how the accumulator
is bounded. Tests depend on these exact values, so never swap in a real
random source.
"""

HASH_MODULUS = 100_000
SEED_MODULUS = 1_000_003
_UINT32_MASK = 0xFFFFFFFF


def hash_string(value: str) -> int:
    """Rolling hash reduced modulo 100 000 after every step."""
    result = 0
    for char in value:
        result = (result * 31 + ord(char)) % HASH_MODULUS
    return result


def seed_from_string(value: str) -> int:
    """Rolling hash reduced modulo the prime 1 000 003 after every step."""
    result = 0
    for char in value:
        result = (result * 31 + ord(char)) % SEED_MODULUS
    return result


def hash_hex(value: str) -> str:
    """Rolling hash truncated to an unsigned 32-bit integer, as lowercase hex."""
    result = 0
    for char in value:
        result = (result * 31 + ord(char)) & _UINT32_MASK
    return format(result, "x")
