"""
SM3 compression function and final-block padding (GB/T 32905-2016).
All words are plain ints kept in the unsigned 32-bit range.
"""

from __future__ import annotations

from typing import Tuple

ChainingValue = Tuple[int, int, int, int, int, int, int, int]

BLOCK_SIZE = 64
DIGEST_SIZE = 32
LENGTH_OFFSET = 56

IV: ChainingValue = (
    0x7380166F, 0x4914B2B9, 0x172442D7, 0xDA8A0600,
    0xA96F30BC, 0x163138AA, 0xE38DEE4D, 0xB0FB0E4E,
)

T_LOW = 0x79CC4519
T_HIGH = 0x7A879D8A

MASK32 = 0xFFFFFFFF


def rotl(x: int, n: int) -> int:
    """Circular left shift of a 32-bit word."""
    n &= 31
    if n == 0:
        return x
    return ((x << n) | (x >> (32 - n))) & MASK32


def p0(x: int) -> int:
    return x ^ rotl(x, 9) ^ rotl(x, 17)


def p1(x: int) -> int:
    return x ^ rotl(x, 15) ^ rotl(x, 23)


def ff(j: int, x: int, y: int, z: int) -> int:
    if j < 16:
        return x ^ y ^ z
    return (x & y) | (x & z) | (y & z)


def gg(j: int, x: int, y: int, z: int) -> int:
    if j < 16:
        return x ^ y ^ z
    return (x & y) | (~x & z & MASK32)


# rotl(T(j), j) only depends on the round index
_ROUND_CONSTANTS = tuple(
    rotl(T_LOW if j < 16 else T_HIGH, j) for j in range(64)
)


def expand_block(block: bytes) -> Tuple[list, list]:
    """
    Message expansion.

    Returns (W, W1) where W holds the 68 expanded words and W1[j] = W[j] ^ W[j+4].
    """
    w = [int.from_bytes(block[i:i + 4], "big") for i in range(0, BLOCK_SIZE, 4)]
    for j in range(16, 68):
        x = w[j - 16] ^ w[j - 9] ^ rotl(w[j - 3], 15)
        w.append(p1(x) ^ rotl(w[j - 13], 7) ^ w[j - 6])
    w1 = [w[j] ^ w[j + 4] for j in range(64)]
    return w, w1


def compress(chaining_value: ChainingValue, block: bytes) -> ChainingValue:
    """
    Run the SM3 compression function over one 64-byte block.

    Pure: returns the next chaining value and leaves both arguments untouched.
    """
    w, w1 = expand_block(block)
    a, b, c, d, e, f, g, h = chaining_value

    for j in range(64):
        a12 = rotl(a, 12)
        ss1 = rotl((a12 + e + _ROUND_CONSTANTS[j]) & MASK32, 7)
        ss2 = ss1 ^ a12
        tt1 = (ff(j, a, b, c) + d + ss2 + w1[j]) & MASK32
        tt2 = (gg(j, e, f, g) + h + ss1 + w[j]) & MASK32
        d = c
        c = rotl(b, 9)
        b = a
        a = tt1
        h = g
        g = rotl(f, 19)
        f = e
        e = p0(tt2)

    return (
        chaining_value[0] ^ a,
        chaining_value[1] ^ b,
        chaining_value[2] ^ c,
        chaining_value[3] ^ d,
        chaining_value[4] ^ e,
        chaining_value[5] ^ f,
        chaining_value[6] ^ g,
        chaining_value[7] ^ h,
    )


def finalize(
    chaining_value: ChainingValue,
    block: bytearray,
    fill: int,
    total_bits: int,
) -> ChainingValue:
    """
    Pad the partially filled final block and produce the digest words.

    `block` is the 64-byte working buffer (modified in place) holding `fill`
    pending bytes. Padding always happens, so a message that ends exactly on a
    block boundary still costs one more compression.
    """
    if not 0 <= fill < BLOCK_SIZE:
        raise ValueError(f"fill must be in [0, {BLOCK_SIZE}), got {fill}")

    v = chaining_value
    block[fill] = 0x80
    fill += 1

    if fill > LENGTH_OFFSET:
        block[fill:BLOCK_SIZE] = bytes(BLOCK_SIZE - fill)
        v = compress(v, bytes(block))
        fill = 0

    block[fill:LENGTH_OFFSET] = bytes(LENGTH_OFFSET - fill)
    block[LENGTH_OFFSET:BLOCK_SIZE] = (total_bits & 0xFFFFFFFFFFFFFFFF).to_bytes(8, "big")
    return compress(v, bytes(block))


def words_to_bytes(words: ChainingValue) -> bytes:
    """Serialize the final chaining value as the 32-byte digest."""
    return b"".join(word.to_bytes(4, "big") for word in words)
