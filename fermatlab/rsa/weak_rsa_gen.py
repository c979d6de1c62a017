# weak_rsa_gen.py
# Generate RSA keys for the lab.
# - gen_weak_rsa: primes with a*p ~ b*q, so the Fermat search recovers them
# - gen_strong_rsa: independent primes with an enforced p-q gap (negative case)
# - Miller–Rabin + small-prime trial division, randomness from secrets

import secrets
from math import gcd

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa as rsa_mod

# ======== CONFIGURABLE PARAMETERS ========
DEFAULT_PUBLIC_EXPONENT = 65537
MR_ROUNDS = 40
MAX_TRIES = 1000
# ========================================

_SMALL_PRIMES = [
    2,3,5,7,11,13,17,19,23,29,31,37,41,43,47,
    53,59,61,67,71,73,79,83,89,97,101,103,107,109,113
]


def is_probable_prime(n: int, rounds: int = MR_ROUNDS) -> bool:
    if n < 2:
        return False
    for p in _SMALL_PRIMES:
        if n % p == 0:
            return n == p

    # write n-1 = d*2^s with d odd
    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for _ in range(rounds):
        a = secrets.randbelow(n - 3) + 2  # in [2, n-2]
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def _rand_odd_bits(bits: int) -> int:
    n = secrets.randbits(bits)
    n |= (1 << (bits - 1))   # force top bit -> exact bit length
    n |= 1                   # make odd
    return n


def gen_prime(bits: int) -> int:
    if bits < 8:
        raise ValueError("bits must be >= 8")
    while True:
        cand = _rand_odd_bits(bits)
        if is_probable_prime(cand):
            return cand


def next_prime(n: int) -> int:
    """Smallest probable prime strictly greater than n."""
    if n < 2:
        return 2
    cand = n + 1 if n % 2 == 0 else n + 2
    while not is_probable_prime(cand):
        cand += 2
    return cand


def gen_weak_rsa(bits: int = 512, gap_bits: int | None = None,
                 a: int = 1, b: int = 1, e: int = DEFAULT_PUBLIC_EXPONENT) -> dict:
    """
    Generate RSA where a*p and b*q are close: q = next_prime(a*p/b + offset).

    Args:
      bits: bit length of p (q is about bits + log2(a/b)).
      gap_bits: offset is drawn below 2^gap_bits; None means no offset,
        i.e. q is the first prime after a*p/b.
      a, b: positive weights, lambda = a/b.
      e: public exponent.

    Returns:
      dict: {'p','q','n','e','d'}
    """
    if a <= 0 or b <= 0:
        raise ValueError("a and b must be positive")
    for _ in range(MAX_TRIES):
        p = gen_prime(bits)
        offset = secrets.randbits(gap_bits) if gap_bits else 0
        q = next_prime(a * p // b + offset)
        if p == q:
            continue
        phi = (p - 1) * (q - 1)
        if gcd(e, phi) != 1:
            continue
        d = pow(e, -1, phi)
        return {'p': p, 'q': q, 'n': p * q, 'e': e, 'd': d}
    raise RuntimeError(f"couldn't build a weak key after {MAX_TRIES} tries")


def gen_strong_rsa(bits: int = 512, min_gap_bits: int = 128,
                   e: int = DEFAULT_PUBLIC_EXPONENT) -> dict:
    """
    Generate RSA with independent primes and |p - q| >= 2^min_gap_bits,
    which puts the key far outside any practical Fermat window.
    """
    for _ in range(MAX_TRIES):
        p = gen_prime(bits)
        q = gen_prime(bits)
        if abs(p - q).bit_length() <= min_gap_bits:
            continue
        phi = (p - 1) * (q - 1)
        if gcd(e, phi) != 1:
            continue
        d = pow(e, -1, phi)
        return {'p': p, 'q': q, 'n': p * q, 'e': e, 'd': d}
    raise RuntimeError(f"couldn't find primes with gap >= 2^{min_gap_bits} after {MAX_TRIES} tries")


def build_public_pem(n: int, e: int = DEFAULT_PUBLIC_EXPONENT) -> bytes:
    pubkey = rsa_mod.RSAPublicNumbers(e, n).public_key()
    return pubkey.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )


# ---- quick manual test ------------------------------------------------------
if __name__ == "__main__":
    key = gen_weak_rsa(bits=256)
    print("[weak] p=", key['p'], "q=", key['q'], "gap=", abs(key['p'] - key['q']))

    strong = gen_strong_rsa(bits=256, min_gap_bits=200)
    print("[strong] gap bits=", abs(strong['p'] - strong['q']).bit_length())
