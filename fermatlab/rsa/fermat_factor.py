# fermat_factor.py
"""
Generalized Fermat factorization for close (or proportionally close) primes.

Finds p, q with N = p*q whenever |a*p - b*q| < 2^(magnitude+1) * N^(1/4),
where a, b are the weights after doubling. The search costs 4^magnitude steps.
"""
import logging
import math
from fractions import Fraction

from fermatlab.rsa.errors import FactorizationCancelled, FactorizationFailed

log = logging.getLogger(__name__)


def exact_sqrt(n: int):
    """Return (True, root) if n is a perfect square, else (False, floor root)."""
    r = math.isqrt(n)
    return r * r == n, r


def is_square(n: int) -> bool:
    return exact_sqrt(n)[0]


def _split_ratio(a, b):
    # Fraction(3, 2) or (3, 2); never reduced here, the caller's a/b is used as given
    if isinstance(a, Fraction):
        if b != 1:
            raise ValueError("pass either a Fraction or two integers a, b")
        return a.numerator, a.denominator
    for term in (a, b):
        if isinstance(term, bool) or not isinstance(term, int):
            raise ValueError(f"ratio terms must be integers, got {a!r}/{b!r}")
    return a, b


def parse_ratio(text: str):
    """'3/2' -> (3, 2); '1.5' -> (3, 2); both terms must be positive."""
    if "/" in text:
        a, b = text.split("/", 1)
        a, b = int(a), int(b)
    else:
        frac = Fraction(text)
        a, b = frac.numerator, frac.denominator
    if a <= 0 or b <= 0:
        raise ValueError(f"ratio must be positive: {text!r}")
    return a, b


def factor_proportionally(n: int, magnitude: int = 0, a=1, b=1, should_stop=None):
    """
    Find (p, q) with p*q == n when a*p and b*q are close.

    Args:
      n: the modulus.
      magnitude: search window exponent; 4^magnitude guesses are tried.
      a, b: positive weights (or a Fraction as `a`), lambda = a/b.
      should_stop: optional zero-argument callable, polled once per guess.

    Returns:
      (p, q) such that p*q == n.

    Raises:
      FactorizationFailed when the window is exhausted,
      FactorizationCancelled when should_stop() returned True.
    """
    a, b = _split_ratio(a, b)
    if n <= 0:
        raise ValueError("n must be positive")
    if magnitude < 0:
        raise ValueError("magnitude must be >= 0")
    if a <= 0 or b <= 0:
        raise ValueError("ratio terms must be positive")

    # both weights even so (g - s) and (g + s) split exactly
    num = a + a
    denom = b + b
    k = num * denom * n

    guess = math.isqrt(k)
    diff = guess * guess - k
    max_steps = 1 << (magnitude + magnitude)
    log.debug("fermat search: %d-bit N, magnitude=%d, ratio=%d/%d",
              n.bit_length(), magnitude, a, b)

    for step in range(1, max_steps + 1):
        # (g+1)^2 - k = (g^2 - k) + 2g + 1
        diff += guess + guess + 1
        guess += 1

        if should_stop is not None and should_stop():
            raise FactorizationCancelled(n, magnitude, (a, b), step)

        square, root = exact_sqrt(diff)
        if not square:
            continue
        p_multiple = guess - root
        q_multiple = guess + root
        if p_multiple % num == 0 and q_multiple % denom == 0:
            p, q = p_multiple // num, q_multiple // denom
        elif p_multiple % denom == 0 and q_multiple % num == 0:
            p, q = p_multiple // denom, q_multiple // num
        else:
            continue
        # trivial splits (1, n) say nothing about n
        if p <= 1 or q <= 1 or p * q != n:
            continue
        log.info("fermat search: factors found after %d steps", step)
        return p, q

    log.info("fermat search: exhausted %d steps", max_steps)
    raise FactorizationFailed(n, magnitude, (a, b), max_steps)


def factor_nearly(n: int, magnitude: int):
    """Factor n when |p - q| < 2^(magnitude+1) * N^(1/4)."""
    return factor_proportionally(n, magnitude, 1, 1)


def factor_closely(n: int):
    """Factor n when |p - q| < 2 * N^(1/4)."""
    return factor_nearly(n, 0)


if __name__ == "__main__":
    from fermatlab.rsa.weak_rsa_gen import gen_weak_rsa
    key = gen_weak_rsa(bits=256)
    n = key['n']
    print("N=", n)
    print(factor_closely(n))
