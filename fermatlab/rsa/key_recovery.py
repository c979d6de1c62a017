# key_recovery.py
"""
Rebuild an RSA private key from its public half and the factors of N.
"""
import logging
from math import gcd

from cryptography.hazmat.primitives.asymmetric import rsa as rsa_mod

from fermatlab.rsa.errors import InvalidKeyMaterial

log = logging.getLogger(__name__)


def egcd(a: int, b: int):
    """Extended Euclid: return (g, x, y) with a*x + b*y == g == gcd(a, b)."""
    x0, x1, y0, y1 = 1, 0, 0, 1
    while b:
        q = a // b
        a, b = b, a - q * b
        x0, x1 = x1, x0 - q * x1
        y0, y1 = y1, y0 - q * y1
    return a, x0, y0


def private_exponent(e: int, p: int, q: int) -> int:
    """d = e^-1 mod phi(N), normalized into [0, phi)."""
    phi = (p - 1) * (q - 1)
    g, x, _ = egcd(e, phi)
    if g != 1:
        raise InvalidKeyMaterial(f"gcd(e, phi) = {g}; e={e} has no inverse mod phi")
    return x % phi


def public_numbers_of(public_key):
    if isinstance(public_key, rsa_mod.RSAPublicNumbers):
        return public_key
    if isinstance(public_key, rsa_mod.RSAPublicKey):
        return public_key.public_numbers()
    n, e = public_key
    return rsa_mod.RSAPublicNumbers(int(e), int(n))


def recover_private_numbers(public_key, p: int, q: int) -> rsa_mod.RSAPrivateNumbers:
    """
    Assemble RSAPrivateNumbers (d plus CRT values) for public_key from p, q.

    public_key may be an RSAPublicKey, RSAPublicNumbers or an (n, e) tuple.
    Raises InvalidKeyMaterial when p, q do not factor N or e is not invertible.
    """
    pub = public_numbers_of(public_key)
    n, e = pub.n, pub.e
    if p <= 1 or q <= 1 or p * q != n:
        raise InvalidKeyMaterial("Recovered factors do not multiply to N")
    if p == q:
        raise InvalidKeyMaterial("p == q; N is a square, not an RSA modulus")
    if gcd(p, q) != 1:
        raise InvalidKeyMaterial(f"p and q share the factor {gcd(p, q)}; not an RSA modulus")

    d = private_exponent(e, p, q)
    dp = d % (p - 1)
    dq = d % (q - 1)
    iqmp = pow(q, -1, p)
    log.debug("recovered %d-bit private exponent", d.bit_length())
    return rsa_mod.RSAPrivateNumbers(
        p=p, q=q, d=d, dmp1=dp, dmq1=dq, iqmp=iqmp,
        public_numbers=pub
    )


def recover_private_key(public_key, p: int, q: int) -> rsa_mod.RSAPrivateKey:
    numbers = recover_private_numbers(public_key, p, q)
    try:
        return numbers.private_key()
    except ValueError as exc:
        raise InvalidKeyMaterial(f"cryptography rejected the recovered key: {exc}") from exc
