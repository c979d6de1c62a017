# decrypt.py
"""
Decrypt RSA PKCS#1 v1.5 ciphertext when the modulus has close prime factors.

Pipeline: Fermat search -> private key rebuild -> cryptography's PKCS1v15 decrypt.
"""
import logging

from cryptography.hazmat.primitives.asymmetric import padding

from fermatlab.rsa.errors import PaddingError
from fermatlab.rsa.fermat_factor import factor_proportionally
from fermatlab.rsa.key_recovery import public_numbers_of, recover_private_key

log = logging.getLogger(__name__)


def check_pkcs1v15_framing(private_key, ciphertext: bytes) -> None:
    """
    Raise PaddingError unless c^d mod n is framed as 00 02 PS 00 M with at
    least 8 nonzero PS bytes. cryptography may answer bad padding with random
    bytes (implicit rejection), so the framing is checked here first.
    """
    numbers = private_key.private_numbers()
    n = numbers.public_numbers.n
    k = (n.bit_length() + 7) // 8
    if len(ciphertext) != k:
        raise PaddingError(f"ciphertext is {len(ciphertext)} bytes, key size is {k}")
    c = int.from_bytes(ciphertext, "big")
    if c >= n:
        raise PaddingError("ciphertext is not below the modulus")
    em = pow(c, numbers.d, n).to_bytes(k, "big")
    if em[0] != 0 or em[1] != 2:
        raise PaddingError("PKCS#1 v1.5 block does not start with 00 02")
    sep = em.find(b"\x00", 2)
    if sep < 10:
        raise PaddingError("PKCS#1 v1.5 padding string is missing or too short")


def decrypt_pkcs1v15(private_key, ciphertext: bytes) -> bytes:
    check_pkcs1v15_framing(private_key, ciphertext)
    try:
        return private_key.decrypt(ciphertext, padding.PKCS1v15())
    except ValueError as exc:
        raise PaddingError(f"PKCS#1 v1.5 decryption failed: {exc}") from exc


def decrypt_with_recovered_factors(public_key, ciphertext: bytes,
                                   magnitude: int = 0, a=1, b=1,
                                   should_stop=None) -> bytes:
    """
    Factor N of public_key, rebuild the private key and decrypt ciphertext.

    Raises FactorizationFailed, InvalidKeyMaterial or PaddingError; the
    three are distinct so callers can tell "not vulnerable" from "wrong key".
    """
    pub = public_numbers_of(public_key)
    p, q = factor_proportionally(pub.n, magnitude, a, b, should_stop=should_stop)
    log.info("N factored: p has %d bits, q has %d bits", p.bit_length(), q.bit_length())
    private_key = recover_private_key(pub, p, q)
    return decrypt_pkcs1v15(private_key, ciphertext)
