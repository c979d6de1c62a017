#!/usr/bin/env python3
# crack_pem.py
"""
Factor the modulus of an RSA public key (PEM) with the Fermat search and,
optionally, decrypt a PKCS#1 v1.5 ciphertext with the recovered key.

Prints:
 - p, q and |a*p - b*q|
 - the plaintext (if a ciphertext is given)
 - the recovered private key as PKCS#8 PEM (--print-private)
"""

import argparse
import logging
import sys

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa as rsa_mod

from fermatlab.rsa.decrypt import decrypt_pkcs1v15
from fermatlab.rsa.errors import FactorizationFailed, InvalidKeyMaterial, PaddingError
from fermatlab.rsa.fermat_factor import factor_proportionally, parse_ratio
from fermatlab.rsa.key_recovery import recover_private_key

log = logging.getLogger("fermatlab.crack_pem")


def ratio_arg(text: str):
    try:
        return parse_ratio(text)
    except (ValueError, ZeroDivisionError) as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def load_public_key(pem: bytes):
    key = serialization.load_pem_public_key(pem)
    if not isinstance(key, rsa_mod.RSAPublicKey):
        raise ValueError("not an RSA public key")
    return key


def main(argv=None):
    ap = argparse.ArgumentParser(description="Factor an RSA modulus with close primes and decrypt.")
    ap.add_argument("--pem", type=argparse.FileType("rb"),
                    help="PEM public key file (default: stdin).")
    ap.add_argument("--magnitude", type=int, default=0,
                    help="Search window exponent; costs 4^magnitude steps.")
    ap.add_argument("--ratio", type=ratio_arg, default=(1, 1),
                    help="Weight a/b with a*p ~ b*q (default 1/1).")
    group = ap.add_mutually_exclusive_group()
    group.add_argument("--cipher", type=argparse.FileType("rb"), help="Raw ciphertext file.")
    group.add_argument("--cipher-hex", help="Ciphertext as hex.")
    ap.add_argument("--print-private", action="store_true",
                    help="Also print the recovered private key (PKCS#8 PEM).")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.magnitude < 0:
        ap.error("--magnitude must be >= 0")

    ciphertext = None
    if args.cipher is not None:
        ciphertext = args.cipher.read()
    elif args.cipher_hex is not None:
        try:
            ciphertext = bytes.fromhex(args.cipher_hex)
        except ValueError:
            ap.error("--cipher-hex is not valid hex")

    pem = args.pem.read() if args.pem is not None else sys.stdin.buffer.read()
    try:
        pubkey = load_public_key(pem)
    except ValueError as exc:
        print(f"Failed to parse PEM: {exc}", file=sys.stderr)
        return 2

    numbers = pubkey.public_numbers()
    n, e = numbers.n, numbers.e
    a, b = args.ratio
    print(f"# n bit-length = {n.bit_length()}")
    print(f"# e = {e}")
    log.debug("searching 4^%d guesses with ratio %d/%d", args.magnitude, a, b)

    try:
        p, q = factor_proportionally(n, args.magnitude, a, b)
    except FactorizationFailed as exc:
        print(f"Fermat did not find factors: {exc}", file=sys.stderr)
        return 1
    print(f"p = {p}")
    print(f"q = {q}")
    print(f"|a*p - b*q| = {abs(a * p - b * q)}")

    try:
        privkey = recover_private_key(numbers, p, q)
    except InvalidKeyMaterial as exc:
        print(f"Key recovery failed: {exc}", file=sys.stderr)
        return 2

    if ciphertext is not None:
        try:
            plaintext = decrypt_pkcs1v15(privkey, ciphertext)
        except PaddingError as exc:
            print(f"Decryption failed: {exc}", file=sys.stderr)
            return 2
        print("Recovered plaintext:")
        print(f"  bytes : {plaintext!r}")
        print(f"  hex   : {plaintext.hex()}")

    if args.print_private:
        priv_pem = privkey.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption()
        )
        print("\n# ----- PRIVATE KEY (PKCS#8 PEM) -----")
        print(priv_pem.decode().strip())
    return 0


if __name__ == "__main__":
    sys.exit(main())
