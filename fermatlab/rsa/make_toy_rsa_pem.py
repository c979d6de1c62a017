#!/usr/bin/env python3
# make_toy_rsa_pem.py
"""
Generate an RSA public key (PEM) for the Fermat demo:
- mode 'weak'  : a*p ~ b*q, recoverable by crack_pem
- mode 'strong': independent primes with an enforced gap

This prints:
 - PEM public key (SubjectPublicKeyInfo)
 - Debug comments: p, q, |a*p - b*q|, n bits
 - optionally a PKCS#1 v1.5 ciphertext of --encrypt TEXT, as hex
"""

import argparse
import sys

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding

from fermatlab.rsa.crack_pem import ratio_arg
from fermatlab.rsa.key_recovery import recover_private_key
from fermatlab.rsa.weak_rsa_gen import (
    DEFAULT_PUBLIC_EXPONENT, build_public_pem, gen_strong_rsa, gen_weak_rsa
)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Generate a demo RSA public PEM (weak or strong).")
    ap.add_argument("--mode", choices=("weak", "strong"), default="weak",
                    help="weak = a*p close to b*q, strong = enforce a wide gap.")
    ap.add_argument("--bits", type=int, default=512, help="Bit length of p.")
    ap.add_argument("--ratio", type=ratio_arg, default=(1, 1), help="Weak mode weight a/b.")
    ap.add_argument("--gap-bits", type=int, default=None,
                    help="Weak mode: random offset below 2^gap_bits added to a*p/b.")
    ap.add_argument("--min-gap-bits", type=int, default=128,
                    help="Strong mode: require |p-q| >= 2^min_gap_bits.")
    ap.add_argument("--e", type=int, default=DEFAULT_PUBLIC_EXPONENT, help="Public exponent.")
    ap.add_argument("--encrypt", metavar="TEXT", help="Also print a PKCS#1 v1.5 ciphertext of TEXT (hex).")
    ap.add_argument("--print-private", action="store_true",
                    help="Also print private (PKCS#8) PEM -- WARNING: weak private keys.")
    args = ap.parse_args(argv)

    a, b = args.ratio
    if args.mode == "weak":
        key = gen_weak_rsa(bits=args.bits, gap_bits=args.gap_bits, a=a, b=b, e=args.e)
    else:
        key = gen_strong_rsa(bits=args.bits, min_gap_bits=args.min_gap_bits, e=args.e)

    n, e, p, q = key["n"], key["e"], key["p"], key["q"]
    pub_pem = build_public_pem(n, e)
    print(pub_pem.decode().strip())
    print(f"\n# p = {p}")
    print(f"# q = {q}")
    print(f"# |{a}p - {b}q| = {abs(a * p - b * q)}")
    print(f"# n bit-length = {n.bit_length()}")
    print(f"# mode = {args.mode}")

    if args.encrypt is not None:
        pubkey = serialization.load_pem_public_key(pub_pem)
        ciphertext = pubkey.encrypt(args.encrypt.encode(), padding.PKCS1v15())
        print(f"# ciphertext = {ciphertext.hex()}")

    if args.print_private:
        privkey = recover_private_key((n, e), p, q)
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
