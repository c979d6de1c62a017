import pytest
from cryptography.hazmat.primitives.asymmetric import rsa as rsa_mod

from fermatlab.rsa.weak_rsa_gen import gen_strong_rsa, gen_weak_rsa


@pytest.fixture(scope="session")
def close_key():
    # q is the first prime after p
    return gen_weak_rsa(bits=512)


@pytest.fixture(scope="session")
def weighted_key():
    # 2q ~ 3p
    return gen_weak_rsa(bits=512, a=3, b=2)


@pytest.fixture(scope="session")
def strong_key():
    return gen_strong_rsa(bits=512, min_gap_bits=256)


def public_key(key):
    return rsa_mod.RSAPublicNumbers(key["e"], key["n"]).public_key()
