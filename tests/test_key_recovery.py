import pytest
from cryptography.hazmat.primitives.asymmetric import rsa as rsa_mod

from fermatlab.rsa.errors import InvalidKeyMaterial
from fermatlab.rsa.key_recovery import (
    egcd, private_exponent, recover_private_key, recover_private_numbers
)

from conftest import public_key


def test_egcd_bezout():
    g, x, y = egcd(240, 46)
    assert g == 2
    assert 240 * x + 46 * y == 2


def test_egcd_coprime():
    g, x, y = egcd(65537, 3120)
    assert g == 1
    assert (65537 * x) % 3120 == 1


def test_private_exponent_small():
    # phi = 60, 7 * 43 = 301 = 5 * 60 + 1
    assert private_exponent(7, 7, 11) == 43


def test_private_exponent_not_invertible():
    with pytest.raises(InvalidKeyMaterial):
        private_exponent(3, 7, 11)


def test_recover_numbers_from_tuple():
    numbers = recover_private_numbers((77, 7), 7, 11)
    assert numbers.d == 43
    assert numbers.dmp1 == 43 % 6
    assert numbers.dmq1 == 43 % 10
    assert (numbers.iqmp * 11) % 7 == 1
    assert numbers.public_numbers == rsa_mod.RSAPublicNumbers(7, 77)


def test_recover_rejects_wrong_factors():
    with pytest.raises(InvalidKeyMaterial):
        recover_private_numbers((77, 7), 7, 13)
    with pytest.raises(InvalidKeyMaterial):
        recover_private_numbers((77, 7), 1, 77)


def test_recover_rejects_square_modulus():
    with pytest.raises(InvalidKeyMaterial):
        recover_private_numbers((49, 5), 7, 7)


def test_recover_private_key_matches_generated_d(close_key):
    key = recover_private_key(public_key(close_key), close_key["p"], close_key["q"])
    numbers = key.private_numbers()
    assert numbers.d == close_key["d"]
    assert numbers.public_numbers.n == close_key["n"]
    assert {numbers.p, numbers.q} == {close_key["p"], close_key["q"]}


def test_invalid_key_material_is_value_error():
    with pytest.raises(ValueError):
        recover_private_numbers((77, 3), 7, 11)


def test_recover_rejects_factors_sharing_a_prime():
    # 15 * 21 == 315 but both are multiples of 3
    with pytest.raises(InvalidKeyMaterial):
        recover_private_key((315, 11), 15, 21)
