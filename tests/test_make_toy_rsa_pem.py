import re

from cryptography.hazmat.primitives.serialization import load_pem_public_key

from fermatlab.rsa.decrypt import decrypt_with_recovered_factors
from fermatlab.rsa.make_toy_rsa_pem import main


def _pem(out):
    start = out.index("-----BEGIN PUBLIC KEY-----")
    end = out.index("-----END PUBLIC KEY-----") + len("-----END PUBLIC KEY-----")
    return out[start:end].encode()


def test_weak_key_with_ciphertext_is_breakable(capsys):
    assert main(["--bits", "256", "--ratio", "5/3", "--encrypt", "demo", "--print-private"]) == 0
    out = capsys.readouterr().out
    pub = load_pem_public_key(_pem(out))
    ciphertext = bytes.fromhex(re.search(r"# ciphertext = ([0-9a-f]+)", out).group(1))
    assert decrypt_with_recovered_factors(pub, ciphertext, a=5, b=3) == b"demo"
    assert "BEGIN PRIVATE KEY" in out


def test_strong_key(capsys):
    assert main(["--mode", "strong", "--bits", "256", "--min-gap-bits", "200"]) == 0
    out = capsys.readouterr().out
    p = int(re.search(r"# p = (\d+)", out).group(1))
    q = int(re.search(r"# q = (\d+)", out).group(1))
    assert abs(p - q).bit_length() > 200
