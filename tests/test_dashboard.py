import pytest
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from fermatlab.rsa.weak_rsa_gen import build_public_pem
from fermatlab.web_dashboard.app import create_app

from conftest import public_key


@pytest.fixture
def client():
    app = create_app({"TESTING": True, "MAX_MAGNITUDE": 4})
    with app.test_client() as client:
        yield client


def pem_of(key):
    return build_public_pem(key["n"], key["e"]).decode()


def test_upload_rsa_finds_factors(client, close_key):
    resp = client.post("/upload_rsa", data={"pem": pem_of(close_key)})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["found"] is True
    assert int(body["p"]) == close_key["p"]
    assert int(body["q"]) == close_key["q"]


def test_upload_rsa_with_ratio(client, weighted_key):
    resp = client.post("/upload_rsa", data={"pem": pem_of(weighted_key), "ratio": "3/2"})
    body = resp.get_json()
    assert body["found"] is True
    assert int(body["p"]) * int(body["q"]) == weighted_key["n"]


def test_upload_rsa_not_found(client, strong_key):
    resp = client.post("/upload_rsa", data={"pem": pem_of(strong_key), "magnitude": "2"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["found"] is False
    assert body["steps"] == 16


def test_upload_rsa_bad_pem(client):
    resp = client.post("/upload_rsa", data={"pem": "garbage"})
    assert resp.status_code == 400
    assert resp.get_json()["status"] == "error"


@pytest.mark.parametrize("form", [
    {"magnitude": "5"},
    {"magnitude": "-1"},
    {"magnitude": "many"},
    {"ratio": "3/0"},
    {"ratio": "x"},
])
def test_upload_rsa_bad_params(client, close_key, form):
    resp = client.post("/upload_rsa", data=dict(form, pem=pem_of(close_key)))
    assert resp.status_code == 400


def test_decrypt_rsa(client, close_key):
    ciphertext = public_key(close_key).encrypt(b"dashboard", padding.PKCS1v15())
    resp = client.post("/decrypt_rsa", data={"pem": pem_of(close_key), "cipher_hex": ciphertext.hex()})
    assert resp.status_code == 200
    assert bytes.fromhex(resp.get_json()["plaintext_hex"]) == b"dashboard"


def test_decrypt_rsa_padding_error(client, close_key):
    resp = client.post("/decrypt_rsa", data={"pem": pem_of(close_key), "cipher_hex": "0102"})
    assert resp.status_code == 422
    assert resp.get_json()["found"] is True


def test_decrypt_rsa_bad_hex(client, close_key):
    resp = client.post("/decrypt_rsa", data={"pem": pem_of(close_key), "cipher_hex": "zz"})
    assert resp.status_code == 400


def test_generate_weak_key_round_trip(client):
    resp = client.get("/generate_toy_rsa_pub?mode=weak&bits=128")
    assert resp.status_code == 200
    assert resp.headers["Cache-Control"] == "no-store"
    n = load_pem_public_key(resp.data).public_numbers().n
    assert n.bit_length() in (255, 256)

    body = client.post("/upload_rsa", data={"pem": resp.data.decode()}).get_json()
    assert body["found"] is True
    assert int(body["p"]) * int(body["q"]) == n


def test_generate_rejects_bad_bits(client):
    assert client.get("/generate_toy_rsa_pub?bits=8").status_code == 400
    assert client.get("/generate_toy_rsa_pub?mode=ecc").status_code == 400
