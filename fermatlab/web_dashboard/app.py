# app.py
import logging
import os
import time

from flask import Flask, request, jsonify
from cryptography.hazmat.primitives.asymmetric import rsa as rsa_mod
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from fermatlab.rsa.decrypt import decrypt_pkcs1v15
from fermatlab.rsa.errors import FactorizationFailed, FermatLabError
from fermatlab.rsa.fermat_factor import factor_proportionally, parse_ratio
from fermatlab.rsa.key_recovery import recover_private_key
from fermatlab.rsa.weak_rsa_gen import (
    DEFAULT_PUBLIC_EXPONENT, build_public_pem, gen_strong_rsa, gen_weak_rsa
)

# ======== CONFIGURABLE PARAMETERS ========
MAX_MAGNITUDE = 10       # 4^10 ~ 1M steps per request
MIN_TOY_BITS = 64
MAX_TOY_BITS = 1024
# ========================================

log = logging.getLogger(__name__)

TEXT_HEADERS = {"Content-Type": "text/plain; charset=utf-8"}


class BadRequest(ValueError):
    pass


def _int_arg(source, name, default):
    raw = source.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip(), 0)  # allow hex like 0x...
    except ValueError:
        raise BadRequest(f"{name} must be an integer") from None


def _attack_params(form, max_magnitude):
    magnitude = _int_arg(form, "magnitude", 0)
    if magnitude < 0 or magnitude > max_magnitude:
        raise BadRequest(f"magnitude must be between 0 and {max_magnitude}")
    try:
        ratio = parse_ratio(form.get("ratio") or "1/1")
    except (ValueError, ZeroDivisionError) as exc:
        raise BadRequest(f"bad ratio: {exc}") from None
    return magnitude, ratio


def _load_rsa_pem(pem_data):
    try:
        key = load_pem_public_key((pem_data or "").encode())
    except ValueError as exc:
        raise BadRequest(f"Failed to parse PEM: {exc}") from None
    if not isinstance(key, rsa_mod.RSAPublicKey):
        raise BadRequest("Not an RSA public key.")
    return key.public_numbers()


def create_app(config=None):
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=os.environ.get("FERMATLAB_SECRET_KEY", "replace-in-lab"),
        MAX_MAGNITUDE=int(os.environ.get("FERMATLAB_MAX_MAGNITUDE", MAX_MAGNITUDE)),
    )
    if config:
        app.config.update(config)

    @app.errorhandler(BadRequest)
    def bad_request(exc):
        return jsonify({"status": "error", "message": str(exc)}), 400

    # -----------------------
    # Routes
    # -----------------------
    @app.route("/generate_toy_rsa_pub", methods=["GET"])
    def generate_toy_rsa_pub():
        """
        Return ONLY a toy RSA public key PEM.
        Query params:
          mode=weak|strong (default weak)
          bits=<int>        (bits of p; default 256)
          a=<int>, b=<int>  (weak mode weight, a*p ~ b*q; default 1, 1)
          gap_bits=<int>    (weak mode random offset; default none)
          e=<int>           (default 65537)
        """
        mode = request.args.get("mode", "weak").lower()
        bits = _int_arg(request.args, "bits", 256)
        e = _int_arg(request.args, "e", DEFAULT_PUBLIC_EXPONENT)

        if bits < MIN_TOY_BITS or bits > MAX_TOY_BITS:
            return (f"Toy generator: bits must be between {MIN_TOY_BITS} and {MAX_TOY_BITS}.",
                    400, TEXT_HEADERS)
        if mode not in ("weak", "strong"):
            return ("Toy generator: mode must be weak or strong.", 400, TEXT_HEADERS)

        if mode == "weak":
            a = _int_arg(request.args, "a", 1)
            b = _int_arg(request.args, "b", 1)
            gap_bits = _int_arg(request.args, "gap_bits", None)
            if a <= 0 or b <= 0:
                return ("Toy generator: a and b must be positive.", 400, TEXT_HEADERS)
            key = gen_weak_rsa(bits=bits, gap_bits=gap_bits, a=a, b=b, e=e)
        else:
            key = gen_strong_rsa(bits=bits, min_gap_bits=bits // 2, e=e)

        pub_pem = build_public_pem(key["n"], key["e"]).decode()
        # text/plain PEM so the frontend can paste straight into <textarea>
        headers = dict(TEXT_HEADERS, **{"Cache-Control": "no-store"})
        return (pub_pem, 200, headers)

    @app.post("/upload_rsa")
    def upload_rsa():
        numbers = _load_rsa_pem(request.form.get("pem"))
        magnitude, (a, b) = _attack_params(request.form, app.config["MAX_MAGNITUDE"])

        start = time.time()
        try:
            p, q = factor_proportionally(numbers.n, magnitude, a, b)
        except FactorizationFailed as exc:
            elapsed = time.time() - start
            return jsonify({
                "status": "ok", "found": False, "steps": exc.steps, "elapsed": elapsed,
                "message": f"Fermat did not find factors within {exc.steps} steps."
            })
        elapsed = time.time() - start
        return jsonify({
            "status": "ok", "found": True, "p": str(p), "q": str(q), "elapsed": elapsed,
            "message": f"Found factors p={p}, q={q}, |{a}p - {b}q| = {abs(a * p - b * q)} in {elapsed:.3f}s"
        })

    @app.post("/decrypt_rsa")
    def decrypt_rsa():
        numbers = _load_rsa_pem(request.form.get("pem"))
        magnitude, (a, b) = _attack_params(request.form, app.config["MAX_MAGNITUDE"])
        try:
            ciphertext = bytes.fromhex(request.form.get("cipher_hex", ""))
        except ValueError:
            raise BadRequest("cipher_hex is not valid hex") from None

        try:
            p, q = factor_proportionally(numbers.n, magnitude, a, b)
        except FactorizationFailed as exc:
            return jsonify({"status": "ok", "found": False, "message": str(exc)})

        try:
            privkey = recover_private_key(numbers, p, q)
            plaintext = decrypt_pkcs1v15(privkey, ciphertext)
        except FermatLabError as exc:
            log.warning("decrypt_rsa: %s", exc)
            return jsonify({"status": "error", "found": True, "message": str(exc)}), 422
        return jsonify({
            "status": "ok", "found": True, "p": str(p), "q": str(q),
            "plaintext_hex": plaintext.hex()
        })

    return app


app = create_app()

# -----------------------
# Run
# -----------------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # In production you should use gunicorn/uwsgi and not debug=True
    app.run(debug=True, host="127.0.0.1", port=5000)
