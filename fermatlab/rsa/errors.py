# errors.py
"""Failures raised by the close-prime attack."""


class FermatLabError(Exception):
    """Base class for every failure of the attack pipeline."""


class FactorizationFailed(FermatLabError):
    """The Fermat search ran out of iterations without a usable factor pair.

    Recoverable: retry with a larger magnitude or another ratio, or conclude
    the modulus is not vulnerable.
    """

    def __init__(self, n, magnitude, ratio, steps, message=None):
        self.n = n
        self.magnitude = magnitude
        self.ratio = ratio
        self.steps = steps
        if message is None:
            message = (f"The factors are not close enough for efficient factoring "
                       f"(magnitude={magnitude}, ratio={ratio[0]}/{ratio[1]}, {steps} steps)")
        super().__init__(message)


class FactorizationCancelled(FactorizationFailed):
    """The caller asked the search to stop before it was exhausted."""

    def __init__(self, n, magnitude, ratio, steps):
        super().__init__(n, magnitude, ratio, steps,
                         f"Search cancelled after {steps} steps")


class InvalidKeyMaterial(FermatLabError, ValueError):
    """Recovered factors cannot form a valid RSA private key."""


class PaddingError(FermatLabError):
    """PKCS#1 v1.5 padding check failed after decryption."""
