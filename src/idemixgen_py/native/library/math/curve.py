from Crypto.Hash import SHA256
from Crypto.PublicKey.ECC import EccPoint
from Crypto.Random import random as crypto_random
from typing import Iterable, Union

###
# Group arithmetic for the issuer and signer collaborators.
#
# - Curve: NIST P-256, using pycryptodome's EccPoint for point arithmetic.
# - Scalars: integers mod ORDER, encoded as 32-byte big-endian strings.
# - Points: uncompressed SEC1 encoding (0x04 || x || y), 65 bytes.
###

CURVE_NAME = "p256"

ORDER = 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551
GENERATOR_X = 0x6B17D1F2E12C4247F8BCE6E563A440F277037D812DEB33A0F4A13945D898C296
GENERATOR_Y = 0x4FE342E2FE1A7F9B8EE7EB4A7C0F9E162BCE33576B315ECECBB6406837BF51F5

SCALAR_SIZE = 32
POINT_SIZE = 1 + 2 * SCALAR_SIZE
POINT_PREFIX = b"\x04"

###
# Exceptions
###


class CurveError(Exception):
    """Base exception for curve arithmetic errors"""

    pass


class PointDecodingError(CurveError):
    """Raised when bytes do not encode a point on the curve"""

    pass


class ScalarDecodingError(CurveError):
    """Raised when bytes do not encode a scalar mod the group order"""

    pass


###
# Scalars
###


def rand_mod_order() -> int:
    """Draw a uniformly random non-zero scalar mod the group order."""
    return crypto_random.randint(1, ORDER - 1)


def hash_mod_order(data: bytes) -> int:
    """Hash arbitrary bytes to a scalar mod the group order."""
    return int.from_bytes(SHA256.new(data).digest(), "big") % ORDER


def scalar_to_bytes(value: int) -> bytes:
    return (value % ORDER).to_bytes(SCALAR_SIZE, "big")


def bytes_to_scalar(value: bytes) -> int:
    """Decode a 32-byte big-endian scalar.

    Raises:
        ScalarDecodingError: If the length is wrong or the value is not reduced
    """
    if len(value) != SCALAR_SIZE:
        raise ScalarDecodingError(
            f"Scalar must be {SCALAR_SIZE} bytes, got {len(value)}"
        )
    scalar = int.from_bytes(value, "big")
    if scalar >= ORDER:
        raise ScalarDecodingError("Scalar is not reduced mod the group order")
    return scalar


###
# Points
###


def generator() -> EccPoint:
    return EccPoint(GENERATOR_X, GENERATOR_Y, curve=CURVE_NAME)


def mul(point: EccPoint, scalar: int) -> EccPoint:
    return point * (scalar % ORDER)


def multi_mul(base: EccPoint, terms: Iterable[tuple[EccPoint, int]]) -> EccPoint:
    """Compute base + sum(point * scalar), skipping zero scalars."""
    acc = base.copy()
    for point, scalar in terms:
        scalar %= ORDER
        if scalar:
            acc = acc + point * scalar
    return acc


def point_to_bytes(point: EccPoint) -> bytes:
    x, y = point.xy
    return POINT_PREFIX + int(x).to_bytes(SCALAR_SIZE, "big") + int(y).to_bytes(
        SCALAR_SIZE, "big"
    )


def bytes_to_point(value: bytes) -> EccPoint:
    """Decode an uncompressed SEC1 point.

    Raises:
        PointDecodingError: If the encoding is malformed or the point is off the curve
    """
    if len(value) != POINT_SIZE or not value.startswith(POINT_PREFIX):
        raise PointDecodingError(
            f"Point must be {POINT_SIZE} bytes with a 0x04 prefix"
        )
    x = int.from_bytes(value[1 : 1 + SCALAR_SIZE], "big")
    y = int.from_bytes(value[1 + SCALAR_SIZE :], "big")
    try:
        point = EccPoint(x, y, curve=CURVE_NAME)
    except ValueError as e:
        raise PointDecodingError(f"Invalid curve point: {e}")
    if point.is_point_at_infinity():
        raise PointDecodingError("Point at infinity is not a valid key component")
    return point


def hash_points(*items: Union[bytes, EccPoint]) -> int:
    """Fiat-Shamir challenge over a transcript of points and raw bytes."""
    digest = SHA256.new()
    for item in items:
        if isinstance(item, EccPoint):
            digest.update(point_to_bytes(item))
        else:
            digest.update(item)
    return int.from_bytes(digest.digest(), "big") % ORDER
