from idemixgen_py.native.util.errors import IdemixGenError
from idemixgen_py.native.library.math.curve import (
    CurveError,
    ORDER,
    POINT_SIZE,
    SCALAR_SIZE,
    bytes_to_point,
    bytes_to_scalar,
    generator,
    hash_points,
    mul,
    multi_mul,
)
from Crypto.Hash import SHA256
from Crypto.PublicKey.ECC import EccPoint
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from dataclasses import dataclass
from typing import Annotated, List
import cbor2

###
# This file implements the issuer key records:
#
# - IssuerPublicKey: the public half, persisted as CBOR. It carries the attribute
#   bases, the issuer's public point W = G * isk, a Schnorr proof of knowledge
#   of isk and a SHA-256 digest over its own encoding.
# - IssuerKey: the pair (raw secret scalar bytes, IssuerPublicKey).
###

PointBytes = Annotated[bytes, Field(min_length=POINT_SIZE, max_length=POINT_SIZE)]
ScalarBytes = Annotated[bytes, Field(min_length=SCALAR_SIZE, max_length=SCALAR_SIZE)]

###
# Exceptions
###


class IssuerKeyError(IdemixGenError):
    """Base exception for issuer key errors"""

    pass


class MalformedKeyError(IssuerKeyError):
    """Raised when issuer key material cannot be decoded or is inconsistent"""

    pass


###
# Issuer Public Key
###


class IssuerPublicKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    attribute_names: List[str]
    h_sk: PointBytes
    h_rand: PointBytes
    h_attrs: List[PointBytes]
    w: PointBytes
    proof_c: ScalarBytes
    proof_s: ScalarBytes
    hash: Annotated[bytes, Field(min_length=32, max_length=32)]

    @model_validator(mode="after")
    def _one_base_per_attribute(self) -> "IssuerPublicKey":
        if len(self.h_attrs) != len(self.attribute_names):
            raise ValueError(
                f"Expected {len(self.attribute_names)} attribute bases, got {len(self.h_attrs)}"
            )
        return self

    @staticmethod
    def digest(fields: dict) -> bytes:
        """SHA-256 over the canonical CBOR encoding of every field except `hash`."""
        unhashed = {k: v for k, v in fields.items() if k != "hash"}
        return SHA256.new(cbor2.dumps(unhashed, canonical=True)).digest()

    @staticmethod
    def proof_challenge(
        commitment: EccPoint,
        w: EccPoint,
        h_sk: EccPoint,
        h_rand: EccPoint,
        h_attrs: List[EccPoint],
    ) -> int:
        return hash_points(commitment, generator(), w, h_sk, h_rand, *h_attrs)

    def export_cbor(self) -> bytes:
        """Export the public key as canonical CBOR"""
        return cbor2.dumps(self.model_dump(), canonical=True)

    @classmethod
    def import_cbor(cls, data: bytes) -> "IssuerPublicKey":
        """Initialize an IssuerPublicKey from CBOR bytes

        Raises:
            MalformedKeyError: If the bytes are not a valid encoded public key
        """
        try:
            public_key = cls.model_validate(cbor2.loads(data))
        except (cbor2.CBORDecodeError, ValidationError) as e:
            raise MalformedKeyError(f"Failed to decode issuer public key: {e}") from e

        # Only the canonical encoding is accepted, which also rules out trailing bytes
        if public_key.export_cbor() != data:
            raise MalformedKeyError("Issuer public key is not in canonical CBOR form")
        return public_key

    def get_w(self) -> EccPoint:
        return bytes_to_point(self.w)

    def get_h_sk(self) -> EccPoint:
        return bytes_to_point(self.h_sk)

    def get_h_rand(self) -> EccPoint:
        return bytes_to_point(self.h_rand)

    def get_h_attrs(self) -> List[EccPoint]:
        return [bytes_to_point(h) for h in self.h_attrs]

    def check(self) -> None:
        """
        Verify the digest and the proof of knowledge of the issuer secret.

        Raises:
            MalformedKeyError: If any point is invalid, the digest does not match,
                or the proof does not verify
        """
        if self.digest(self.model_dump()) != self.hash:
            raise MalformedKeyError("Issuer public key hash does not match its contents")

        try:
            w = self.get_w()
            h_sk = self.get_h_sk()
            h_rand = self.get_h_rand()
            h_attrs = self.get_h_attrs()
            proof_c = bytes_to_scalar(self.proof_c)
            proof_s = bytes_to_scalar(self.proof_s)
        except CurveError as e:
            raise MalformedKeyError(f"Invalid issuer public key component: {e}") from e

        # G * s - W * c recovers the prover's commitment
        commitment = multi_mul(mul(generator(), proof_s), [(w, ORDER - proof_c)])
        if self.proof_challenge(commitment, w, h_sk, h_rand, h_attrs) != proof_c:
            raise MalformedKeyError("Issuer public key proof of knowledge is invalid")


###
# Issuer Key Pair
###


@dataclass(frozen=True)
class IssuerKey:
    """
    An issuer secret key and its public key.

    Attributes:
        secret_key: Raw 32-byte big-endian secret scalar
        public_key: The matching public key record
    """

    secret_key: bytes
    public_key: IssuerPublicKey

    def get_secret_scalar(self) -> int:
        try:
            isk = bytes_to_scalar(self.secret_key)
        except CurveError as e:
            raise MalformedKeyError(f"Invalid issuer secret key: {e}") from e
        if isk == 0:
            raise MalformedKeyError("Issuer secret key is zero")
        return isk

    def check(self) -> None:
        """
        Verify the public key and that it belongs to the secret key.

        Raises:
            MalformedKeyError: If either half is invalid or the halves do not match
        """
        self.public_key.check()
        isk = self.get_secret_scalar()
        if mul(generator(), isk) != self.public_key.get_w():
            raise MalformedKeyError("Issuer secret key does not match the public key")
