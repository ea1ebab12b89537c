from idemixgen_py.native.library.math.curve import POINT_SIZE, SCALAR_SIZE
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, List
import cbor2

###
# This file implements the records produced for one signer:
#
# - CredentialRequest: the user's blinded secret (nym) with a proof of knowledge.
# - Credential: the issuer's signature over the user's secret and attributes.
# - SignerConfig: what a signing identity loads; the credential, the user secret
#   and the attribute values it was issued for.
###

PointBytes = Annotated[bytes, Field(min_length=POINT_SIZE, max_length=POINT_SIZE)]
ScalarBytes = Annotated[bytes, Field(min_length=SCALAR_SIZE, max_length=SCALAR_SIZE)]


class CborModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    def export_cbor(self) -> bytes:
        return cbor2.dumps(self.model_dump(), canonical=True)

    @classmethod
    def import_cbor(cls, data: bytes):
        """Decode CBOR bytes into the model.

        Raises:
            cbor2.CBORDecodeError: If the bytes are not valid CBOR
            pydantic.ValidationError: If the decoded value does not fit the model
        """
        return cls.model_validate(cbor2.loads(data))


class CredentialRequest(CborModel):
    nym: PointBytes
    issuer_nonce: ScalarBytes
    proof_c: ScalarBytes
    proof_s: ScalarBytes


class Credential(CborModel):
    a: PointBytes
    b: PointBytes
    e: ScalarBytes
    s: ScalarBytes
    attrs: List[ScalarBytes]


class SignerConfig(CborModel):
    cred: bytes
    sk: ScalarBytes
    organizational_unit_identifier: str
    is_admin: bool

    def get_credential(self) -> Credential:
        return Credential.import_cbor(self.cred)
