from idemixgen_py.config import (
    ATTRIBUTE_INDEX_OU,
    ATTRIBUTE_INDEX_ROLE,
    ATTRIBUTE_NAMES,
    ROLE_ADMIN,
    ROLE_MEMBER,
)
from idemixgen_py.native.util.errors import IdemixGenError
from idemixgen_py.native.library.math.curve import (
    CurveError,
    ORDER,
    bytes_to_point,
    bytes_to_scalar,
    generator,
    hash_mod_order,
    hash_points,
    mul,
    multi_mul,
    point_to_bytes,
    rand_mod_order,
    scalar_to_bytes,
)
from idemixgen_py.native.library.types.issuer_key import IssuerKey
from idemixgen_py.native.library.types.signer_config import (
    Credential,
    CredentialRequest,
    SignerConfig,
)
from Crypto.PublicKey.ECC import EccPoint
from typing import List, Tuple

###
# Exceptions
###


class SignerConfigGenerationError(IdemixGenError):
    """Raised when a signer config cannot be generated"""

    pass


class CredentialRequestError(SignerConfigGenerationError):
    """Raised when a credential request fails verification"""

    pass


###
# Credential Request
###


def new_credential_request(
    sk: int, issuer_nonce: int, issuer_key: IssuerKey
) -> CredentialRequest:
    """Blind the user secret as nym = HSk * sk and prove knowledge of sk."""
    h_sk = issuer_key.public_key.get_h_sk()
    nym = mul(h_sk, sk)
    nonce_bytes = scalar_to_bytes(issuer_nonce)

    r = rand_mod_order()
    proof_c = hash_points(mul(h_sk, r), h_sk, nym, nonce_bytes)
    proof_s = r + proof_c * sk

    return CredentialRequest(
        nym=point_to_bytes(nym),
        issuer_nonce=nonce_bytes,
        proof_c=scalar_to_bytes(proof_c),
        proof_s=scalar_to_bytes(proof_s),
    )


def verify_credential_request(
    request: CredentialRequest, issuer_key: IssuerKey
) -> None:
    """
    Check the proof of knowledge carried by a credential request.

    Raises:
        CredentialRequestError: If the request is malformed or the proof is invalid
    """
    try:
        h_sk = issuer_key.public_key.get_h_sk()
        nym = bytes_to_point(request.nym)
        proof_c = bytes_to_scalar(request.proof_c)
        proof_s = bytes_to_scalar(request.proof_s)
    except CurveError as e:
        raise CredentialRequestError(f"Malformed credential request: {e}")

    commitment = multi_mul(mul(h_sk, proof_s), [(nym, ORDER - proof_c)])
    if hash_points(commitment, h_sk, nym, request.issuer_nonce) != proof_c:
        raise CredentialRequestError("Credential request proof is invalid")


###
# Credential Issuance
###


def _credential_base(
    issuer_key: IssuerKey,
    nym_term: List[Tuple[EccPoint, int]],
    s: int,
    attrs: List[int],
) -> EccPoint:
    ipk = issuer_key.public_key
    terms = nym_term + [(ipk.get_h_rand(), s)]
    terms += list(zip(ipk.get_h_attrs(), attrs))
    return multi_mul(generator(), terms)


def new_credential(
    issuer_key: IssuerKey, request: CredentialRequest, attrs: List[int]
) -> Credential:
    """
    Sign the requester's nym and attribute values.

    B = G + Nym + HRand * s + sum(HAttrs[i] * attrs[i])
    A = B * (e + isk)^-1

    Raises:
        CredentialRequestError: If the request does not verify
        SignerConfigGenerationError: If the attribute count does not match the key
    """
    verify_credential_request(request, issuer_key)

    if len(attrs) != len(issuer_key.public_key.attribute_names):
        raise SignerConfigGenerationError(
            f"Expected {len(issuer_key.public_key.attribute_names)} attributes, got {len(attrs)}"
        )

    isk = issuer_key.get_secret_scalar()
    while True:
        e = rand_mod_order()
        if (e + isk) % ORDER:
            break
    s = rand_mod_order()

    nym = bytes_to_point(request.nym)
    b = _credential_base(issuer_key, [(nym, 1)], s, attrs)
    a = mul(b, pow(e + isk, -1, ORDER))

    return Credential(
        a=point_to_bytes(a),
        b=point_to_bytes(b),
        e=scalar_to_bytes(e),
        s=scalar_to_bytes(s),
        attrs=[scalar_to_bytes(value) for value in attrs],
    )


def verify_credential(issuer_key: IssuerKey, credential: Credential, sk: int) -> bool:
    """Check a credential against the issuer key and the holder's secret."""
    try:
        a = bytes_to_point(credential.a)
        b = bytes_to_point(credential.b)
        e = bytes_to_scalar(credential.e)
        s = bytes_to_scalar(credential.s)
        attrs = [bytes_to_scalar(value) for value in credential.attrs]
    except CurveError:
        return False

    if len(attrs) != len(issuer_key.public_key.attribute_names):
        return False

    h_sk = issuer_key.public_key.get_h_sk()
    expected_b = _credential_base(issuer_key, [(h_sk, sk)], s, attrs)
    if expected_b != b:
        return False

    return mul(a, e + issuer_key.get_secret_scalar()) == b


###
# Signer Config
###


def signer_attributes(is_admin: bool, org_unit: str) -> List[int]:
    attrs = [0] * len(ATTRIBUTE_NAMES)
    attrs[ATTRIBUTE_INDEX_OU] = hash_mod_order(org_unit.encode("utf-8"))
    attrs[ATTRIBUTE_INDEX_ROLE] = ROLE_ADMIN if is_admin else ROLE_MEMBER
    return attrs


def generate_signer_config(
    is_admin: bool, org_unit: str, issuer_key: IssuerKey
) -> bytes:
    """
    Issue a credential for a fresh user secret and package it as a signer config.

    Args:
        is_admin: Whether the signer gets the admin role
        org_unit: Organizational unit of the signer, must be non-empty
        issuer_key: Issuer key pair used to sign the credential

    Returns:
        CBOR-encoded SignerConfig

    Raises:
        SignerConfigGenerationError: If the OU is empty or issuance fails
    """
    if org_unit == "":
        raise SignerConfigGenerationError("the OU attribute value is empty")

    sk = rand_mod_order()
    issuer_nonce = rand_mod_order()
    try:
        request = new_credential_request(sk, issuer_nonce, issuer_key)
        credential = new_credential(
            issuer_key, request, signer_attributes(is_admin, org_unit)
        )
    except CurveError as e:
        raise SignerConfigGenerationError(f"Failed to issue credential: {e}")

    return SignerConfig(
        cred=credential.export_cbor(),
        sk=scalar_to_bytes(sk),
        organizational_unit_identifier=org_unit,
        is_admin=is_admin,
    ).export_cbor()
