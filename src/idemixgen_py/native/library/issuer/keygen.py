from idemixgen_py.config import ATTRIBUTE_NAMES
from idemixgen_py.native.util.errors import IdemixGenError
from idemixgen_py.native.library.math.curve import (
    generator,
    mul,
    point_to_bytes,
    rand_mod_order,
    scalar_to_bytes,
)
from idemixgen_py.native.library.types.issuer_key import IssuerKey, IssuerPublicKey
from typing import List, Optional, Tuple

###
# Exceptions
###


class IssuerKeyGenerationError(IdemixGenError):
    """Raised when a fresh issuer key pair cannot be generated"""

    pass


###
# Key Generation
###


def new_issuer_key(attribute_names: Optional[List[str]] = None) -> IssuerKey:
    """
    Create a fresh issuer key pair for the given attribute names.

    Args:
        attribute_names: Names of the attributes certified by this issuer,
            defaults to the OU and Role attributes

    Returns:
        IssuerKey with a random secret and a self-proving public key

    Raises:
        IssuerKeyGenerationError: If key generation fails
    """
    names = list(ATTRIBUTE_NAMES if attribute_names is None else attribute_names)
    if len(set(names)) != len(names):
        raise IssuerKeyGenerationError("Attribute names must be unique")

    try:
        g = generator()
        isk = rand_mod_order()
        w = mul(g, isk)
        h_sk = mul(g, rand_mod_order())
        h_rand = mul(g, rand_mod_order())
        h_attrs = [mul(g, rand_mod_order()) for _ in names]

        # Schnorr proof of knowledge of isk
        r = rand_mod_order()
        proof_c = IssuerPublicKey.proof_challenge(mul(g, r), w, h_sk, h_rand, h_attrs)
        proof_s = r + proof_c * isk

        fields = {
            "attribute_names": names,
            "h_sk": point_to_bytes(h_sk),
            "h_rand": point_to_bytes(h_rand),
            "h_attrs": [point_to_bytes(h) for h in h_attrs],
            "w": point_to_bytes(w),
            "proof_c": scalar_to_bytes(proof_c),
            "proof_s": scalar_to_bytes(proof_s),
        }
        fields["hash"] = IssuerPublicKey.digest(fields)
        public_key = IssuerPublicKey.model_validate(fields)
    except Exception as e:
        raise IssuerKeyGenerationError(f"Failed to generate issuer key: {e}") from e

    return IssuerKey(secret_key=scalar_to_bytes(isk), public_key=public_key)


def generate_issuer_key() -> Tuple[bytes, bytes]:
    """Generate issuer key material as (secret key bytes, CBOR public key bytes)."""
    key = new_issuer_key()
    return key.secret_key, key.public_key.export_cbor()
