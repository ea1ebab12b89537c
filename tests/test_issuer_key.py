import cbor2
import os
import pytest
from idemixgen_py.native.library.issuer.keygen import (
    IssuerKeyGenerationError,
    generate_issuer_key,
    new_issuer_key,
)
from idemixgen_py.native.library.issuer.key_store import (
    ISSUER_PUBLIC_KEY_PATH,
    ISSUER_SECRET_KEY_PATH,
    MSP_PUBLIC_KEY_PATH,
    IssuerKeyStore,
    MissingKeyMaterialError,
)
from idemixgen_py.native.library.math.curve import scalar_to_bytes
from idemixgen_py.native.library.types.issuer_key import (
    IssuerKey,
    IssuerPublicKey,
    MalformedKeyError,
)
from idemixgen_py.native.util.filesystem.artifact_store import ArtifactStore


def _provisioned_store(base_dir: str) -> ArtifactStore:
    store = ArtifactStore(base_dir)
    store.create_directory("ca")
    store.create_directory("msp")
    return store


def test_new_issuer_key_is_consistent() -> None:
    """Test that a fresh issuer key passes its own proof and pairing checks."""
    key = new_issuer_key()
    key.check()
    assert key.public_key.attribute_names == ["OU", "Role"]
    assert len(key.public_key.h_attrs) == 2


def test_new_issuer_key_rejects_duplicate_attributes() -> None:
    """Test that duplicate attribute names are refused."""
    with pytest.raises(IssuerKeyGenerationError):
        new_issuer_key(["OU", "OU"])


def test_generated_keys_differ() -> None:
    """Test that two generator runs produce unrelated key material."""
    first_secret, first_public = generate_issuer_key()
    second_secret, second_public = generate_issuer_key()
    assert first_secret != second_secret
    assert first_public != second_public


def test_public_key_cbor_round_trip() -> None:
    """Test that the CBOR encoding decodes to an equal record."""
    key = new_issuer_key()
    encoded = key.public_key.export_cbor()
    decoded = IssuerPublicKey.import_cbor(encoded)
    assert decoded == key.public_key
    assert decoded.export_cbor() == encoded


def test_import_cbor_rejects_garbage() -> None:
    """Test that undecodable bytes are reported as a malformed key."""
    with pytest.raises(MalformedKeyError):
        IssuerPublicKey.import_cbor(b"\xff\x00not cbor")


def test_import_cbor_rejects_wrong_shape() -> None:
    """Test that valid CBOR of the wrong shape is reported as a malformed key."""
    with pytest.raises(MalformedKeyError):
        IssuerPublicKey.import_cbor(cbor2.dumps({"w": b"\x04"}))


def test_check_detects_tampering() -> None:
    """Test that changing a field breaks the digest check."""
    key = new_issuer_key()
    tampered = key.public_key.model_copy(update={"attribute_names": ["OU", "Admin"]})
    with pytest.raises(MalformedKeyError):
        tampered.check()


def test_check_detects_mismatched_secret() -> None:
    """Test that a secret key from another issuer is rejected."""
    key = new_issuer_key()
    other = new_issuer_key()
    with pytest.raises(MalformedKeyError):
        IssuerKey(secret_key=other.secret_key, public_key=key.public_key).check()


def test_check_rejects_zero_secret() -> None:
    """Test that a zero secret key is rejected."""
    key = new_issuer_key()
    with pytest.raises(MalformedKeyError):
        IssuerKey(secret_key=scalar_to_bytes(0), public_key=key.public_key).check()


def test_persist_writes_three_files(base_dir: str) -> None:
    """Test that persisting writes the secret key and two identical public keys."""
    secret_key, public_key = generate_issuer_key()
    IssuerKeyStore(_provisioned_store(base_dir)).persist(secret_key, public_key)

    with open(os.path.join(base_dir, ISSUER_SECRET_KEY_PATH), "rb") as f:
        assert f.read() == secret_key
    with open(os.path.join(base_dir, ISSUER_PUBLIC_KEY_PATH), "rb") as f:
        issuer_copy = f.read()
    with open(os.path.join(base_dir, MSP_PUBLIC_KEY_PATH), "rb") as f:
        msp_copy = f.read()
    assert issuer_copy == msp_copy == public_key


def test_reconstruct_round_trip(base_dir: str) -> None:
    """Test that reconstruction yields the public key that was generated."""
    secret_key, public_key = generate_issuer_key()
    key_store = IssuerKeyStore(_provisioned_store(base_dir))
    key_store.persist(secret_key, public_key)

    key = key_store.reconstruct()
    assert key.secret_key == secret_key
    assert key.public_key.export_cbor() == public_key


def test_reconstruct_without_keys(base_dir: str) -> None:
    """Test that reconstruction from an empty directory reports missing material."""
    with pytest.raises(MissingKeyMaterialError, match="issuer secret key"):
        IssuerKeyStore(ArtifactStore(base_dir)).reconstruct()


def test_reconstruct_without_public_key(base_dir: str) -> None:
    """Test that a missing public key file is reported as missing material."""
    store = _provisioned_store(base_dir)
    secret_key, _ = generate_issuer_key()
    store.write_artifact(ISSUER_SECRET_KEY_PATH, secret_key)
    with pytest.raises(MissingKeyMaterialError, match="issuer public key"):
        IssuerKeyStore(store).reconstruct()


def test_reconstruct_malformed_public_key(base_dir: str) -> None:
    """Test that an undecodable public key file is reported as malformed."""
    store = _provisioned_store(base_dir)
    secret_key, _ = generate_issuer_key()
    store.write_artifact(ISSUER_SECRET_KEY_PATH, secret_key)
    store.write_artifact(ISSUER_PUBLIC_KEY_PATH, b"garbage")
    with pytest.raises(MalformedKeyError):
        IssuerKeyStore(store).reconstruct()


def test_import_cbor_rejects_trailing_bytes() -> None:
    """Test that bytes after the encoded record make the key malformed."""
    encoded = new_issuer_key().public_key.export_cbor()
    with pytest.raises(MalformedKeyError):
        IssuerPublicKey.import_cbor(encoded + b"garbage")


def test_reconstruct_public_key_with_trailing_bytes(base_dir: str) -> None:
    """Test that an issuer public key file with appended data is rejected."""
    store = _provisioned_store(base_dir)
    secret_key, public_key = generate_issuer_key()
    store.write_artifact(ISSUER_SECRET_KEY_PATH, secret_key)
    store.write_artifact(ISSUER_PUBLIC_KEY_PATH, public_key + b"garbage")
    with pytest.raises(MalformedKeyError):
        IssuerKeyStore(store).reconstruct()


def test_generator_wraps_rng_failure(monkeypatch) -> None:
    """Test that an entropy failure surfaces as an issuer key generation error."""

    def failing_rng() -> int:
        raise OSError("entropy source unavailable")

    monkeypatch.setattr(
        "idemixgen_py.native.library.issuer.keygen.rand_mod_order", failing_rng
    )
    with pytest.raises(IssuerKeyGenerationError) as excinfo:
        generate_issuer_key()
    assert isinstance(excinfo.value.__cause__, OSError)
