from idemixgen_py.config import (
    ISSUER_DIR,
    ISSUER_PUBLIC_KEY_FILE,
    ISSUER_SECRET_KEY_FILE,
    MSP_DIR,
)
from idemixgen_py.native.util.filesystem.artifact_store import (
    ArtifactIOError,
    ArtifactStore,
)
from idemixgen_py.native.library.types.issuer_key import (
    IssuerKey,
    IssuerKeyError,
    IssuerPublicKey,
)
from idemixgen_py.native.util.logging import logger
import os

ISSUER_SECRET_KEY_PATH = os.path.join(ISSUER_DIR, ISSUER_SECRET_KEY_FILE)
ISSUER_PUBLIC_KEY_PATH = os.path.join(ISSUER_DIR, ISSUER_PUBLIC_KEY_FILE)
MSP_PUBLIC_KEY_PATH = os.path.join(MSP_DIR, ISSUER_PUBLIC_KEY_FILE)

###
# Exceptions
###


class MissingKeyMaterialError(IssuerKeyError):
    """Raised when an issuer key file cannot be opened"""

    pass


###
# Issuer Key Store
###


class IssuerKeyStore:
    """
    Persists issuer key material into the issuer and MSP directories and
    reassembles it later.

    The caller creates both directories before persisting.
    """

    def __init__(self, artifact_store: ArtifactStore):
        self.artifact_store = artifact_store

    def persist(self, secret_key: bytes, public_key: bytes) -> None:
        """
        Write the secret key and both copies of the public key.

        Args:
            secret_key: Raw issuer secret key bytes
            public_key: Serialized issuer public key, written byte-for-byte to
                the issuer directory and to the MSP directory

        Raises:
            ArtifactStoreError: If any file cannot be written
        """
        self.artifact_store.write_artifact(ISSUER_SECRET_KEY_PATH, secret_key)
        self.artifact_store.write_artifact(ISSUER_PUBLIC_KEY_PATH, public_key)
        self.artifact_store.write_artifact(MSP_PUBLIC_KEY_PATH, public_key)

    def _read(self, relative_path: str, description: str) -> bytes:
        try:
            return self.artifact_store.read_artifact(relative_path)
        except ArtifactIOError as e:
            raise MissingKeyMaterialError(
                f"failed to open {description} file: {relative_path}: {e}"
            ) from e

    def reconstruct(self) -> IssuerKey:
        """
        Read the issuer key back from the issuer directory.

        Returns:
            The issuer key pair written by a previous persist()

        Raises:
            MissingKeyMaterialError: If either key file cannot be opened
            MalformedKeyError: If the public key cannot be decoded, fails its
                checks, or does not belong to the secret key
        """
        secret_key = self._read(ISSUER_SECRET_KEY_PATH, "issuer secret key")
        public_key_bytes = self._read(ISSUER_PUBLIC_KEY_PATH, "issuer public key")

        key = IssuerKey(
            secret_key=secret_key,
            public_key=IssuerPublicKey.import_cbor(public_key_bytes),
        )
        key.check()

        logger.info(
            f"Loaded issuer key from {self.artifact_store.path(ISSUER_DIR)} "
            f"(public key hash 0x{key.public_key.hash.hex()})"
        )
        return key
