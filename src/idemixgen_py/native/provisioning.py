from idemixgen_py.config import (
    DEFAULT_BASE_DIR,
    ISSUER_DIR,
    MSP_DIR,
    PROGRAM_NAME,
    SIGNER_CONFIG_FILE,
    SIGNER_DIR,
    VERSION,
)
from idemixgen_py.native.util.errors import IdemixGenError
from idemixgen_py.native.util.filesystem.artifact_store import (
    AlreadyProvisionedError,
    ArtifactStore,
    PathAlreadyExistsError,
)
from idemixgen_py.native.library.issuer.key_store import (
    ISSUER_PUBLIC_KEY_PATH,
    ISSUER_SECRET_KEY_PATH,
    MSP_PUBLIC_KEY_PATH,
    IssuerKeyStore,
)
from idemixgen_py.native.library.issuer.keygen import generate_issuer_key
from idemixgen_py.native.library.issuer.signer import generate_signer_config
from idemixgen_py.native.library.types.issuer_key import IssuerKey
from idemixgen_py.native.util.logging import logger
from dataclasses import dataclass
from result import Result, Ok, Err
from typing import Callable, List, Optional, Tuple, TypeAlias, TypedDict
import os
import platform
import sys

###
# Each workflow runs once per process and never exits it: failures come back as
# Err(IdemixGenError) for the command dispatcher to report. Every precondition is
# checked before the first directory is created. Nothing is rolled back if a
# later step fails.
###

IssuerKeyGenerator: TypeAlias = Callable[[], Tuple[bytes, bytes]]
SignerConfigGenerator: TypeAlias = Callable[[bool, str, IssuerKey], bytes]

SIGNER_CONFIG_PATH = os.path.join(SIGNER_DIR, SIGNER_CONFIG_FILE)


@dataclass(frozen=True)
class ProvisioningConfig:
    """
    Options for one provisioning run.

    Attributes:
        base_dir: Directory the issuer and MSP directories live in
        org_unit: Organizational unit of the signer (signerconfig only)
        is_admin: Whether the signer gets the admin role (signerconfig only)
    """

    base_dir: str = DEFAULT_BASE_DIR
    org_unit: str = ""
    is_admin: bool = False


class ProvisioningReport(TypedDict):
    directories: List[str]
    files: List[str]


ProvisioningResult = Result[ProvisioningReport, IdemixGenError]


def _check_not_provisioned(
    store: ArtifactStore, relative_paths: List[str], message: Optional[str] = None
) -> None:
    try:
        store.ensure_all_absent(relative_paths)
    except PathAlreadyExistsError as e:
        raise AlreadyProvisionedError(message or str(e)) from e


def ca_keygen(
    config: ProvisioningConfig,
    generate_key: IssuerKeyGenerator = generate_issuer_key,
) -> ProvisioningResult:
    """
    Generate the issuer key pair and write it to the issuer and MSP directories.

    Fails with AlreadyProvisionedError, before creating anything, if either
    directory already exists.
    """
    store = ArtifactStore(config.base_dir)
    try:
        _check_not_provisioned(store, [ISSUER_DIR, MSP_DIR])

        secret_key, public_key = generate_key()

        store.create_directory(ISSUER_DIR)
        store.create_directory(MSP_DIR)
        IssuerKeyStore(store).persist(secret_key, public_key)
    except IdemixGenError as e:
        return Err(e)

    return Ok(
        {
            "directories": [store.path(ISSUER_DIR), store.path(MSP_DIR)],
            "files": [
                store.path(ISSUER_SECRET_KEY_PATH),
                store.path(ISSUER_PUBLIC_KEY_PATH),
                store.path(MSP_PUBLIC_KEY_PATH),
            ],
        }
    )


def signerconfig(
    config: ProvisioningConfig,
    generate_config: SignerConfigGenerator = generate_signer_config,
) -> ProvisioningResult:
    """
    Issue a signer config from the stored issuer key into the MSP signer directory.

    The issuer key is reconstructed first, so a missing key is reported as
    MissingKeyMaterialError. An existing signer directory is reported as
    AlreadyProvisionedError before the generator runs.
    """
    store = ArtifactStore(config.base_dir)
    try:
        issuer_key = IssuerKeyStore(store).reconstruct()

        _check_not_provisioned(
            store,
            [SIGNER_DIR],
            f'This MSP config already contains a directory "{SIGNER_DIR}"',
        )

        signer_config = generate_config(config.is_admin, config.org_unit, issuer_key)

        store.create_directory(SIGNER_DIR)
        store.write_artifact(SIGNER_CONFIG_PATH, signer_config)
    except IdemixGenError as e:
        return Err(e)

    logger.info(
        f"Issued signer config for OU '{config.org_unit}' (admin: {config.is_admin})"
    )
    return Ok(
        {
            "directories": [store.path(SIGNER_DIR)],
            "files": [store.path(SIGNER_CONFIG_PATH)],
        }
    )


def version_info() -> str:
    """Static version descriptor; touches no files."""
    return (
        f"{PROGRAM_NAME}:\n"
        f" Version: {VERSION}\n"
        f" Python version: {platform.python_version()}\n"
        f" OS/Arch: {sys.platform}/{platform.machine()}"
    )
