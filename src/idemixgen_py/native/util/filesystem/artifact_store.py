from idemixgen_py.config import DIRECTORY_MODE, FILE_MODE
from idemixgen_py.native.util.errors import IdemixGenError
from idemixgen_py.native.util.logging import logger
from typing import Iterable
import os


###
# Exceptions
###


# Base exception class for artifact store errors
class ArtifactStoreError(IdemixGenError):
    pass


# Raised when a path that must not exist is already present
class PathAlreadyExistsError(ArtifactStoreError):
    pass


# Raised when a provisioning target has been provisioned before
class AlreadyProvisionedError(PathAlreadyExistsError):
    pass


# Raised when creating, writing or reading an artifact fails
class ArtifactIOError(ArtifactStoreError):
    pass


###
# Artifact Store
###


class ArtifactStore:
    """
    Owner-only directories and files under a base directory.

    Paths given to the store are relative to base_dir. Nothing is ever
    overwritten or removed: directories and files are only created when
    absent.
    """

    def __init__(self, base_dir: str):
        self.base_dir = base_dir

    def path(self, relative_path: str) -> str:
        return os.path.join(self.base_dir, relative_path)

    def exists(self, relative_path: str) -> bool:
        return os.path.lexists(self.path(relative_path))

    def ensure_absent(self, relative_path: str) -> None:
        """Fail if anything, including a dangling symlink, exists at the path.

        Raises:
            PathAlreadyExistsError: If the path exists
        """
        if self.exists(relative_path):
            raise PathAlreadyExistsError(f"Directory {relative_path} already exists")

    def ensure_all_absent(self, relative_paths: Iterable[str]) -> None:
        """Check every path before returning, creating nothing.

        Raises:
            PathAlreadyExistsError: For the first path that exists
        """
        for relative_path in relative_paths:
            self.ensure_absent(relative_path)

    def create_directory(self, relative_path: str) -> None:
        """Create a single owner-only directory; its parent must exist.

        Raises:
            PathAlreadyExistsError: If the directory appeared in the meantime
            ArtifactIOError: If the directory cannot be created
        """
        full_path = self.path(relative_path)
        try:
            os.mkdir(full_path, DIRECTORY_MODE)
        except FileExistsError as e:
            raise PathAlreadyExistsError(
                f"Directory {relative_path} already exists"
            ) from e
        except OSError as e:
            raise ArtifactIOError(
                f"Failed to create directory {relative_path}: {e}"
            ) from e
        logger.info(f"Created directory {full_path}")

    def write_artifact(self, relative_path: str, contents: bytes) -> None:
        """Write a new owner-only file; an existing file is never replaced.

        Raises:
            PathAlreadyExistsError: If a file is already present at the path
            ArtifactIOError: If the file cannot be created or written
        """
        full_path = self.path(relative_path)
        try:
            fd = os.open(full_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, FILE_MODE)
        except FileExistsError as e:
            raise PathAlreadyExistsError(f"File {relative_path} already exists") from e
        except OSError as e:
            raise ArtifactIOError(f"Failed to create file {relative_path}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(contents)
        except OSError as e:
            raise ArtifactIOError(f"Failed to write file {relative_path}: {e}") from e
        logger.info(f"Wrote {full_path}")

    def read_artifact(self, relative_path: str) -> bytes:
        """Read a file's raw bytes.

        Raises:
            ArtifactIOError: If the file cannot be opened or read
        """
        try:
            with open(self.path(relative_path), "rb") as f:
                return f.read()
        except OSError as e:
            raise ArtifactIOError(f"Failed to read file {relative_path}: {e}") from e
