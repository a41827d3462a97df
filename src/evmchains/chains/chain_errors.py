import dataclasses
import enum
from pathlib import Path


class ChainErrorKind(enum.Enum):
    JSON = "Deserializing json"
    FILE = "Reading file"

    @property
    def description(self) -> str:
        return self.value


@dataclasses.dataclass(kw_only=True)
class ChainError(Exception):
    """Recoverable failure to read or deserialize a single chain document"""

    kind: ChainErrorKind
    cause: Exception | None = None

    def __str__(self) -> str:
        if self.cause is None:
            return self.kind.description
        return f"{self.kind.description}: {self.cause}"


@dataclasses.dataclass(kw_only=True)
class ChainFileError(ChainError):
    kind: ChainErrorKind = ChainErrorKind.FILE


@dataclasses.dataclass(kw_only=True)
class ChainDeserializationError(ChainError):
    kind: ChainErrorKind = ChainErrorKind.JSON


@dataclasses.dataclass(kw_only=True)
class CatalogBuildError(Exception):
    """
    The chains data directory is broken: the catalog cannot be built.

    Not a subclass of `ChainError`: this is a startup-time condition
    that is never retried for the same catalog.
    """

    data_dir: Path
    file_name: str | None = None
    chain_id: int | None = None
    cause: Exception | None = None
    message: str = "Chain catalog build failed"

    def __str__(self) -> str:
        parts = [f"{self.message} ({self.data_dir}"]
        if self.file_name is not None:
            parts.append(f", file {self.file_name!r}")
        if self.chain_id is not None:
            parts.append(f", chain id {self.chain_id}")
        parts.append(")")
        if self.cause is not None:
            parts.append(f": {self.cause}")
        return "".join(parts)


@dataclasses.dataclass(kw_only=True)
class CatalogDirectoryError(CatalogBuildError):
    message: str = "Chains data directory is not readable"


@dataclasses.dataclass(kw_only=True)
class MalformedChainFileNameError(CatalogBuildError):
    file_name: str
    message: str = "Chain file name was in incorrect form, expected: eip155-CHAIN_ID.json"


@dataclasses.dataclass(kw_only=True)
class ChainFileDecodeError(CatalogBuildError):
    file_name: str
    cause: ChainError
    message: str = "Failed to read/deserialize chain file"


@dataclasses.dataclass(kw_only=True)
class DuplicateChainIdError(CatalogBuildError):
    chain_id: int
    message: str = "Duplicate chain id"


@dataclasses.dataclass(kw_only=True)
class ChainIdMismatchError(CatalogBuildError):
    file_name: str
    chain_id: int
    body_chain_id: int
    message: str = "Chain id in file name does not match the `chainId` in the file"

    def __str__(self) -> str:
        return f"{super().__str__()}: {self.body_chain_id=!r}"
