from __future__ import annotations

import dataclasses
import enum
import logging
import os
import threading
import time
import types
from pathlib import Path
from typing import TYPE_CHECKING, Self

from .chain_decoder import DEFAULT_DATA_DIR, decode_chain_path, parse_chain_file_name
from .chain_errors import (
    CatalogBuildError,
    CatalogDirectoryError,
    ChainError,
    ChainFileDecodeError,
    ChainIdMismatchError,
    DuplicateChainIdError,
    MalformedChainFileNameError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..settings import Settings
    from .chain_models import ChainRecord

LOGGER = logging.getLogger(__name__)

# chain_id -> record
TChains = dict[int, "ChainRecord"]


class CatalogState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    BUILDING = "building"
    READY = "ready"
    # Terminal: the data directory is not retried.
    FAILED = "failed"


def _list_entries(data_dir: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(data_dir) as entries_it:
            return sorted(entries_it, key=lambda entry: entry.name)
    except OSError as exc:
        raise CatalogDirectoryError(data_dir=data_dir, cause=exc) from exc


def _is_regular_file(entry: os.DirEntry[str], data_dir: Path) -> bool:
    try:
        # Symlinks are not followed (and thus skipped).
        return entry.is_file(follow_symlinks=False)
    except OSError as exc:
        raise CatalogDirectoryError(data_dir=data_dir, file_name=entry.name, cause=exc) from exc


def build_catalog(
    data_dir: Path = DEFAULT_DATA_DIR,
    *,
    strict_chain_id: bool = False,
    logger: logging.Logger = LOGGER,
) -> Mapping[int, ChainRecord]:
    """
    Read every `eip155-<chain_id>.json` file of `data_dir` into a read-only mapping.

    Any broken entry fails the whole build with a `CatalogBuildError`:
    a malformed file name, an unreadable or invalid file, a duplicate chain id,
    and (with `strict_chain_id`) a `chainId` that differs from the file name.
    Non-regular entries (directories, symlinks, ...) are skipped.
    """
    start_time = time.monotonic()
    chains: TChains = {}

    for entry in _list_entries(data_dir):
        if not _is_regular_file(entry, data_dir):
            logger.debug("Skipping non-file entry %r", entry.name)
            continue

        try:
            chain_id = parse_chain_file_name(entry.name)
        except ValueError as exc:
            raise MalformedChainFileNameError(data_dir=data_dir, file_name=entry.name, cause=exc) from exc

        try:
            chain = decode_chain_path(Path(entry.path))
        except ChainError as exc:
            raise ChainFileDecodeError(data_dir=data_dir, file_name=entry.name, chain_id=chain_id, cause=exc) from exc

        if chain.chain_id != chain_id:
            if strict_chain_id:
                raise ChainIdMismatchError(
                    data_dir=data_dir, file_name=entry.name, chain_id=chain_id, body_chain_id=chain.chain_id
                )
            logger.warning(
                "Chain file %r has chainId=%r, indexing by the file name",
                entry.name,
                chain.chain_id,
                extra=dict(x_chain_id=chain_id, x_body_chain_id=chain.chain_id),
            )

        if chain_id in chains:
            raise DuplicateChainIdError(data_dir=data_dir, file_name=entry.name, chain_id=chain_id)
        chains[chain_id] = chain

    time_diff = round(time.monotonic() - start_time, 3)
    logger.info(
        "Loaded %d chains from %s in %.3fs",
        len(chains),
        data_dir,
        time_diff,
        extra=dict(x_timing=time_diff, x_chains=len(chains)),
    )
    return types.MappingProxyType(chains)


@dataclasses.dataclass()
class ChainCatalog:
    """
    Lazily built, process-lifetime catalog of chains by chain id.

    The build happens once, on first access, under a lock; concurrent first
    callers wait for it. A failed build is remembered and re-raised.
    """

    data_dir: Path = DEFAULT_DATA_DIR
    strict_chain_id: bool = False
    logger: logging.Logger = LOGGER

    def __post_init__(self) -> None:
        self._lock = threading.Lock()
        self._state = CatalogState.UNINITIALIZED
        self._chains: Mapping[int, ChainRecord] | None = None
        self._build_error: CatalogBuildError | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        return cls(data_dir=settings.opts.data_dir, strict_chain_id=settings.opts.strict_chain_id)

    @property
    def state(self) -> CatalogState:
        return self._state

    def _build(self) -> Mapping[int, ChainRecord]:
        return build_catalog(self.data_dir, strict_chain_id=self.strict_chain_id, logger=self.logger)

    def _get_chains(self) -> Mapping[int, ChainRecord]:
        chains = self._chains
        if chains is not None:
            return chains

        with self._lock:
            if self._chains is not None:
                return self._chains
            if self._build_error is not None:
                raise self._build_error

            self._state = CatalogState.BUILDING
            try:
                chains = self._build()
            except CatalogBuildError as exc:
                self.logger.exception("Chain catalog build failed", extra=dict(x_data_dir=str(self.data_dir)))
                self._build_error = exc
                self._state = CatalogState.FAILED
                raise

            self._chains = chains
            self._state = CatalogState.READY
            return chains

    def load(self) -> Self:
        """Build now (if not yet), e.g. to fail at startup rather than on the first lookup"""
        self._get_chains()
        return self

    @staticmethod
    def _is_chain_id(value: object) -> bool:
        # `True` and `1.0` would otherwise match the `1` key.
        return isinstance(value, int) and not isinstance(value, bool)

    def get(self, chain_id: int) -> ChainRecord | None:
        if not self._is_chain_id(chain_id):
            return None
        chain = self._get_chains().get(chain_id)
        if chain is None:
            return None
        # The stored records are never handed out: `rpc.append` etc. must not alter the catalog.
        return chain.model_copy(deep=True)

    def chain_ids(self) -> list[int]:
        return sorted(self._get_chains())

    def __contains__(self, chain_id: object) -> bool:
        return self._is_chain_id(chain_id) and chain_id in self._get_chains()

    def __len__(self) -> int:
        return len(self._get_chains())
