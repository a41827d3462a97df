import re
from pathlib import Path
from typing import BinaryIO

import orjson
import pydantic

from .chain_errors import ChainDeserializationError, ChainFileError
from .chain_models import U64_MAX, ChainRecord
from .utils import json_loads

# Relative to the working directory, same as the `ethereum-lists/chains` checkout.
DEFAULT_DATA_DIR = Path("ethereum-list/chains/_data/chains")

CHAIN_FILE_PREFIX = "eip155-"
CHAIN_FILE_SUFFIX = ".json"
CHAIN_FILE_NAME_RE = re.compile(r"eip155-(?P<chain_id>[0-9]+)\.json")


def chain_file_name(chain_id: int) -> str:
    return f"{CHAIN_FILE_PREFIX}{chain_id}{CHAIN_FILE_SUFFIX}"


def parse_chain_file_name(file_name: str) -> int:
    """
    Chain id from a chain file name.

    >>> parse_chain_file_name("eip155-137.json")
    137
    >>> parse_chain_file_name("eip155-0x89.json")
    Traceback (most recent call last):
    ...
    ValueError: Chain file name was in incorrect form, expected: eip155-CHAIN_ID.json: 'eip155-0x89.json'
    """
    match = CHAIN_FILE_NAME_RE.fullmatch(file_name)
    if match is None:
        raise ValueError(f"Chain file name was in incorrect form, expected: eip155-CHAIN_ID.json: {file_name!r}")
    chain_id = int(match.group("chain_id"))
    if chain_id > U64_MAX:
        raise ValueError(f"Chain id in file name is out of the unsigned 64-bit range: {file_name!r}")
    return chain_id


def decode_chain(data: bytes | str | BinaryIO) -> ChainRecord:
    """
    Parse and validate a single chain document.

    `data` is the UTF-8 JSON content or a binary reader of it.
    Raises `ChainDeserializationError` on invalid JSON or a document
    that does not match the `ChainRecord` shape.
    """
    raw = data if isinstance(data, bytes | str) else data.read()
    try:
        raw_data = json_loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ChainDeserializationError(cause=exc) from exc

    try:
        # Wire names only: `chain_id` etc. are not accepted in place of `chainId`.
        return ChainRecord.model_validate(raw_data, by_alias=True, by_name=False)
    except pydantic.ValidationError as exc:
        raise ChainDeserializationError(cause=exc) from exc


def decode_chain_path(path: Path) -> ChainRecord:
    try:
        with path.open("rb") as fobj:
            raw = fobj.read()
    except OSError as exc:
        raise ChainFileError(cause=exc) from exc
    return decode_chain(raw)


def decode_chain_file(chain_id: int, data_dir: Path = DEFAULT_DATA_DIR) -> ChainRecord:
    """Read and decode `<data_dir>/eip155-<chain_id>.json`"""
    return decode_chain_path(data_dir / chain_file_name(chain_id))
