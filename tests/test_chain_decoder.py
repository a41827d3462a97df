import io
from pathlib import Path
from typing import Any

import pydantic
import pytest

from evmchains.chains.chain_decoder import (
    chain_file_name,
    decode_chain,
    decode_chain_file,
    parse_chain_file_name,
)
from evmchains.chains.chain_errors import (
    ChainDeserializationError,
    ChainError,
    ChainErrorKind,
    ChainFileError,
)
from evmchains.chains.chain_models import ChainRecord, Ens, Explorer, NativeCurrency
from evmchains.chains.utils import json_dumps

DATA_DIR = Path(__file__).parent / "data" / "chains"

SAMPLE_CHAIN_DATA: dict[str, Any] = {
    "name": "Ethereum Mainnet",
    "chain": "ETH",
    "network": "mainnet",
    "rpc": ["https://rpc.example"],
    "faucets": [],
    "nativeCurrency": {"name": "Ether", "symbol": "ETH", "decimals": 18},
    "infoURL": "https://ethereum.org",
    "shortName": "eth",
    "chainId": 1,
    "networkId": 1,
    "explorers": [],
}


def _without(data: dict[str, Any], key: str) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k != key}


def test_decode_sample() -> None:
    chain = decode_chain(json_dumps(SAMPLE_CHAIN_DATA))
    assert chain.chain_id == 1
    assert chain.network_id == 1
    assert chain.info_url == "https://ethereum.org"
    assert chain.short_name == "eth"
    assert chain.native_currency == NativeCurrency(name="Ether", symbol="ETH", decimals=18)
    assert chain.explorers == []
    assert chain.icon is None
    assert chain.slip44 is None
    assert chain.ens is None


def test_decode_bytes_and_reader() -> None:
    raw = json_dumps(SAMPLE_CHAIN_DATA).encode()
    assert decode_chain(raw) == decode_chain(io.BytesIO(raw))


def test_decode_data_file() -> None:
    chain = decode_chain((DATA_DIR / "eip155-1.json").read_bytes())
    assert chain.name == "Ethereum Mainnet"
    assert chain.slip44 == 60
    assert chain.ens == Ens(registry="0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e")
    assert chain.explorers[0] == Explorer(name="etherscan", url="https://etherscan.io", standard="EIP3091")
    # Unknown keys (`features`, explorer `icon`) are ignored
    assert "features" not in chain.dump_wire()


def test_decode_missing_explorers() -> None:
    chain = decode_chain(json_dumps(_without(SAMPLE_CHAIN_DATA, "explorers")))
    assert chain.explorers == []


@pytest.mark.parametrize("key", ["chainId", "networkId", "nativeCurrency", "infoURL", "rpc", "faucets", "network"])
def test_decode_missing_required(key: str) -> None:
    with pytest.raises(ChainDeserializationError) as exc_info:
        decode_chain(json_dumps(_without(SAMPLE_CHAIN_DATA, key)))
    assert exc_info.value.kind == ChainErrorKind.JSON
    assert isinstance(exc_info.value.cause, pydantic.ValidationError)
    assert key in str(exc_info.value)


def test_decode_snake_case_info_url_is_not_the_wire_name() -> None:
    data = _without(SAMPLE_CHAIN_DATA, "infoURL")
    with pytest.raises(ChainDeserializationError):
        decode_chain(json_dumps({**data, "infoUrl": "https://ethereum.org"}))


@pytest.mark.parametrize(
    "update",
    [
        {"chainId": "1"},
        {"chainId": -1},
        {"chainId": 1.5},
        {"chainId": True},
        {"networkId": None},
        {"name": 1},
        {"rpc": "https://rpc.example"},
        {"nativeCurrency": {"name": "Ether", "symbol": "ETH", "decimals": "18"}},
        {"explorers": [{"name": "etherscan", "url": "https://etherscan.io"}]},
        {"ens": {}},
    ],
)
def test_decode_wrong_types(update: dict[str, Any]) -> None:
    with pytest.raises(ChainDeserializationError):
        decode_chain(json_dumps({**SAMPLE_CHAIN_DATA, **update}))


@pytest.mark.parametrize("chain_id_raw", [str(2**64), "-1", "1e3"])
def test_decode_chain_id_out_of_range(chain_id_raw: str) -> None:
    # Built as text: orjson can't encode integers above 64 bits.
    raw = json_dumps({**SAMPLE_CHAIN_DATA, "chainId": 0}).replace('"chainId":0', f'"chainId":{chain_id_raw}')
    assert f'"chainId":{chain_id_raw}' in raw
    with pytest.raises(ChainDeserializationError):
        decode_chain(raw.encode())


def test_decode_python_field_names() -> None:
    data = {
        **_without(_without(_without(SAMPLE_CHAIN_DATA, "chainId"), "infoURL"), "nativeCurrency"),
        "chain_id": 1,
        "info_url": "https://ethereum.org",
        "native_currency": {"name": "Ether", "symbol": "ETH", "decimals": 18},
    }
    with pytest.raises(ChainDeserializationError) as exc_info:
        decode_chain(json_dumps(data))
    message = str(exc_info.value)
    assert "chainId" in message
    assert "infoURL" in message
    assert "nativeCurrency" in message


def test_decode_u64_max() -> None:
    chain = decode_chain(json_dumps({**SAMPLE_CHAIN_DATA, "chainId": 2**64 - 1}))
    assert chain.chain_id == 2**64 - 1


@pytest.mark.parametrize("raw", [b"", b"{", b"not json", b'{"name": "x",}', b"\xff\xfe{}", b"[]", b"null"])
def test_decode_invalid(raw: bytes) -> None:
    with pytest.raises(ChainDeserializationError) as exc_info:
        decode_chain(raw)
    assert str(exc_info.value).startswith("Deserializing json: ")


def test_roundtrip() -> None:
    for path in sorted(DATA_DIR.iterdir()):
        chain = decode_chain(path.read_bytes())
        assert decode_chain(chain.dump_json()) == chain


def test_dump_wire_names() -> None:
    data = decode_chain(json_dumps(SAMPLE_CHAIN_DATA)).dump_wire()
    assert data["infoURL"] == "https://ethereum.org"
    assert data["nativeCurrency"]["decimals"] == 18
    assert data["shortName"] == "eth"
    assert data["slip44"] is None


def test_record_is_frozen() -> None:
    chain = decode_chain(json_dumps(SAMPLE_CHAIN_DATA))
    with pytest.raises(pydantic.ValidationError):
        chain.name = "Other"  # type: ignore[misc]
    other = chain.replace(name="Other")
    assert other.name == "Other"
    assert chain.name == "Ethereum Mainnet"


def test_record_populate_by_name() -> None:
    chain = ChainRecord(
        name="Test",
        chain="TST",
        network="testnet",
        rpc=[],
        faucets=[],
        native_currency=NativeCurrency(name="Test", symbol="TST", decimals=18),
        info_url="https://example.com",
        short_name="tst",
        chain_id=5,
        network_id=5,
    )
    assert decode_chain(chain.dump_json()) == chain


def test_chain_file_name() -> None:
    assert chain_file_name(137) == "eip155-137.json"
    assert parse_chain_file_name(chain_file_name(2**64 - 1)) == 2**64 - 1


@pytest.mark.parametrize(
    "file_name",
    [
        "eip155-.json",
        "eip-155-1.json",
        "1.json",
        "eip155-1.json.bak",
        "eip155-1.yaml",
        "eip155-0x1.json",
        "eip155--1.json",
        "eip155- 1.json",
        "eip155-١.json",
        f"eip155-{2**64}.json",
    ],
)
def test_parse_chain_file_name_malformed(file_name: str) -> None:
    with pytest.raises(ValueError):
        parse_chain_file_name(file_name)


def test_decode_chain_file() -> None:
    chain = decode_chain_file(137, data_dir=DATA_DIR)
    assert chain.chain_id == 137
    assert chain.short_name == "matic"


def test_decode_chain_file_missing(tmp_path: Path) -> None:
    with pytest.raises(ChainFileError) as exc_info:
        decode_chain_file(1, data_dir=tmp_path)
    exc = exc_info.value
    assert isinstance(exc, ChainError)
    assert exc.kind == ChainErrorKind.FILE
    assert isinstance(exc.cause, FileNotFoundError)
    assert str(exc).startswith("Reading file: ")


def test_decode_chain_file_invalid(tmp_path: Path) -> None:
    (tmp_path / "eip155-1.json").write_text("{")
    with pytest.raises(ChainDeserializationError):
        decode_chain_file(1, data_dir=tmp_path)


def test_error_str_without_cause() -> None:
    assert str(ChainFileError()) == "Reading file"
    assert str(ChainDeserializationError()) == "Deserializing json"
