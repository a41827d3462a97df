from typing import Annotated, Any, Self

import pydantic
from pydantic.alias_generators import to_camel

from .utils import json_dumps_bytes

U64_MAX = 2**64 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

TU64 = Annotated[pydantic.StrictInt, pydantic.Field(ge=0, le=U64_MAX)]
TI64 = Annotated[pydantic.StrictInt, pydantic.Field(ge=I64_MIN, le=I64_MAX)]


class ChainModelBase(pydantic.BaseModel):
    """Frozen model with the `ethereum-lists/chains` lowerCamelCase keys on the wire"""

    # Unknown keys (`features`, `title`, `status`, `parent`, ...) are ignored.
    model_config = pydantic.ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def replace(self, **kwargs: Any) -> Self:
        return self.model_copy(update=kwargs)


class NativeCurrency(ChainModelBase):
    name: pydantic.StrictStr
    symbol: pydantic.StrictStr
    decimals: TI64


class Ens(ChainModelBase):
    # `0x`-prefixed checksummed address
    registry: pydantic.StrictStr


class Explorer(ChainModelBase):
    name: pydantic.StrictStr
    url: pydantic.StrictStr
    standard: pydantic.StrictStr


class ChainRecord(ChainModelBase):
    # E.g. "Ethereum Mainnet"
    name: pydantic.StrictStr
    # E.g. "ETH"
    chain: pydantic.StrictStr
    # E.g. "mainnet"
    network: pydantic.StrictStr
    # Icon name within `ethereum-lists/chains`
    icon: pydantic.StrictStr | None = None
    rpc: list[pydantic.StrictStr]
    faucets: list[pydantic.StrictStr]
    native_currency: NativeCurrency
    info_url: pydantic.StrictStr = pydantic.Field(alias="infoURL")
    short_name: pydantic.StrictStr
    chain_id: TU64
    network_id: TU64
    slip44: TU64 | None = None
    ens: Ens | None = None
    explorers: list[Explorer] = pydantic.Field(default_factory=list)

    def dump_wire(self) -> dict[str, Any]:
        """Wire-format (`infoURL`, `nativeCurrency`, ...) representation, `None` values included"""
        return self.model_dump(mode="json", by_alias=True)

    def dump_json(self) -> bytes:
        return json_dumps_bytes(self.dump_wire())
