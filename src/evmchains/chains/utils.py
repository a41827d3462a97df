from typing import Any

import orjson


def json_loads(data: bytes | bytearray | memoryview | str) -> Any:
    return orjson.loads(data)


def json_dumps_bytes(value: Any) -> bytes:
    return orjson.dumps(value)


def json_dumps(value: Any) -> str:
    # On bytes/str dumps output:
    # https://github.com/ijl/orjson/issues/66
    return orjson.dumps(value).decode()
