import json
from typing import Any

from avro2cass.domain.write import WriteUnit


def write_unit_payload(unit: WriteUnit) -> dict[str, Any]:
    """Plain JSON-ready view of a write unit; bytes become hex strings."""
    return {
        "row_key": unit.row_key.hex(),
        "mutations": [
            {
                "name": m.name,
                "value": m.value.hex(),
                "timestamp": m.timestamp,
                "ttl": m.ttl,
            }
            for m in unit.mutations
        ],
    }


class JsonLineFormatter:
    def __call__(self, item: WriteUnit) -> str:
        return json.dumps(write_unit_payload(item), ensure_ascii=False) + "\n"


class PrintLineFormatter:
    def __call__(self, item: WriteUnit) -> str:
        payload = write_unit_payload(item)
        cols = ", ".join(
            f"{m['name']}={m['value']}@{m['timestamp']}"
            + (f" ttl={m['ttl']}" if m["ttl"] else "")
            for m in payload["mutations"]
        )
        return f"{payload['row_key']}: {cols}\n"
