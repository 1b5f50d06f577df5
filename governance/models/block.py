from typing import Any, Mapping, Optional

from eth_utils import encode_hex
from pydantic import BaseModel, ConfigDict


class BlockSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    timestamp: int
    hash: Optional[str] = None

    @classmethod
    def from_web3_block(cls, block: Mapping[str, Any]) -> "BlockSnapshot":
        block_hash = block.get("hash")
        if isinstance(block_hash, (bytes, bytearray)):
            block_hash = encode_hex(bytes(block_hash))
        return cls(number=block["number"], timestamp=block["timestamp"], hash=block_hash)
