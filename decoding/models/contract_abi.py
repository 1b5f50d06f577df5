from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContractAbi(BaseModel):
    """A verified contract's name and ABI as published by the chain explorer."""

    model_config = ConfigDict(frozen=True)

    address: str
    contract_name: str
    abi: List[Dict[str, Any]] = Field(default_factory=list)
    # Set when the explorer resolved the address as a proxy
    implementation: Optional[str] = None
