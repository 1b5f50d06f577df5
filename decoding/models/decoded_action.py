from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class DecodedArgument(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    abi_type: str
    value: str


class DecodedAction(BaseModel):
    """One proposal action rendered for humans."""

    model_config = ConfigDict(frozen=True)

    index: int
    target: str
    value: int = 0
    calldata: str = "0x"
    contract_name: Optional[str] = None
    function_signature: Optional[str] = None
    args: Tuple[DecodedArgument, ...] = ()
    prose: str
    used_fallback: bool = False

    @field_validator("prose")
    @classmethod
    def _prose_not_blank(cls, prose: str) -> str:
        if not prose or not prose.strip():
            raise ValueError("prose must not be empty")
        return prose
