from enum import StrEnum
from typing import Annotated
from pydantic import BaseModel, Field


class SignalType(StrEnum):
    PERSONA_TRAIT = "persona_trait"
    PAIN_POINT = "pain_point"


class Signal(BaseModel):
    """
    A single piece of lexical evidence extracted from one message.
    Ephemeral: consumed by the persona accumulator and recorded for audit.
    """
    type: SignalType
    category: str = Field(..., description="Persona axis (e.g. 'sales_focus') or pain-point tag.")
    strength: Annotated[float, Field(gt=0, le=1.0)]
    evidence: str = Field(..., description="Verbatim substring of the message.")

    def describe(self) -> str:
        return f"{self.type}/{self.category}: {self.strength}"
