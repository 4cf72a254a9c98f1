"""Typed commands extracted from assistant replies."""
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field


class InitDraft(BaseModel):
    kind: Literal["init_draft"] = "init_draft"
    name: str
    requirements: str = ""


class AddPart(BaseModel):
    kind: Literal["add_part"] = "add_part"
    part_id: str
    qty: int = 1


class RemovePart(BaseModel):
    kind: Literal["remove_part"] = "remove_part"
    instance_id: str


Command = Annotated[Union[InitDraft, AddPart, RemovePart], Field(discriminator="kind")]


class ParsedReply(BaseModel):
    """Assistant text with the command calls excised, plus the calls in first-seen order."""
    reasoning: str
    commands: List[Command] = Field(default_factory=list)
