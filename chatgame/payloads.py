"""Validation des payloads entrants (un modèle ou adaptateur par commande)."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    TypeAdapter,
)


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    user: str = ""
    text: str = ""
    timestamp: str = Field(
        default="",
        alias="timeStamp",
        validation_alias=AliasChoices("timeStamp", "timestamp"),
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ProblemSelection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    block_index: Optional[int] = Field(default=None, alias="blockIndex")
    problem_index: Optional[int] = Field(default=None, alias="problemIndex")


class GameResolution(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    game_resolution_type: Optional[str] = Field(default=None, alias="gameResolutionType")
    team_answer: Optional[str] = Field(default=None, alias="teamAnswer")


class TelemetryEvent(BaseModel):
    """Une ligne du CSV de télémétrie."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    user: Optional[str] = None
    confederate: Optional[str] = None
    action: Optional[str] = None
    text: Optional[str] = None
    timestamp: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None
    resolution: Optional[str] = None


class ChimesConfig(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    message_sent: Optional[Union[bool, str]] = Field(default=None, alias="messageSent")
    message_received: Optional[Union[bool, str]] = Field(default=None, alias="messageReceived")
    timer: Optional[Union[bool, str]] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# Valeurs simples
Name = TypeAdapter(str)
Seconds = TypeAdapter(PositiveInt)
Points = TypeAdapter(NonNegativeInt)
Tries = TypeAdapter(NonNegativeInt)
Nothing = TypeAdapter(Any)
