"""
Domain models — pure data structures, NO FastAPI dependency.

Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``), matching what the dashboard frontend reads.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_ONE_MS = timedelta(milliseconds=1)


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Interval(_Model):
    """One check-in/check-out ("ponto"). Open while ``saida`` is None."""
    id: Optional[str] = Field(default=None, alias="_id")
    entrada: datetime
    saida: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.saida is None

    @property
    def duration_ms(self) -> int:
        """Milliseconds between entrada and saida; 0 while open."""
        if self.saida is None:
            return 0
        return (self.saida - self.entrada) // _ONE_MS


class IntervalRecord(_Model):
    id: Optional[str] = Field(default=None, alias="_id")
    user_id: str
    username: str
    batalhao_id: str = ""
    ultimo_aviso_enviado: Optional[datetime] = None
    pontos: list[Interval] = Field(default_factory=list)


class Role(_Model):
    id: str
    name: str
    color: str = "#99aab5"


class Observation(_Model):
    text: str
    author: str
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Member(_Model):
    discord_user_id: str
    username: str
    avatar_url: Optional[str] = None
    roles: list[Role] = Field(default_factory=list)
    observations: list[Observation] = Field(default_factory=list)


class UserRef(_Model):
    user_id: str
    username: str
