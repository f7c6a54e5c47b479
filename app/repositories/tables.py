"""Table definitions for members, observations, registros and pontos."""
from sqlalchemy import (
    JSON, Column, DateTime, ForeignKey, Index, Integer, MetaData, String, Table, Text,
    func,
)

metadata = MetaData()

members = Table(
    "members",
    metadata,
    Column("discord_user_id", String(32), primary_key=True),
    Column("username", String(255), nullable=False),
    Column("avatar_url", Text),
    Column("roles", JSON, nullable=False, default=list),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
)

member_observations = Table(
    "member_observations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("discord_user_id", String(32),
           ForeignKey("members.discord_user_id", ondelete="CASCADE"),
           nullable=False, index=True),
    Column("text", Text, nullable=False),
    Column("author", String(255), nullable=False),
    Column("date", DateTime(timezone=True), nullable=False),
)

registros = Table(
    "registros",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(32), nullable=False, index=True),
    Column("username", String(255), nullable=False),
    Column("batalhao_id", String(32), nullable=False, index=True),
    Column("ultimo_aviso_enviado", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    Index("ix_registros_user_batalhao", "user_id", "batalhao_id"),
)

pontos = Table(
    "pontos",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("registro_id", String(36),
           ForeignKey("registros.id", ondelete="CASCADE"),
           nullable=False, index=True),
    Column("entrada", DateTime(timezone=True), nullable=False, index=True),
    Column("saida", DateTime(timezone=True)),
)
