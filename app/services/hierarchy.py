"""
Service: Roster ordering by role seniority — pure computation.

A role matches a hierarchy entry when the entry is a substring of the role
name, so "Ex-Inspetor" counts as "Inspetor". The most senior match across
all of a member's roles wins.
"""
import math
import unicodedata
from typing import Iterable, Sequence

from app.core.config import IGNORED_MEMBER_IDS, ROLE_HIERARCHY
from app.models.domain import Member


def role_matches(role_name: str, hierarchy_entry: str) -> bool:
    return hierarchy_entry in role_name


def role_level(member: Member, hierarchy: Sequence[str] = ROLE_HIERARCHY) -> float:
    """Index of the most senior matching hierarchy entry, or ``math.inf``."""
    level = math.inf
    for role in member.roles:
        for index, entry in enumerate(hierarchy):
            if index < level and role_matches(role.name, entry):
                level = index
    return level


def collation_key(name: str) -> tuple[str, str]:
    """Accent- and case-insensitive ordering, original text as tiebreak."""
    folded = "".join(
        ch for ch in unicodedata.normalize("NFKD", name)
        if not unicodedata.combining(ch)
    )
    return folded.casefold(), name


def sort_members(members: Iterable[Member], hierarchy: Sequence[str] = ROLE_HIERARCHY,
                 excluded: Iterable[str] = IGNORED_MEMBER_IDS) -> list[Member]:
    skip = frozenset(excluded)
    visible = [m for m in members if m.discord_user_id not in skip]
    return sorted(visible, key=lambda m: (role_level(m, hierarchy), collation_key(m.username)))
