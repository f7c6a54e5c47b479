"""Tests for role-seniority roster ordering."""
import math

from app.core.config import IGNORED_MEMBER_IDS, ROLE_HIERARCHY
from app.models.domain import Member, Role
from app.services.hierarchy import collation_key, role_level, sort_members


def member(user_id, username, *role_names):
    return Member(
        discord_user_id=user_id,
        username=username,
        roles=[Role(id=f"role-{i}", name=name) for i, name in enumerate(role_names)],
    )


class TestRoleLevel:
    def test_most_senior_role_wins(self):
        m = member("1", "a", "Inspetor Geral", "Agente de 1ª Classe")
        assert role_level(m) == ROLE_HIERARCHY.index("Inspetor") == 3

    def test_longer_title_matches_earlier_entry(self):
        assert role_level(member("1", "a", "Inspetor de Divisão")) == 2

    def test_substring_match_quirk(self):
        assert role_level(member("1", "a", "Ex-Inspetor")) == 3

    def test_match_is_case_sensitive(self):
        assert role_level(member("1", "a", "Subinspetor")) == 4

    def test_no_match_is_infinite(self):
        assert role_level(member("1", "a", "Visitante")) == math.inf
        assert role_level(member("2", "b")) == math.inf


class TestSortMembers:
    def test_seniority_then_name(self):
        members = [
            member("1", "zeca", "Estágio"),
            member("2", "bruno", "Inspetor"),
            member("3", "Álvaro", "Inspetor"),
            member("4", "alice", "Visitante"),
            member("5", "carla", "Inspetor Superintendente"),
        ]
        ordered = [m.username for m in sort_members(members)]
        assert ordered == ["carla", "Álvaro", "bruno", "zeca", "alice"]

    def test_unmatched_members_last_alphabetically(self):
        members = [member("1", "Bob"), member("2", "alice"), member("3", "x", "Estágio")]
        assert [m.username for m in sort_members(members)] == ["x", "alice", "Bob"]

    def test_ignored_ids_removed(self):
        hidden = next(iter(IGNORED_MEMBER_IDS))
        members = [member(hidden, "hidden", "Inspetor"), member("1", "shown")]
        assert [m.discord_user_id for m in sort_members(members)] == ["1"]

    def test_custom_exclusions(self):
        members = [member("1", "a"), member("2", "b")]
        assert [m.username for m in sort_members(members, excluded={"1"})] == ["b"]

    def test_collation_ignores_accents_and_case(self):
        assert sorted(["Érica", "eduardo", "Fabio"], key=collation_key) == [
            "eduardo", "Érica", "Fabio"]
