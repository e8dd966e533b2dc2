"""Unit tests for display-name normalization and embedded group codes."""

import pytest

from teams_attendance.logic import RunContext, classify_row, parse_display_name
from teams_attendance.models import GUEST, Roster

from conftest import participant


class TestParseDisplayName:
    def test_three_tokens_rotate_last_name_first(self):
        assert parse_display_name("Ivan Ivanovich Ivanov") == ("Ivanov Ivan Ivanovich", "")

    def test_abc_becomes_cab(self):
        assert parse_display_name("A B C") == ("C A B", "")

    def test_two_tokens_swap(self):
        assert parse_display_name("Ivan Ivanov") == ("Ivanov Ivan", "")

    def test_tokens_past_the_third_stay_in_place(self):
        assert parse_display_name("A B C D E") == ("C A B D E", "")

    @pytest.mark.parametrize("raw", ["SingleToken", "", "   "])
    def test_fewer_than_two_tokens_is_dropped(self, raw):
        assert parse_display_name(raw) is None

    def test_whitespace_runs_collapse(self):
        assert parse_display_name("  Ivan   Ivanovich\tIvanov ") == ("Ivanov Ivan Ivanovich", "")

    @pytest.mark.parametrize("marker", ["(Guest)", "(guest)", "(гость)", "(Гость)"])
    def test_guest_marker_is_removed(self, marker):
        assert parse_display_name(f"Ivan Ivanov {marker}") == ("Ivan Ivanov", "")

    def test_embedded_group_in_parentheses(self):
        name, group = parse_display_name("Anna Sergeevna Smirnova (МТ-11)")
        assert group == "(МТ-11"
        assert name == "Smirnova Anna Sergeevna (МТ-11"

    def test_bare_embedded_group_is_kept_as_is(self):
        assert parse_display_name("Anna Smirnova МТ-11") == ("МТ-11 Anna Smirnova", "МТ-11")

    def test_embedded_group_is_case_insensitive(self):
        _, group = parse_display_name("мп-21 Ivan Ivanov")
        assert group == "мп-21"

    def test_unknown_prefix_is_not_a_group(self):
        assert parse_display_name("Ivan Ivanov XY-21") == ("XY-21 Ivan Ivanov", "")

    def test_custom_prefixes(self):
        _, group = parse_display_name("Ivan Ivanov CS-101", group_prefixes=frozenset({"cs"}))
        assert group == "CS-101"


class TestClassifyRow:
    def test_roster_lookup_when_no_embedded_group(self, ctx):
        record = classify_row(participant("Ivan Ivanovich Ivanov"), ctx)
        assert record.group == "МП-21"
        assert record.full_name == "Ivanov Ivan Ivanovich"

    def test_embedded_group_skips_lookup(self, ctx):
        record = classify_row(participant("Ivan Ivanov МК-99"), ctx)
        assert record.group == "МК-99"

    def test_unknown_name_is_guest(self):
        record = classify_row(participant("John Quincy Public"), RunContext(roster=Roster()))
        assert record.group == GUEST

    def test_single_token_row_is_dropped(self, ctx):
        assert classify_row(participant("misterx"), ctx) is None

    def test_organizer_row_is_excluded(self, ctx):
        assert classify_row(participant("Lecturer Main Person", role="Organizer"), ctx) is None
        assert classify_row(participant("Lecturer Main Person", role="Инициатор"), ctx) is None
