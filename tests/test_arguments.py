"""Tests for argument synthesis from free text"""

from datetime import datetime, timezone

import pytest

from codepilot.services.arguments import ArgumentRule, ArgumentSynthesizer, derive_title, fixed
from codepilot.services.providers import GITHUB, LINEAR, SUPABASE, SUPABASE_TABLE

FIXED_NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


def synthesizer_for(profile):
    return ArgumentSynthesizer(profile.argument_rules, clock=fixed_clock)


class TestDeriveTitle:
    def test_bug_keyword(self):
        assert derive_title("there is a bug in login") == "Bug Report"

    def test_feature_keyword(self):
        assert derive_title("new feature: dark mode") == "Feature Request"

    def test_bug_wins_over_feature(self):
        assert derive_title("feature bug") == "Bug Report"

    def test_truncates_to_fifty_chars(self):
        query = "a" * 80
        assert derive_title(query) == "a" * 50

    def test_case_sensitive_keywords(self):
        assert derive_title("BUG in login") == "BUG in login"


class TestLinearArguments:
    def test_list_issues(self):
        assert synthesizer_for(LINEAR).synthesize("LINEAR_LIST_ISSUES", "list my issues") == {
            "first": 10,
            "orderBy": "updatedAt",
        }

    def test_create_issue(self):
        arguments = synthesizer_for(LINEAR).synthesize("LINEAR_CREATE_ISSUE", "fix the bug in checkout")

        assert arguments == {"title": "Bug Report", "description": "fix the bug in checkout"}

    def test_update(self):
        arguments = synthesizer_for(LINEAR).synthesize("LINEAR_UPDATE_ISSUE", "mark it done")
        assert arguments == {"description": "mark it done"}

    def test_comment(self):
        arguments = synthesizer_for(LINEAR).synthesize("LINEAR_CREATE_COMMENT", "looks good")
        assert arguments == {"body": "looks good"}

    def test_unmatched_tool_gets_empty_arguments(self):
        assert synthesizer_for(LINEAR).synthesize("LINEAR_LIST_PROJECTS", "show projects") == {}


class TestGithubArguments:
    def test_list_issues(self):
        assert synthesizer_for(GITHUB).synthesize("GITHUB_LIST_ISSUES", "issues") == {
            "state": "open",
            "per_page": 10,
            "sort": "updated",
        }

    def test_create_pull_request(self):
        arguments = synthesizer_for(GITHUB).synthesize("GITHUB_CREATE_PULL_REQUEST", "add feature flags")
        assert arguments == {"title": "Feature Request", "body": "add feature flags"}

    def test_list_commits(self):
        assert synthesizer_for(GITHUB).synthesize("GITHUB_LIST_COMMITS", "history") == {"per_page": 10}


class TestSupabaseArguments:
    def test_select(self):
        assert synthesizer_for(SUPABASE).synthesize("SUPABASE_SELECT_RECORDS", "show data") == {
            "table": SUPABASE_TABLE,
            "columns": "*",
            "limit": 10,
        }

    def test_insert_uses_clock(self):
        arguments = synthesizer_for(SUPABASE).synthesize("SUPABASE_INSERT_RECORD", "store this")

        assert arguments == {
            "table": SUPABASE_TABLE,
            "data": {"query": "store this", "created_at": FIXED_NOW.isoformat()},
        }

    def test_update_filters_first_row(self):
        arguments = synthesizer_for(SUPABASE).synthesize("SUPABASE_UPDATE_RECORD", "touch it")

        assert arguments["filter"] == {"id": "eq.1"}
        assert arguments["data"] == {"updated_at": FIXED_NOW.isoformat()}

    def test_delete(self):
        arguments = synthesizer_for(SUPABASE).synthesize("SUPABASE_DELETE_RECORD", "remove it")
        assert arguments == {"table": SUPABASE_TABLE, "filter": {"id": "eq.1"}}

    def test_list_tables(self):
        assert synthesizer_for(SUPABASE).synthesize("SUPABASE_LIST_TABLES", "tables") == {}


class TestSynthesizer:
    @pytest.mark.parametrize("profile,tool_name", [
        (LINEAR, "LINEAR_CREATE_ISSUE"),
        (GITHUB, "GITHUB_CREATE_ISSUE"),
        (SUPABASE, "SUPABASE_INSERT_RECORD"),
    ])
    def test_idempotent_with_fixed_clock(self, profile, tool_name):
        synthesizer = synthesizer_for(profile)

        first = synthesizer.synthesize(tool_name, "a feature for the dashboard")
        second = synthesizer.synthesize(tool_name, "a feature for the dashboard")

        assert first == second

    def test_fixed_payload_is_copied(self):
        synthesizer = ArgumentSynthesizer([ArgumentRule(fixed({"nested": {"a": 1}}))])

        first = synthesizer.synthesize("ANY", "q")
        first["nested"]["a"] = 2

        assert synthesizer.synthesize("ANY", "q") == {"nested": {"a": 1}}

    def test_first_matching_rule_wins(self):
        synthesizer = ArgumentSynthesizer([
            ArgumentRule(fixed({"rule": 1}), all_of=("list",)),
            ArgumentRule(fixed({"rule": 2}), all_of=("list", "issue")),
        ])

        assert synthesizer.synthesize("LIST_ISSUES", "q") == {"rule": 1}

    def test_any_of(self):
        rule = ArgumentRule(fixed({}), any_of=("select", "get"))

        assert rule.matches("supabase_get_row")
        assert not rule.matches("supabase_list_tables")
