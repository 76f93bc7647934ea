"""Per-provider tables: directive tokens, scoring concepts and argument rules.

Every provider runs through the same agent code; what differs between them
lives here as data.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple

from ..models.routing import Provider
from .arguments import ArgumentRule, fixed, query_field, titled
from .scoring import ConceptRule, with_domain_concepts

SUPABASE_TABLE = "ai_generated_records"
SUPABASE_ROW_FILTER = {"id": "eq.1"}


@dataclass(frozen=True)
class ProviderProfile:
    provider: Provider
    display_name: str
    directive: str
    routing_topics: str
    concepts: Tuple[ConceptRule, ...]
    argument_rules: Tuple[ArgumentRule, ...]
    example_responses: Tuple[str, ...]
    empty_reply_message: str

    @property
    def key(self) -> str:
        return self.provider.value


def _supabase_insert(query: str, now: datetime) -> Dict[str, Any]:
    return {
        "table": SUPABASE_TABLE,
        "data": {"query": query, "created_at": now.isoformat()},
    }


def _supabase_update(query: str, now: datetime) -> Dict[str, Any]:
    return {
        "table": SUPABASE_TABLE,
        "data": {"updated_at": now.isoformat()},
        "filter": dict(SUPABASE_ROW_FILTER),
    }


LINEAR = ProviderProfile(
    provider=Provider.LINEAR,
    display_name="Linear",
    directive="USE_LINEAR_AGENT",
    routing_topics="issues, projects, tasks, assignments, project management",
    concepts=with_domain_concepts((
        ConceptRule("issue", ("issue", "ticket", "task", "bug"), 0.8),
        ConceptRule("comment", ("comment", "reply", "note"), 0.8),
        ConceptRule("assign", ("assign", "allocate"), 0.8),
    )),
    argument_rules=(
        ArgumentRule(fixed({"first": 10, "orderBy": "updatedAt"}), all_of=("list", "issue")),
        ArgumentRule(titled("description"), all_of=("create", "issue")),
        ArgumentRule(query_field("description"), all_of=("update",)),
        ArgumentRule(query_field("body"), all_of=("comment",)),
    ),
    example_responses=(
        "I would use LINEAR_LIST_ISSUES to fetch your issues",
        "I would use LINEAR_CREATE_ISSUE to create a new issue",
        "I would use LINEAR_LIST_PROJECTS to show your projects",
    ),
    empty_reply_message=(
        "I couldn't understand your request. Please try asking about Linear issues, "
        "projects, cycles, or other Linear operations."
    ),
)

GITHUB = ProviderProfile(
    provider=Provider.GITHUB,
    display_name="GitHub",
    directive="USE_GITHUB_AGENT",
    routing_topics="repositories, pull requests, code, commits, branches",
    concepts=with_domain_concepts((
        ConceptRule("issue", ("issue", "ticket", "bug"), 0.8),
        ConceptRule("pull", ("pull", "merge", "review"), 0.8),
        ConceptRule("repo", ("repo", "repository", "project"), 0.8),
        ConceptRule("commit", ("commit", "history"), 0.8),
        ConceptRule("branch", ("branch", "checkout"), 0.8),
        ConceptRule("comment", ("comment", "reply", "note"), 0.8),
    )),
    argument_rules=(
        ArgumentRule(fixed({"state": "open", "per_page": 10, "sort": "updated"}), all_of=("list", "issue")),
        ArgumentRule(titled("body"), all_of=("create", "issue")),
        ArgumentRule(titled("body"), all_of=("create", "pull")),
        ArgumentRule(fixed({"state": "open", "per_page": 10}), all_of=("list", "pull")),
        ArgumentRule(fixed({"per_page": 10, "sort": "updated"}), all_of=("list", "repo")),
        ArgumentRule(fixed({"per_page": 10}), all_of=("list", "commit")),
        ArgumentRule(query_field("body"), all_of=("comment",)),
        ArgumentRule(query_field("body"), all_of=("update",)),
    ),
    example_responses=(
        "I would use GITHUB_LIST_ISSUES to fetch the repository's issues",
        "I would use GITHUB_CREATE_ISSUE to open a new issue",
        "I would use GITHUB_CREATE_PULL_REQUEST to open a pull request",
    ),
    empty_reply_message=(
        "I couldn't understand your request. Please try asking about GitHub repositories, "
        "issues, pull requests, or other GitHub operations."
    ),
)

SUPABASE = ProviderProfile(
    provider=Provider.SUPABASE,
    display_name="Supabase",
    directive="USE_SUPABASE_AGENT",
    routing_topics="databases, tables, records, queries, data storage",
    concepts=with_domain_concepts((
        ConceptRule("table", ("table", "schema", "database"), 0.8),
        ConceptRule("record", ("record", "row", "data", "entry"), 0.8),
        ConceptRule("select", ("select", "query", "read", "get"), 0.8),
        ConceptRule("insert", ("insert", "add", "create", "new"), 0.8),
    )),
    argument_rules=(
        ArgumentRule(fixed({}), all_of=("list", "table")),
        ArgumentRule(
            fixed({"table": SUPABASE_TABLE, "columns": "*", "limit": 10}),
            any_of=("select", "get"),
        ),
        ArgumentRule(_supabase_insert, any_of=("insert", "create")),
        ArgumentRule(_supabase_update, any_of=("update", "modify")),
        ArgumentRule(
            fixed({"table": SUPABASE_TABLE, "filter": SUPABASE_ROW_FILTER}),
            any_of=("delete", "remove"),
        ),
    ),
    example_responses=(
        "I would use SUPABASE_SELECT_RECORDS to fetch your data",
        "I would use SUPABASE_INSERT_RECORD to create a new record",
        "I would use SUPABASE_UPDATE_RECORD to modify existing data",
    ),
    empty_reply_message=(
        "I couldn't understand your request. Please try asking about Supabase data "
        "operations like select, insert, update, or delete records."
    ),
)

# Directive lookup order matters when a reply names more than one provider
PROFILES: Tuple[ProviderProfile, ...] = (LINEAR, GITHUB, SUPABASE)


def get_profile(provider: Provider | str) -> ProviderProfile:
    key = provider.value if isinstance(provider, Provider) else str(provider).lower()
    for profile in PROFILES:
        if profile.key == key:
            return profile
    raise KeyError(f"Unknown provider: {provider}")
