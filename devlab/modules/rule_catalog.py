"""
Rule catalog for the playground.

Maps each recognized tool to an ordered tuple of lightweight textual
checks. Checks are regular expression matches over the raw submission;
no YAML, HCL or Groovy parsing happens here, so malformed input that
still matches a pattern passes.
"""

import enum
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Pattern


class Tool(str, enum.Enum):
    """Tool identifiers with a rule set and a transcript generator."""

    DOCKER = "docker"
    KUBERNETES = "kubernetes"
    TERRAFORM = "terraform"
    ANSIBLE = "ansible"
    JENKINS = "jenkins"
    HELM = "helm"

    @classmethod
    def parse(cls, tool_id: str) -> Optional["Tool"]:
        """Return the member for ``tool_id`` or None when unknown."""
        try:
            return cls(tool_id.strip().lower())
        except ValueError:
            return None


class MatchMode(str, enum.Enum):
    """How a check interprets its patterns."""

    REQUIRE_ANY = "require_any"
    FORBID = "forbid"


@dataclass(frozen=True)
class LightweightRuleCheck:
    """
    A single hard-failure check over submission text.

    REQUIRE_ANY fails when none of the patterns match. FORBID fails when
    any pattern matches.
    """

    name: str
    patterns: tuple[Pattern[str], ...]
    message: str
    mode: MatchMode = MatchMode.REQUIRE_ANY

    def run(self, code: str) -> list[str]:
        matched = any(p.search(code) for p in self.patterns)
        if self.mode is MatchMode.REQUIRE_ANY and not matched:
            return [self.message]
        if self.mode is MatchMode.FORBID and matched:
            return [self.message]
        return []


RuleCatalog = Mapping[Tool, tuple[LightweightRuleCheck, ...]]


def _require(name: str, message: str, *patterns: str, flags: int = 0) -> LightweightRuleCheck:
    return LightweightRuleCheck(
        name=name,
        patterns=tuple(re.compile(p, flags) for p in patterns),
        message=message,
    )


def _forbid(name: str, message: str, *patterns: str, flags: int = 0) -> LightweightRuleCheck:
    return LightweightRuleCheck(
        name=name,
        patterns=tuple(re.compile(p, flags) for p in patterns),
        message=message,
        mode=MatchMode.FORBID,
    )


def build_rule_catalog() -> RuleCatalog:
    """
    Build the immutable tool -> checks mapping.

    Returns:
        RuleCatalog: read-only mapping covering every Tool member
    """
    catalog = {
        Tool.DOCKER: (
            _require(
                "from_instruction",
                "Dockerfile must start with a FROM instruction.",
                r"^\s*FROM\s+\S+",
                flags=re.MULTILINE,
            ),
            _forbid(
                "from_version_tag",
                "FROM instruction should include a version tag (e.g., node:16).",
                r"^\s*FROM\s+(?:--\S+\s+)*[^\s:@]+(?:\s+[Aa][Ss]\s+\S+)?\s*$",
                flags=re.MULTILINE,
            ),
            _require(
                "cmd_or_entrypoint",
                "Missing CMD or ENTRYPOINT instruction.",
                r"^\s*CMD\s+\[.*\]",
                r"^\s*ENTRYPOINT\b",
                flags=re.MULTILINE,
            ),
        ),
        Tool.KUBERNETES: (
            _require("api_version", "Missing apiVersion field.", r"apiVersion:"),
            _require("kind", "Missing kind field.", r"kind:"),
            _require("metadata", "Missing metadata field.", r"metadata:"),
            _require("spec", "Missing spec field.", r"spec:"),
        ),
        Tool.TERRAFORM: (
            _require(
                "resource_block",
                "Terraform config must define at least one resource.",
                r'resource\s+"[^"]+"\s+"[^"]+"',
            ),
            _require(
                "provider_block",
                "Provider block is missing.",
                r'provider\s+"[^"]+"',
            ),
        ),
        Tool.ANSIBLE: (
            _require("hosts", "Playbook must define 'hosts'.", r"hosts:"),
            _require("tasks", "Playbook must contain tasks.", r"tasks:"),
        ),
        Tool.JENKINS: (
            _require(
                "pipeline_block",
                "Jenkinsfile must start with a pipeline block.",
                r"pipeline\s*\{",
            ),
            _require(
                "stages_block",
                "Pipeline must contain stages.",
                r"stages\s*\{",
            ),
        ),
        Tool.HELM: (
            _require(
                "chart_api_version",
                "Chart.yaml must define apiVersion: v2.",
                r"apiVersion:\s*v2\b",
            ),
            _require("chart_name", "Chart.yaml must include a name.", r"name:"),
        ),
    }
    return MappingProxyType(catalog)
