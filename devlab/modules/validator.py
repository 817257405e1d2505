"""
Playground validator.

Runs a tool's catalog checks and then its heuristics, collecting
errors, warnings and suggestions into a ValidationVerdict. Pure and
deterministic: no I/O and no randomness.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from common.schemas import ValidationVerdict

from .rule_catalog import RuleCatalog, Tool, build_rule_catalog

logger = logging.getLogger(__name__)


@dataclass
class _Findings:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


Heuristic = Callable[[str, _Findings], None]

_DOCKER_INSTRUCTION = re.compile(r"^([A-Za-z]+)\b(.*)$")
_TF_RESOURCE = re.compile(r'resource\s+"([^"]+)"\s+"([^"]+)"')
_JENKINS_SH = re.compile(r"\bsh\s+")
_HELM_TEMPLATE = re.compile(r"\{\{[^}]+\}\}")
_YAML_DOC_SEPARATOR = re.compile(r"^---\s*$", re.MULTILINE)


def split_yaml_documents(code: str) -> list[str]:
    """Split multi-document YAML on ``---`` lines, dropping blank docs."""
    return [doc for doc in _YAML_DOC_SEPARATOR.split(code) if doc.strip()]


def _docker_heuristics(code: str, found: _Findings) -> None:
    seen_workdir = False
    for number, line in enumerate(code.splitlines(), start=1):
        upper = line.upper()
        if "APT-GET UPDATE" in upper and "APT-GET CLEAN" not in upper:
            found.suggestions.append(
                f"Line {number}: Consider adding 'apt-get clean' "
                f"to reduce image size"
            )

        match = _DOCKER_INSTRUCTION.match(line.strip())
        if not match:
            continue
        instruction = match.group(1).upper()
        args = match.group(2).strip()

        if instruction == "WORKDIR":
            seen_workdir = True
        elif instruction == "COPY" and not seen_workdir:
            found.warnings.append(
                f"Line {number}: Consider setting WORKDIR before COPY"
            )
        elif instruction == "EXPOSE":
            port = args.split()[0].split("/")[0] if args else ""
            if not port.isdigit():
                found.errors.append(
                    f"Line {number}: EXPOSE requires a valid port number"
                )


def _kubernetes_heuristics(code: str, found: _Findings) -> None:
    for index, doc in enumerate(split_yaml_documents(code), start=1):
        if re.search(r"kind:\s*Deployment\b", doc):
            if "replicas:" not in doc:
                found.warnings.append(
                    f"Document {index}: Deployment without explicit "
                    f"replicas (will default to 1)"
                )
            if "resources:" not in doc:
                found.suggestions.append(
                    f"Document {index}: Consider adding resource limits "
                    f"and requests"
                )
        if re.search(r"privileged:\s*true\b", doc):
            found.warnings.append(
                f"Document {index}: Running privileged containers is a "
                f"security risk"
            )


def _terraform_heuristics(code: str, found: _Findings) -> None:
    tags_hint_added = False
    for number, line in enumerate(code.splitlines(), start=1):
        trimmed = line.strip()
        match = _TF_RESOURCE.match(trimmed)
        if match:
            resource_type, resource_name = match.groups()
            if "-" in resource_name:
                found.warnings.append(
                    f"Line {number}: Resource names should use "
                    f"underscores, not hyphens"
                )
            if (
                resource_type == "aws_instance"
                and "tags = {" not in code
                and not tags_hint_added
            ):
                found.suggestions.append(
                    "Consider adding tags to AWS resources for better "
                    "organization"
                )
                tags_hint_added = True

        if "ami-" in trimmed and "data." not in trimmed:
            found.suggestions.append(
                f"Line {number}: Consider using data sources instead of "
                f"hardcoded AMI IDs"
            )


def _ansible_heuristics(code: str, found: _Findings) -> None:
    if "---" not in code:
        found.warnings.append('Ansible playbooks typically start with "---"')
    if "notify:" in code and "handlers:" not in code:
        found.errors.append(
            "Playbook uses notify but no handlers are defined"
        )
    if re.search(r"become:\s*(yes|true)\b", code) and "become_user:" not in code:
        found.suggestions.append(
            "Consider specifying become_user when using privilege escalation"
        )
    if "shell:" in code or "command:" in code:
        found.suggestions.append(
            "Consider using specific modules instead of shell/command "
            "when possible"
        )


def _jenkins_heuristics(code: str, found: _Findings) -> None:
    if not re.search(r"\bagent\b", code):
        found.errors.append("Pipeline must specify an agent")
    if re.search(r"stages\s*\{", code) and not re.search(r"stage\s*\(", code):
        found.errors.append("Pipeline must contain at least one stage")

    for number, line in enumerate(code.splitlines(), start=1):
        trimmed = line.strip()
        unquoted = "'" not in trimmed and '"' not in trimmed
        if unquoted and _JENKINS_SH.search(trimmed):
            found.warnings.append(
                f"Line {number}: Shell commands should be quoted"
            )

    if not re.search(r"post\s*\{", code):
        found.suggestions.append(
            "Consider adding post-build actions for cleanup and notifications"
        )


def _helm_heuristics(code: str, found: _Findings) -> None:
    is_chart = all(key in code for key in ("apiVersion:", "name:", "version:"))
    if is_chart:
        if "description:" not in code:
            found.warnings.append("Chart.yaml should include a description")
        if "appVersion:" not in code:
            found.suggestions.append("Consider adding appVersion to Chart.yaml")

    if ("replicaCount:" in code or "image:" in code) and "resources:" not in code:
        found.suggestions.append(
            "Consider defining resource limits in values.yaml"
        )

    for expression in _HELM_TEMPLATE.findall(code):
        if not any(
            ref in expression
            for ref in (".Values", ".Release", ".Chart", "include")
        ):
            found.warnings.append(
                f'Template expression "{expression}" might be invalid'
            )


_HEURISTICS: Mapping[Tool, Heuristic] = {
    Tool.DOCKER: _docker_heuristics,
    Tool.KUBERNETES: _kubernetes_heuristics,
    Tool.TERRAFORM: _terraform_heuristics,
    Tool.ANSIBLE: _ansible_heuristics,
    Tool.JENKINS: _jenkins_heuristics,
    Tool.HELM: _helm_heuristics,
}


class Validator:
    """
    Applies the rule catalog and per-tool heuristics to submissions.

    Unknown tools have no rules and always produce an empty verdict.
    """

    def __init__(self, catalog: Optional[RuleCatalog] = None):
        self.catalog = catalog if catalog is not None else build_rule_catalog()

    def validate(self, tool_id: str, code: str) -> ValidationVerdict:
        """
        Validate a configuration snippet.

        Args:
            tool_id: Tool identifier
            code: Raw submission text (may be empty)

        Returns:
            ValidationVerdict: every failing check, never short-circuited
        """
        tool = Tool.parse(tool_id)
        if tool is None:
            logger.debug(f"No rule set for tool '{tool_id}', accepting")
            return ValidationVerdict()

        found = _Findings()
        for check in self.catalog.get(tool, ()):
            found.errors.extend(check.run(code))
        _HEURISTICS[tool](code, found)

        logger.debug(
            f"Validated {tool.value} snippet: {len(found.errors)} errors, "
            f"{len(found.warnings)} warnings, "
            f"{len(found.suggestions)} suggestions"
        )
        return ValidationVerdict(
            errors=found.errors,
            warnings=found.warnings,
            suggestions=found.suggestions,
        )
