"""
Execution simulator for the playground.

Turns a validated snippet into a believable transcript of what the real
tool would have printed. Nothing is executed. Identifiers, durations and
sizes are drawn from an injectable random source and are presentation
only; the structure of each transcript follows the order of the
fragments in the submitted text.
"""

import logging
import random
import re
import string
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from common.schemas import ExecutionResult, ValidationVerdict

from .rule_catalog import Tool
from .validator import Validator, split_yaml_documents

logger = logging.getLogger(__name__)

MAX_EXECUTION_TIME_MS = 5000
FAILURE_HEADER = "Execution failed due to validation errors:"


@dataclass(frozen=True)
class Transcript:
    """Tool-specific part of a successful run."""

    output: str
    resources_created: list[str]
    next_steps: list[str]


Generator = Callable[[str, random.Random], Transcript]

_DOCKER_INSTRUCTIONS = (
    "FROM", "RUN", "COPY", "ADD", "WORKDIR", "EXPOSE", "CMD", "ENTRYPOINT",
    "ENV", "ARG", "USER", "LABEL", "VOLUME", "HEALTHCHECK",
)
_DOCKER_LINE = re.compile(
    r"^\s*(" + "|".join(_DOCKER_INSTRUCTIONS) + r")\s+(.+?)\s*$",
    re.MULTILINE,
)
_K8S_KIND = re.compile(r"^kind:\s*(\S+)", re.MULTILINE)
_K8S_METADATA = re.compile(r"^metadata:[ \t]*$")
_K8S_CHILD_NAME = re.compile(r"name:[ \t]*(\S+)")
_K8S_REPLICAS = re.compile(r"replicas:\s*(\d+)")
_K8S_API_GROUPS = {
    "Deployment": "apps",
    "StatefulSet": "apps",
    "DaemonSet": "apps",
    "ReplicaSet": "apps",
    "Ingress": "networking.k8s.io",
    "NetworkPolicy": "networking.k8s.io",
    "Job": "batch",
    "CronJob": "batch",
    "HorizontalPodAutoscaler": "autoscaling",
}
_K8S_WORKLOADS = {"Deployment", "StatefulSet", "ReplicaSet"}
_TF_RESOURCE = re.compile(r'resource\s+"([^"]+)"\s+"([^"]+)"')
_JENKINS_STAGE = re.compile(r"stage\s*\(\s*['\"]([^'\"]+)['\"]")
_ANSIBLE_SECTION = re.compile(r"^(\s*)(\w+):\s*$")
_ANSIBLE_PLAY_NAME = re.compile(r"^-\s+name:\s*(.+?)\s*$")
_ANSIBLE_TASK_NAME = re.compile(r"^\s+-\s+name:\s*(.+?)\s*$")
_ANSIBLE_HOSTS = re.compile(r"hosts:\s*(\S+)")
_ANSIBLE_TASK_SECTIONS = {"tasks", "pre_tasks", "post_tasks"}


def _random_suffix(rng: random.Random, length: int = 5) -> str:
    return "".join(rng.choices(string.ascii_lowercase + string.digits, k=length))


def _random_hex(rng: random.Random, length: int = 12) -> str:
    return "".join(rng.choices("0123456789abcdef", k=length))


def _banner(title: str, width: int = 60) -> str:
    return f"{title} {'*' * max(width - len(title), 10)}"


def _docker_transcript(code: str, rng: random.Random) -> Transcript:
    instructions = _DOCKER_LINE.findall(code)
    total = len(instructions)
    lines = ["Docker Build Results:", "", "Building image..."]
    for step, (instruction, args) in enumerate(instructions, start=1):
        lines.append(f"Step {step}/{total} : {instruction} {args}")
        if instruction == "FROM":
            lines.append(" ---> Using cached image")
        elif instruction in ("RUN", "COPY", "ADD"):
            lines.append(f" ---> Running in {_random_hex(rng)}")
        else:
            lines.append(f" ---> {_random_hex(rng)}")

    image = "myapp:latest"
    lines.extend([
        "",
        f"Successfully built {_random_hex(rng)}",
        f"Successfully tagged {image}",
        f"Image size: {rng.randint(100, 600)}MB",
    ])
    return Transcript(
        output="\n".join(lines),
        resources_created=[f"Docker Image: {image}"],
        next_steps=[
            f"Run: docker run -p 8080:80 {image}",
            f"Push to registry: docker push {image}",
        ],
    )


def _k8s_metadata_name(doc: str) -> Optional[str]:
    """Direct ``name:`` child of the top-level ``metadata:`` block."""
    lines = iter(doc.splitlines())
    for line in lines:
        if _K8S_METADATA.match(line):
            break
    else:
        return None

    child_indent = None
    for line in lines:
        stripped = line.lstrip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = len(line) - len(stripped)
        if indent == 0:
            return None
        if child_indent is None:
            child_indent = indent
        if indent == child_indent:
            match = _K8S_CHILD_NAME.match(stripped)
            if match:
                return match.group(1)
    return None


def _kubernetes_transcript(code: str, rng: random.Random) -> Transcript:
    created: list[tuple[str, str]] = []
    pods: list[str] = []
    for doc in split_yaml_documents(code):
        kind_match = _K8S_KIND.search(doc)
        if not kind_match:
            continue
        kind = kind_match.group(1)
        name = _k8s_metadata_name(doc) or "myapp"
        created.append((kind, name))

        if kind in _K8S_WORKLOADS:
            replicas_match = _K8S_REPLICAS.search(doc)
            replicas = int(replicas_match.group(1)) if replicas_match else 1
            for _ in range(min(replicas, 5)):
                pods.append(
                    f"{name}-{_random_hex(rng, 10)}-{_random_suffix(rng)}"
                    f"   1/1     Running   0          {rng.randint(5, 59)}s"
                )

    lines = ["Kubernetes Deployment Results:", ""]
    for kind, name in created:
        group = _K8S_API_GROUPS.get(kind)
        resource = f"{kind.lower()}.{group}" if group else kind.lower()
        lines.append(f"{resource}/{name} created")

    for kind, name in created:
        if kind in _K8S_WORKLOADS:
            lines.extend([
                "",
                f"Waiting for {kind.lower()} \"{name}\" rollout to finish...",
                f"{kind.lower()} \"{name}\" successfully rolled out",
            ])

    if pods:
        lines.extend(["", "Pods Status:", "NAME   READY   STATUS    RESTARTS   AGE"])
        lines.extend(pods)

    lines.extend(["", "All resources deployed successfully!"])
    return Transcript(
        output="\n".join(lines),
        resources_created=[f"{kind}: {name}" for kind, name in created],
        next_steps=[
            "Check pods: kubectl get pods",
            "Describe resources: kubectl describe all",
            "View logs: kubectl logs -l app=<name>",
        ],
    )


def _terraform_transcript(code: str, rng: random.Random) -> Transcript:
    resources = [f"{kind}.{name}" for kind, name in _TF_RESOURCE.findall(code)]
    lines = [
        "Terraform Apply Results:",
        "",
        "Initializing the backend...",
        "Initializing provider plugins...",
        "",
        "Terraform used the selected providers to generate the following "
        "execution plan:",
        "",
    ]
    for address in resources:
        kind, name = address.split(".", 1)
        lines.extend([
            f"  # {address} will be created",
            f'  + resource "{kind}" "{name}" {{',
            "      + id = (known after apply)",
            "    }",
            "",
        ])
    lines.extend([
        f"Plan: {len(resources)} to add, 0 to change, 0 to destroy.",
        "",
        "Applying changes...",
    ])
    for address in resources:
        lines.append(f"{address}: Creating...")
        lines.append(
            f"{address}: Creation complete after {rng.randint(2, 40)}s "
            f"[id={_random_hex(rng, 17)}]"
        )
    lines.extend([
        "",
        f"Apply complete! Resources: {len(resources)} added, "
        f"0 changed, 0 destroyed.",
    ])
    return Transcript(
        output="\n".join(lines),
        resources_created=resources,
        next_steps=[
            "terraform show",
            "terraform output",
            "terraform destroy (when done)",
        ],
    )


def _ansible_tasks(code: str) -> tuple[str, list[str]]:
    play_name = "Playbook"
    tasks: list[str] = []
    section: Optional[str] = None
    section_indent = 0
    for line in code.splitlines():
        play_match = _ANSIBLE_PLAY_NAME.match(line)
        if play_match:
            if play_name == "Playbook":
                play_name = play_match.group(1)
            section = None
            continue
        section_match = _ANSIBLE_SECTION.match(line)
        if section_match:
            # nested keys (task-level vars, module args) keep the section
            indent = len(section_match.group(1))
            if section is None or indent <= section_indent:
                section = section_match.group(2)
                section_indent = indent
            continue
        task_match = _ANSIBLE_TASK_NAME.match(line)
        if task_match and section in _ANSIBLE_TASK_SECTIONS:
            tasks.append(task_match.group(1))
    return play_name, tasks


def _ansible_transcript(code: str, rng: random.Random) -> Transcript:
    play_name, tasks = _ansible_tasks(code)
    hosts_match = _ANSIBLE_HOSTS.search(code)
    host = hosts_match.group(1) if hosts_match else "target-host"

    lines = ["Ansible Playbook Execution:", "", _banner(f"PLAY [{play_name}]"), ""]
    lines.extend([_banner("TASK [Gathering Facts]"), f"ok: [{host}]", ""])
    changed = 0
    for task in tasks:
        outcome = "changed" if rng.random() > 0.3 else "ok"
        changed += outcome == "changed"
        lines.extend([_banner(f"TASK [{task}]"), f"{outcome}: [{host}]", ""])

    lines.extend([
        _banner("PLAY RECAP"),
        f"{host:<27}: ok={len(tasks) + 1}    changed={changed}    "
        f"unreachable=0    failed=0",
        "",
        "Playbook executed successfully!",
    ])
    return Transcript(
        output="\n".join(lines),
        resources_created=tasks,
        next_steps=[
            "Verify changes on target hosts",
            "Run with --check for dry run",
        ],
    )


def _jenkins_transcript(code: str, rng: random.Random) -> Transcript:
    stages = _JENKINS_STAGE.findall(code)
    build_number = rng.randint(1, 100)
    lines = [
        "Jenkins Pipeline Execution:",
        "",
        "Started by user admin",
        "Running in Durability level: MAX_SURVIVABILITY",
        "[Pipeline] Start of Pipeline",
    ]
    for stage in stages:
        lines.extend([
            f"[Pipeline] stage ({stage})",
            "[Pipeline] echo",
            f"{stage} completed successfully",
        ])
    lines.extend([
        "[Pipeline] End of Pipeline",
        "Finished: SUCCESS",
        "",
        f"Build #{build_number} duration: {rng.randint(5, 300)}s",
    ])
    return Transcript(
        output="\n".join(lines),
        resources_created=[f"Stage: {stage}" for stage in stages],
        next_steps=[
            "View build logs",
            "Configure webhooks",
            "Set up notifications",
        ],
    )


def _helm_transcript(code: str, rng: random.Random) -> Transcript:
    name_match = re.search(r"^name:\s*(\S+)", code, re.MULTILINE)
    release = name_match.group(1) if name_match else "myapp"
    version_match = re.search(r"^version:\s*(\S+)", code, re.MULTILINE)
    chart_version = version_match.group(1) if version_match else "0.1.0"
    replicas_match = re.search(r"replicaCount:\s*(\d+)", code)
    replicas = replicas_match.group(1) if replicas_match else "1"
    cluster_ip = f"10.96.{rng.randint(0, 255)}.{rng.randint(1, 254)}"

    lines = [
        "Helm Chart Deployment:",
        "",
        f"NAME: {release}",
        f"CHART: {release}-{chart_version}",
        "NAMESPACE: default",
        "STATUS: deployed",
        "REVISION: 1",
        "",
        "RESOURCES:",
        "==> v1/Deployment",
        "NAME     READY  UP-TO-DATE  AVAILABLE  AGE",
        f"{release}    {replicas}/{replicas}    {replicas}           {replicas}          30s",
        "",
        "==> v1/Service",
        "NAME            TYPE       CLUSTER-IP     EXTERNAL-IP  PORT(S)   AGE",
        f"{release}-service  ClusterIP  {cluster_ip}   <none>       80/TCP    30s",
        "",
        "Chart deployed successfully!",
    ]
    return Transcript(
        output="\n".join(lines),
        resources_created=[f"Helm Release: {release}"],
        next_steps=[
            f"helm status {release}",
            f"helm upgrade {release} ./chart",
            f"helm uninstall {release}",
        ],
    )


def _generic_transcript(code: str, rng: random.Random) -> Transcript:
    output = "\n".join([
        "Configuration Simulation:",
        "",
        "Processing configuration...",
        "Validating syntax...",
        "Applying changes...",
        "",
        "Configuration applied successfully!",
    ])
    return Transcript(output=output, resources_created=[], next_steps=[])


_GENERATORS: Mapping[Tool, Generator] = {
    Tool.DOCKER: _docker_transcript,
    Tool.KUBERNETES: _kubernetes_transcript,
    Tool.TERRAFORM: _terraform_transcript,
    Tool.ANSIBLE: _ansible_transcript,
    Tool.JENKINS: _jenkins_transcript,
    Tool.HELM: _helm_transcript,
}


def format_failure_output(errors: list[str]) -> str:
    """Render the validation error list embedded in a failed run."""
    return FAILURE_HEADER + "\n" + "\n".join(f"- {error}" for error in errors)


class ExecutionSimulator:
    """
    Synthesizes execution transcripts for validated snippets.

    Args:
        rng: Random source for presentation-only values. Seed it to get
            reproducible transcripts.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def simulate(
        self,
        tool_id: str,
        code: str,
        verdict: ValidationVerdict
    ) -> ExecutionResult:
        """
        Simulate running a snippet.

        Args:
            tool_id: Tool identifier
            code: Submitted text
            verdict: Verdict previously produced for the same text

        Returns:
            ExecutionResult: failure with the verdict errors when invalid,
            otherwise a tool-specific (or generic) transcript
        """
        started = time.perf_counter()
        if not verdict.is_valid:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            return ExecutionResult(
                success=False,
                output=format_failure_output(verdict.errors),
                execution_time_ms=max(elapsed_ms, 0),
            )

        tool = Tool.parse(tool_id)
        generator = _GENERATORS[tool] if tool is not None else _generic_transcript
        transcript = generator(code, self.rng)

        complexity = len(code.splitlines())
        simulated_ms = min(
            complexity * 100 + self.rng.random() * 1000,
            MAX_EXECUTION_TIME_MS
        )
        logger.debug(
            f"Simulated {tool_id} run: "
            f"{len(transcript.resources_created)} resources"
        )
        return ExecutionResult(
            success=True,
            output=transcript.output,
            execution_time_ms=int(simulated_ms),
            resources_created=transcript.resources_created,
            next_steps=transcript.next_steps,
        )


def run_playground(
    tool_id: str,
    code: str,
    validator: Optional[Validator] = None,
    simulator: Optional[ExecutionSimulator] = None
) -> tuple[ValidationVerdict, ExecutionResult]:
    """
    Validate a snippet and simulate its execution.

    Args:
        tool_id: Tool identifier
        code: Submitted text
        validator: Validator instance (a default one is built if omitted)
        simulator: Simulator instance (a default one is built if omitted)

    Returns:
        tuple: (verdict, execution result)
    """
    validator = validator or Validator()
    simulator = simulator or ExecutionSimulator()
    verdict = validator.validate(tool_id, code)
    result = simulator.simulate(tool_id, code, verdict)
    return verdict, result
