"""Deployment environments derived from branch names."""

import re
from typing import Optional

from pydantic import BaseModel

# Name of the UI project in the preview bot's deployment table
PREVIEW_UI_PROJECT = "unified"

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")
_PREVIEW_LINK = re.compile(r"\[Visit Preview\]\((https?://[^)]+)\)")


class GcpDeploymentSpec(BaseModel):
    cloud_run_studio_server_name: str
    cloud_run_zeno_server_name: str
    kube_cluster_name: str
    kube_namespace: str
    kube_deployment: str
    studio_api_base_url: str
    zeno_api_base_url: str


class AwsDeploymentSpec(BaseModel):
    app_runner_studio_server_name: str
    app_runner_zeno_server_name: str
    studio_api_base_url: str
    zeno_api_base_url: str


class RuntimeDeploymentSpec(BaseModel):
    """Where the durable workers of the environment are routed."""

    namespace: str
    zeno_task_queue: str
    http_url: str


class VercelDeploymentSpec(BaseModel):
    studio_ui_url: str


class DeploymentSpec(BaseModel):
    """The environment a branch deploys to."""

    environment: str
    gcp: GcpDeploymentSpec
    aws: Optional[AwsDeploymentSpec] = None
    runtime: RuntimeDeploymentSpec
    vercel: Optional[VercelDeploymentSpec] = None


def _gcp_spec(env: str, kube_cluster_name: str) -> GcpDeploymentSpec:
    return GcpDeploymentSpec(
        cloud_run_studio_server_name=f"studio-server-{env}",
        cloud_run_zeno_server_name=f"zeno-server-{env}",
        kube_cluster_name=kube_cluster_name,
        kube_namespace="default",
        kube_deployment=f"{env}-workers",
        studio_api_base_url=f"https://studio-server-{env}.api.vertesia.io",
        zeno_api_base_url=f"https://zeno-server-{env}.api.vertesia.io",
    )


def _aws_spec(env: str) -> AwsDeploymentSpec:
    return AwsDeploymentSpec(
        app_runner_studio_server_name=f"studio-server-{env}",
        app_runner_zeno_server_name=f"zeno-server-{env}",
        studio_api_base_url=f"https://studio-server-{env}.aws.api.vertesia.io",
        zeno_api_base_url=f"https://zeno-server-{env}.aws.api.vertesia.io",
    )


def _runtime_spec(namespace_env: str) -> RuntimeDeploymentSpec:
    namespace = f"{namespace_env}.i16ci"
    return RuntimeDeploymentSpec(
        namespace=namespace,
        zeno_task_queue="zeno-content",
        http_url=f"https://cloud.temporal.io/namespaces/{namespace}/workflows",
    )


def is_dev_branch(branch: str) -> bool:
    return branch.startswith("demo") or "feat" in branch or "fix" in branch


def compute_deployment_spec(branch: str) -> Optional[DeploymentSpec]:
    """
    Compute the deployment spec of a branch.

    - main -> staging, preview -> preview, both on GCP and AWS
    - demo*, *feat*, *fix* -> dev-<slug>, on GCP, and AWS if the branch mentions "aws"
    - anything else -> None
    """
    if branch in ("main", "preview"):
        env = "staging" if branch == "main" else "preview"
        return DeploymentSpec(
            environment=env,
            gcp=_gcp_spec(env, "composable-workers"),
            aws=_aws_spec(env),
            runtime=_runtime_spec(env),
        )

    if not is_dev_branch(branch):
        return None

    env = "dev-" + _NON_ALPHANUMERIC.sub("-", branch)
    return DeploymentSpec(
        environment=env,
        gcp=_gcp_spec(env, "workers-dev"),
        aws=_aws_spec(env) if "aws" in branch else None,
        runtime=_runtime_spec("dev"),
    )


def recompute_deployment_spec(
    branch: str,
    previous: Optional[DeploymentSpec],
) -> Optional[DeploymentSpec]:
    """Recompute the spec from the branch, keeping the preview URL already known."""
    spec = compute_deployment_spec(branch)
    if spec is not None and previous is not None and previous.vercel is not None:
        spec.vercel = previous.vercel
    return spec


def extract_preview_url(content: str) -> Optional[str]:
    """Extract the UI preview URL from the preview bot's deployment table."""
    for row in (content or "").split("\n"):
        if f"| **{PREVIEW_UI_PROJECT}**" in row:
            match = _PREVIEW_LINK.search(row)
            if match:
                return match.group(1)
    return None
