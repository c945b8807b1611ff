"""Tests for deployment environments."""

from pr_assistant.services.assistant.deployment import (
    VercelDeploymentSpec,
    compute_deployment_spec,
    extract_preview_url,
    recompute_deployment_spec,
)
from tests.fakes import PREVIEW_COMMENT


class TestComputeDeploymentSpec:
    """Tests for compute_deployment_spec."""

    def test_main_is_staging(self):
        spec = compute_deployment_spec("main")

        assert spec.environment == "staging"
        assert spec.aws is not None
        assert spec.runtime.namespace == "staging.i16ci"
        assert spec.gcp.kube_cluster_name == "composable-workers"

    def test_preview(self):
        spec = compute_deployment_spec("preview")

        assert spec.environment == "preview"
        assert spec.aws is not None
        assert spec.runtime.namespace == "preview.i16ci"

    def test_unrecognized_branch(self):
        assert compute_deployment_spec("random-topic") is None

    def test_feature_branch(self):
        spec = compute_deployment_spec("feat-123")

        assert spec.environment == "dev-feat-123"
        assert spec.aws is None
        assert spec.vercel is None
        assert spec.gcp.kube_cluster_name == "workers-dev"
        assert spec.gcp.studio_api_base_url == "https://studio-server-dev-feat-123.api.vertesia.io"
        assert spec.runtime.namespace == "dev.i16ci"

    def test_slug_replaces_non_alphanumeric(self):
        spec = compute_deployment_spec("fix/upload_retry.v2")

        assert spec.environment == "dev-fix-upload-retry-v2"

    def test_demo_prefix(self):
        assert compute_deployment_spec("demo-acme").environment == "dev-demo-acme"

    def test_aws_branch(self):
        spec = compute_deployment_spec("feat-aws-bedrock")

        assert spec.aws is not None
        assert spec.aws.zeno_api_base_url == "https://zeno-server-dev-feat-aws-bedrock.aws.api.vertesia.io"

    def test_deterministic(self):
        """Same branch, structurally equal spec."""
        for branch in ("main", "preview", "fix-42", "feat-aws-x", "docs"):
            assert compute_deployment_spec(branch) == compute_deployment_spec(branch)


class TestRecomputeDeploymentSpec:
    """Tests for recompute_deployment_spec."""

    def test_keeps_preview_url(self):
        previous = compute_deployment_spec("fix-42")
        previous.vercel = VercelDeploymentSpec(studio_ui_url="https://unified.vercel.app")

        spec = recompute_deployment_spec("fix-42", previous)

        assert spec.vercel == previous.vercel
        assert spec.environment == "dev-fix-42"

    def test_without_previous(self):
        assert recompute_deployment_spec("fix-42", None) == compute_deployment_spec("fix-42")

    def test_unrecognized_branch(self):
        assert recompute_deployment_spec("docs", None) is None


class TestExtractPreviewUrl:
    """Tests for extract_preview_url."""

    def test_ui_project_row(self):
        assert extract_preview_url(PREVIEW_COMMENT) == "https://unified-git-fix-42.vercel.app"

    def test_no_ui_project(self):
        content = "| **docs** | Ready | [Visit Preview](https://docs.vercel.app) |"
        assert extract_preview_url(content) is None

    def test_ui_project_without_link(self):
        assert extract_preview_url("| **unified** | Building | |") is None
