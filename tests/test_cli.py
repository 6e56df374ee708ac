"""Tests for the CLI."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from yabp import __version__
from yabp.cli import main, parse_assignments, parse_selections
from yabp.engines import CURSOR


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point config, registry, agents and projects at a temporary directory."""
    monkeypatch.setenv("YABP_AGENTS_DIR", str(tmp_path / "agents"))
    monkeypatch.setenv("YABP_PROJECTS_DIR", str(tmp_path / "projects"))
    monkeypatch.delenv("YABP_API_KEY", raising=False)
    with (
        patch("yabp.config.loader.Path.home", return_value=tmp_path / "home"),
        patch(
            "yabp.config.loader.get_local_config_path",
            return_value=tmp_path / "local" / "config.yaml",
        ),
    ):
        yield tmp_path


def invoke(*args: str, input: str | None = None):
    return CliRunner().invoke(main, list(args), input=input)


@pytest.fixture
def installed(home: Path) -> Path:
    """Home with the default agents installed."""
    result = invoke("init")
    assert result.exit_code == 0, result.output
    return home


@pytest.fixture
def shop(installed: Path) -> Path:
    """A project using the bundled QA and DevOps agents."""
    result = invoke(
        "project",
        "create",
        "shop",
        "-a",
        "devops-engineer",
        "-a",
        "qa-engineer",
        "-s",
        "Cloud Provider=AWS",
        "-s",
        "Infrastructure=Terraform",
        "-s",
        "CI/CD Platform=GitHub Actions",
    )
    assert result.exit_code == 0, result.output
    return installed / "projects" / "shop"


def test_cli_help() -> None:
    """Test that --help exits cleanly."""
    result = invoke("--help")
    assert result.exit_code == 0
    assert "yabp" in result.output.lower()


def test_cli_version() -> None:
    """Test that --version shows the version."""
    result = invoke("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_group_without_subcommand_shows_help(home: Path) -> None:
    """Test that command groups print their help."""
    result = invoke("project")
    assert result.exit_code == 0
    assert "Usage:" in result.output


class TestAgentCommands:
    """Tests for yabp agent."""

    def test_list_without_agents(self, home: Path) -> None:
        result = invoke("agent", "list")
        assert result.exit_code == 0
        assert "No agents found" in result.output

    def test_init_installs_default_agents(self, home: Path) -> None:
        result = invoke("init")
        assert result.exit_code == 0
        assert "Copied 3 default agents" in result.output
        assert (home / "agents" / "qa-engineer" / "metadata.yaml").exists()

        again = invoke("init")
        assert "already installed" in again.output

    def test_list(self, installed: Path) -> None:
        result = invoke("agent", "list")
        assert result.exit_code == 0
        assert "devops-engineer" in result.output
        assert "pm-framework" in result.output

    def test_show(self, installed: Path) -> None:
        result = invoke("agent", "show", "qa-engineer")
        assert result.exit_code == 0
        assert "Docs folder: docs/qa/" in result.output
        assert "testing/playwright_e2e_setup.md" in result.output

    def test_show_unknown(self, installed: Path) -> None:
        result = invoke("agent", "show", "ghost")
        assert result.exit_code == 1
        assert "Agent not found: ghost" in result.output

    def test_create_and_update(self, home: Path) -> None:
        result = invoke("agent", "create", "Data Engineer", "--role", "Pipelines")
        assert result.exit_code == 0
        assert "data-engineer" in result.output

        duplicate = invoke("agent", "create", "Data Engineer")
        assert duplicate.exit_code == 1

        update = invoke("agent", "update", "data-engineer", "--set", "docs_folder=data")
        assert update.exit_code == 0
        show = invoke("agent", "show", "data-engineer")
        assert "Docs folder: docs/data/" in show.output

    def test_add_and_remove_prompt(self, home: Path, tmp_path: Path) -> None:
        invoke("agent", "create", "Data Engineer")
        source = tmp_path / "etl.md"
        source.write_text("Build the ETL for {{name}}.")

        added = invoke("agent", "add-prompt", "data-engineer", str(source))
        assert added.exit_code == 0
        assert (home / "agents" / "data-engineer" / "prompts" / "etl.md").exists()

        removed = invoke("agent", "remove-prompt", "data-engineer", "etl.md")
        assert "Removed prompt etl.md" in removed.output


class TestProjectCommands:
    """Tests for yabp project."""

    def test_create(self, installed: Path) -> None:
        result = invoke(
            "project",
            "create",
            "shop",
            "-a",
            "devops-engineer",
            "-s",
            "Cloud Provider=AWS",
            "-s",
            "Infrastructure=Terraform",
            "-s",
            "CI/CD Platform=GitHub Actions",
        )

        assert result.exit_code == 0
        assert "Created project shop" in result.output
        assert "Fragments: 3" in result.output
        assert "Base CI/CD Pipeline.md" in result.output
        prompts = installed / "projects" / "shop" / ".yabp" / "prompts.md"
        assert "### AWS Infrastructure (Terraform)" in prompts.read_text(encoding="utf-8")

    def test_create_with_workflow(self, installed: Path) -> None:
        result = invoke("project", "create", "docs", "--workflow", "documentation-heavy")

        assert result.exit_code == 0
        show = invoke("project", "show", "docs")
        assert "Discovery" in show.output
        assert "pm-framework" in show.output

    def test_create_with_unknown_workflow(self, installed: Path) -> None:
        result = invoke("project", "create", "docs", "--workflow", "waterfall")
        assert result.exit_code == 1
        assert "Unknown workflow" in result.output

    def test_list(self, shop: Path) -> None:
        result = invoke("project", "list")
        assert result.exit_code == 0
        assert "shop" in result.output
        assert "devops-engineer, qa-engineer" in result.output

    def test_show_missing(self, home: Path) -> None:
        result = invoke("project", "show", "nope")
        assert result.exit_code == 1
        assert "Project not found: nope" in result.output

    def test_prompts(self, shop: Path) -> None:
        result = invoke("project", "prompts", "shop")
        assert result.exit_code == 0
        assert "Base CI/CD Pipeline" in result.output

    def test_context(self, shop: Path) -> None:
        result = invoke("project", "context", "shop", "--set", "region=eu-west-1")
        assert result.exit_code == 0
        assert "region: eu-west-1" in result.output

    def test_configure_recompiles(self, shop: Path) -> None:
        result = invoke("project", "configure", "shop", "-s", "CI/CD Platform=Jenkins")

        assert result.exit_code == 0
        prompts = (shop / ".yabp" / "prompts.md").read_text(encoding="utf-8")
        assert "### AWS Infrastructure (Terraform)" not in prompts
        assert "### Base CI/CD Pipeline" in prompts

    def test_run_simulated(self, shop: Path) -> None:
        result = invoke("project", "run", "shop", "Check {{name}}", "-a", "qa-engineer")

        assert result.exit_code == 0, result.output
        assert "simulation mode" in result.output
        assert "docs/qa/report.md" in result.output
        assert (shop / "docs" / "qa" / "report.md").exists()

        history = invoke("project", "history", "shop")
        assert "_qa_engineer.md" in history.output

    def test_run_by_title(self, shop: Path) -> None:
        result = invoke("project", "run", "shop", "--title", "Base CI/CD Pipeline")

        assert result.exit_code == 0, result.output
        logs = list((shop / ".yabp" / "executions").glob("*_custom.md"))
        assert len(logs) == 1
        assert "Design a CI/CD pipeline for shop" in logs[0].read_text(encoding="utf-8")

    def test_run_requires_one_prompt_source(self, shop: Path) -> None:
        result = invoke("project", "run", "shop")
        assert result.exit_code == 1
        assert "exactly one" in result.output

    def test_run_unknown_title(self, shop: Path) -> None:
        result = invoke("project", "run", "shop", "--title", "Nope")
        assert result.exit_code == 1

    def test_run_live_without_engine(self, shop: Path) -> None:
        with patch("yabp.cli.resolve_engine", return_value=None):
            result = invoke("project", "run", "shop", "Go", "--live")
        assert result.exit_code == 1
        assert not (shop / ".yabp" / "executions").exists()

    def test_run_live(self, shop: Path) -> None:
        with (
            patch("yabp.cli.resolve_engine", return_value=CURSOR),
            patch("yabp.executors.live.subprocess.run") as mock_run,
        ):
            mock_run.return_value.returncode = 0
            mock_run.return_value.stdout = "agent finished"
            mock_run.return_value.stderr = ""
            result = invoke("project", "run", "shop", "Go", "--live")

        assert result.exit_code == 0, result.output
        assert "agent finished" in result.output
        assert "[Process exited with code 0]" in result.output

    def test_files_and_delete(self, shop: Path) -> None:
        tree = invoke("project", "files", "shop")
        assert tree.exit_code == 0
        assert "README.md" in tree.output

        deleted = invoke("project", "files", "shop", "--delete", "README.md")
        assert deleted.exit_code == 0
        assert not (shop / "README.md").exists()
        assert len(list((shop / ".deleted").iterdir())) == 1

    def test_files_rejects_escape(self, shop: Path) -> None:
        result = invoke("project", "files", "shop", "--delete", "../x.md")
        assert result.exit_code == 1
        assert "Invalid file path" in result.output

    def test_delete(self, shop: Path) -> None:
        result = invoke("project", "delete", "shop", "--yes")
        assert result.exit_code == 0
        assert "Deleted project shop" in result.output
        assert not shop.exists()

    def test_delete_declined(self, shop: Path) -> None:
        result = invoke("project", "delete", "shop", input="n\n")
        assert "No changes made" in result.output
        assert shop.exists()


def test_workflow_list() -> None:
    """Test that workflow templates are listed."""
    result = invoke("workflow", "list", "-v")
    assert result.exit_code == 0
    assert "comprehensive-sdlc" in result.output
    assert "Inception" in result.output


class TestParsing:
    """Tests for option parsing helpers."""

    def test_parse_selections_repeats_become_lists(self) -> None:
        selections = parse_selections(
            ("Cloud Provider=AWS", "Infrastructure=Terraform", "Infrastructure=CDK")
        )
        assert selections == {
            "Cloud Provider": "AWS",
            "Infrastructure": ["Terraform", "CDK"],
        }

    def test_parse_selections_rejects_missing_value(self) -> None:
        with pytest.raises(click.BadParameter):
            parse_selections(("Cloud Provider=",))

    def test_parse_assignments_reads_yaml_values(self) -> None:
        assert parse_assignments(("active=false", "tags=[a, b]", "name=QA")) == {
            "active": False,
            "tags": ["a", "b"],
            "name": "QA",
        }

    def test_parse_assignments_requires_equals(self) -> None:
        with pytest.raises(click.BadParameter):
            parse_assignments(("oops",))
