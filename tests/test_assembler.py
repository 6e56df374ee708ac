"""Tests for instruction assembly."""

from pathlib import Path

from yabp.agents.base import Agent
from yabp.prompts.assembler import (
    GLOBAL_RULES_HEADER,
    assemble,
    build_variables,
    output_instruction,
    parse_input_files,
)

PM = Agent(id="pm-framework", name="PM", docs_folder="pm", system_instruction="Be terse.")


class TestParseInputFiles:
    """Tests for parse_input_files()."""

    def test_list_under_key(self) -> None:
        prompt = "Intro\ninput_files:\n  - docs/pm/brief.md\n  - docs/pm/stories.md\n\nGo."

        assert parse_input_files(prompt) == ["docs/pm/brief.md", "docs/pm/stories.md"]

    def test_inside_frontmatter(self) -> None:
        prompt = "---\noutput_file: plan.md\ninput_files:\n  - spec.md\n---\nWrite it."

        assert parse_input_files(prompt) == ["spec.md"]

    def test_no_key(self) -> None:
        assert parse_input_files("Just do it.") == []


class TestAssemble:
    """Tests for assemble()."""

    def test_header_then_interpolated_body(self, tmp_path: Path) -> None:
        result = assemble(
            "Deploy {{name}} to {{context.region}} with {{selections.cloud}}.",
            {"selections": {"cloud": "AWS"}},
            {"region": "eu-west-1"},
            None,
            tmp_path,
            "shop",
        )

        assert result == GLOBAL_RULES_HEADER + "Deploy shop to eu-west-1 with AWS."

    def test_header_is_not_interpolated(self, tmp_path: Path) -> None:
        result = assemble("x", {}, {}, None, tmp_path, "shop")

        assert 'A["Label"]' in result
        assert result.startswith("\n# CRITICAL GLOBAL RULES (NON-NEGOTIABLE)")

    def test_missing_input_file(self, tmp_path: Path) -> None:
        prompt = "input_files:\n  - spec.md\n\nWrite the plan."

        result = assemble(prompt, {}, {}, None, tmp_path, "shop")

        assert "[MISSING] spec.md" in result
        assert result.startswith("\n\n# Project Context 🗂️\n")
        assert result.index("[MISSING]") < result.index("CRITICAL GLOBAL RULES")

    def test_existing_input_file_is_injected(self, tmp_path: Path) -> None:
        (tmp_path / "docs" / "pm").mkdir(parents=True)
        (tmp_path / "docs" / "pm" / "brief.md").write_text("# Brief\nShip it.")
        prompt = "input_files:\n  - docs/pm/brief.md\n"

        result = assemble(prompt, {}, {}, None, tmp_path, "shop")

        assert "\n## docs/pm/brief.md\n```markdown\n# Brief\nShip it.\n```\n" in result
        assert "[MISSING]" not in result

    def test_input_file_outside_project_is_missing(self, tmp_path: Path) -> None:
        (tmp_path / "secret.md").write_text("secret")
        project = tmp_path / "project"
        project.mkdir()
        prompt = "input_files:\n  - ../secret.md\n"

        result = assemble(prompt, {}, {}, None, project, "shop")

        assert "[MISSING] ../secret.md" in result
        assert "secret\n```" not in result

    def test_non_utf8_input_file_is_marked_unreadable(self, tmp_path: Path) -> None:
        (tmp_path / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\xff")
        (tmp_path / "brief.md").write_text("Ship it.")
        prompt = "input_files:\n  - logo.png\n  - brief.md\n"

        result = assemble(prompt, {}, {}, None, tmp_path, "shop")

        assert "[UNREADABLE] logo.png" in result
        assert "[MISSING] logo.png" not in result
        assert "\n## brief.md\n```markdown\nShip it.\n```\n" in result

    def test_system_instruction_after_context(self, tmp_path: Path) -> None:
        prompt = "input_files:\n  - spec.md\n\nWrite docs/pm/plan.md"

        result = assemble(prompt, {}, {}, PM, tmp_path, "shop")

        context = result.index("# Project Context")
        system = result.index("# CRITICAL SYSTEM INSTRUCTION\nBe terse.")
        rules = result.index("# CRITICAL GLOBAL RULES")
        assert context < system < rules

    def test_footer_for_agent_docs_folder(self, tmp_path: Path) -> None:
        agent = Agent(id="qa", name="QA", docs_folder="qa")

        result = assemble("Write a test plan.", {}, {}, agent, tmp_path, "shop")

        assert result.endswith(output_instruction("docs/qa/"))
        assert result.count("# OUTPUT INSTRUCTION") == 1

    def test_footer_skipped_when_folder_mentioned(self, tmp_path: Path) -> None:
        agent = Agent(id="qa", name="QA", docs_folder="qa")

        result = assemble("Save to docs/qa/plan.md.", {}, {}, agent, tmp_path, "shop")

        assert "# OUTPUT INSTRUCTION" not in result

    def test_reassembly_does_not_duplicate_footer(self, tmp_path: Path) -> None:
        agent = Agent(id="qa", name="QA", docs_folder="qa")
        first = assemble("Write a test plan.", {}, {}, agent, tmp_path, "shop")

        second = assemble(first, {}, {}, agent, tmp_path, "shop")

        assert second.count("# OUTPUT INSTRUCTION") == 1

    def test_docs_folder_override(self, tmp_path: Path) -> None:
        agent = Agent(id="qa", name="QA", docs_folder="qa")

        result = assemble(
            "Write it.", {}, {}, agent, tmp_path, "shop", docs_folder="release"
        )

        assert "`docs/release/`" in result
        assert "docs/qa/" not in result

    def test_no_footer_without_folder(self, tmp_path: Path) -> None:
        result = assemble("Write it.", {}, {}, None, tmp_path, "shop")

        assert "OUTPUT INSTRUCTION" not in result


class TestBuildVariables:
    """Tests for build_variables()."""

    def test_name_wins_over_config(self) -> None:
        variables = build_variables({"name": "old", "agents": ["a"]}, {"k": 1}, "shop")

        assert variables == {"name": "shop", "agents": ["a"], "context": {"k": 1}}
