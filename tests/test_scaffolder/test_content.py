"""Unit tests for document content (start_vibe_project.scaffolder.content).

Tests cover:
- Display names and component labels
- Render contexts for documents, INIT.md and the creator agent
- Text edits on AGENTS.md, Copilot instructions and the creator agent
- Public helpers document their arguments and return values
"""

from __future__ import annotations

import inspect
from datetime import datetime, timezone

import pytest

from start_vibe_project.errors import ValidationError
from start_vibe_project.scaffolder.content import (
    apply_creator_tools,
    build_creator_values,
    build_document_context,
    build_init_values,
    format_component_display,
    generate_gitignore,
    opsx_ff_command,
    priority_skill_list,
    stack_display_name,
    strip_relief_pilot_requirement,
    strip_simple_mem_section,
    template_display_name,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


class TestDisplayNames:
    @pytest.mark.parametrize(
        "stack,expected",
        [("react-vite", "React + Vite"), ("nestjs", "NestJS"), ("postgresql", "PostgreSQL"),
         ("other", "To be specified"), ("htmx", "htmx")],
    )
    def test_stack_display_name(self, stack, expected):
        assert stack_display_name(stack) == expected

    def test_template_display_name(self):
        assert template_display_name("mobile-app") == "Mobile App"

    @pytest.mark.parametrize("agent", ["github-copilot", "cursor", "windsurf"])
    def test_dash_command_agents(self, agent):
        assert opsx_ff_command(agent) == "/opsx-ff initial-setup"

    @pytest.mark.parametrize("agent", ["claude-code", "codex", "gemini-cli"])
    def test_colon_command_agents(self, agent):
        assert opsx_ff_command(agent) == "/opsx:ff initial-setup"


class TestFormatComponentDisplay:
    def test_disabled(self):
        assert format_component_display(False, "react-vite", "frontend_stack").value == "No"

    def test_enabled(self):
        assert format_component_display(True, "react-vite", "frontend_stack").value == (
            "Yes (react-vite)"
        )

    def test_enabled_without_stack(self):
        result = format_component_display(True, None, "backend_stack")
        assert result.is_err()
        assert isinstance(result.error, ValidationError)
        assert result.error.message == "backend_stack is required when the component is enabled."
        assert result.error.context == {"field": "backend_stack"}


class TestPrioritySkillList:
    def test_lists_commands(self):
        assert priority_skill_list(["a/b", "c/d"]) == (
            "  - `npx skills add a/b --list`\n  - `npx skills add c/d --list`"
        )

    def test_empty(self):
        assert "No priority repos" in priority_skill_list([])


# ---------------------------------------------------------------------------
# Render contexts
# ---------------------------------------------------------------------------


class TestBuildDocumentContext:
    def test_default_config(self, project_config):
        context = build_document_context(project_config).value
        assert context["name"] == "demo"
        assert context["template_name"] == "Web App"
        assert context["frontend_component"] == "Yes (react-vite)"
        assert context["backend_component"] == "Yes (express)"
        assert context["database_component"] == "No"
        assert context["auth_component"] == "No"
        assert context["frontend_display"] == "React + Vite"
        assert context["components"] == {
            "frontend": True, "backend": True, "database": False, "auth": False
        }

    def test_other_stack_rows(self, make_config):
        context = build_document_context(make_config(frontend_stack="other")).value
        assert context["frontend_rows"] == [
            {"name": "TBD (select frontend framework)", "purpose": "Core framework"}
        ]

    def test_unknown_stack_rows(self, make_config):
        context = build_document_context(make_config(backend_stack="hono")).value
        assert context["backend_rows"] == [{"name": "hono", "purpose": "Core framework"}]

    def test_database_display(self, make_config):
        config = make_config(
            components={"database": True}, database_stack="mongodb", frontend_stack=None
        )
        context = build_document_context(config).value
        assert context["database_component"] == "Yes (mongodb)"
        assert context["database_display"] == "MongoDB"

    def test_enabled_component_without_stack(self, project_config):
        # Bypasses boundary validation to reach the formatter.
        config = project_config.model_copy(update={"backend_stack": None})
        result = build_document_context(config)
        assert result.is_err()
        assert result.error.context["field"] == "backend_stack"


class TestBuildInitValues:
    def test_values(self, make_config):
        config = make_config(ai_tool="cursor", components={"frontend": True, "auth": True})
        created = datetime(2025, 3, 4, 23, 30, tzinfo=timezone.utc)

        values = build_init_values(config, ".cursor/skills", ["a/b"], created).value

        assert values == {
            "aiTool": "cursor",
            "skillsDir": ".cursor/skills",
            "name": "demo",
            "templateName": "Web App",
            "createdDate": "2025-03-04",
            "prioritySkillList": "  - `npx skills add a/b --list`",
            "opsxFFCommand": "/opsx-ff initial-setup",
            "frontendComponent": "Yes (react-vite)",
            "backendComponent": "No",
            "databaseComponent": "No",
            "authComponent": "Yes",
        }

    def test_default_date_is_today_utc(self, project_config):
        values = build_init_values(project_config, ".claude/skills", []).value
        assert values["createdDate"] == datetime.now(timezone.utc).date().isoformat()

    def test_creator_values(self, project_config):
        assert build_creator_values(project_config, ".claude/skills") == {
            "aiTool": "claude-code",
            "skillsDir": ".claude/skills",
        }


# ---------------------------------------------------------------------------
# Text edits
# ---------------------------------------------------------------------------


AGENTS_MD = (
    "# Agents\n\nIntro.\n"
    "\n## SimpleMem Instructions\n\nRemember things.\n<!-- SIMPLEMEM:END -->\n"
    "\n## Workflow\n\nSteps.\n"
)

COPILOT_MD = (
    "# Copilot\n\n## 0. Critical Requirement\n\nUse Relief Pilot.\n\n"
    "## 1. Mandatory Protocols\n\nFollow them.\n"
)

CREATOR_MD = (
    "---\nname: creator\ntools: Read, Write\nmodel: inherit\n---\n\n"
    "Body tools: here\ntools: Bash\n"
)


class TestStripSimpleMem:
    def test_section_removed(self):
        result = strip_simple_mem_section(AGENTS_MD)
        assert "SimpleMem" not in result
        assert "SIMPLEMEM:END" not in result
        assert result.startswith("# Agents\n\nIntro.\n")
        assert result.endswith("## Workflow\n\nSteps.\n")

    def test_without_section_unchanged(self):
        assert strip_simple_mem_section("# Agents\n") == "# Agents\n"

    def test_every_section_removed(self):
        doubled = AGENTS_MD + "\n## SimpleMem Instructions\nmore\n<!-- SIMPLEMEM:END -->\n"
        assert "SimpleMem" not in strip_simple_mem_section(doubled)


class TestStripReliefPilot:
    def test_section_zero_removed(self):
        result = strip_relief_pilot_requirement(COPILOT_MD)
        assert result == "# Copilot\n\n## 1. Mandatory Protocols\n\nFollow them.\n"

    def test_without_section_unchanged(self):
        text = "# Copilot\n\n## 1. Mandatory Protocols\n"
        assert strip_relief_pilot_requirement(text) == text


class TestApplyCreatorTools:
    def test_first_tools_line_replaced(self):
        result = apply_creator_tools(CREATOR_MD, "\ntools: Read, Write, relief-pilot/ask_report\n\n")
        assert "tools: Read, Write, relief-pilot/ask_report\nmodel: inherit" in result
        assert "Body tools: here" in result

    def test_later_tools_lines_untouched(self):
        result = apply_creator_tools(CREATOR_MD, "tools: Read, Write, relief-pilot/ask_report")
        assert result == (
            "---\nname: creator\ntools: Read, Write, relief-pilot/ask_report\n"
            "model: inherit\n---\n\nBody tools: here\ntools: Bash\n"
        )
        assert result.count("tools: Bash") == 1

    def test_no_tools_line(self):
        assert apply_creator_tools("---\nname: x\n---\n", "tools: A") == "---\nname: x\n---\n"

    def test_backslashes_kept_literally(self):
        result = apply_creator_tools(CREATOR_MD, r"tools: C:\path\1")
        assert r"tools: C:\path\1" in result


class TestGitignore:
    def test_core_entries(self):
        content = generate_gitignore()
        for entry in ("node_modules/", ".env", "dist/", ".DS_Store", "coverage/"):
            assert f"{entry}\n" in content


class TestHelperDocumentation:
    @pytest.mark.parametrize(
        "helper",
        [
            stack_display_name,
            template_display_name,
            format_component_display,
            priority_skill_list,
            build_document_context,
            build_init_values,
            build_creator_values,
            apply_creator_tools,
        ],
    )
    def test_documents_arguments_and_return(self, helper):
        doc = inspect.getdoc(helper)
        assert doc is not None
        assert "Args:" in doc
        assert "Returns:" in doc

    def test_gitignore_documented(self):
        assert inspect.getdoc(generate_gitignore)
