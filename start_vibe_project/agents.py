"""Supported coding agents and their conventional directory layout.

Source of truth for the agent identifiers is the skills CLI's list of
supported agents.  ``skills_dir`` and ``agents_dir`` are relative to the
project root; ``global_skills_dir`` is relative to the user's home.
"""

from __future__ import annotations

from pathlib import Path

from .models import AgentConfig


def _agent(name: str, display_name: str, project_dir: str, global_skills_dir: str) -> AgentConfig:
    return AgentConfig(
        name=name,
        display_name=display_name,
        skills_dir=f"{project_dir}/skills" if project_dir else "skills",
        agents_dir=f"{project_dir}/agents" if project_dir else "agents",
        global_skills_dir=global_skills_dir,
    )


AGENTS: dict[str, AgentConfig] = {
    agent.name: agent
    for agent in (
        _agent("opencode", "OpenCode", ".opencode", ".config/opencode/skills"),
        _agent("claude-code", "Claude Code", ".claude", ".claude/skills"),
        _agent("codex", "Codex", ".codex", ".codex/skills"),
        _agent("gemini-cli", "Gemini CLI", ".gemini", ".gemini/skills"),
        _agent("github-copilot", "GitHub Copilot", ".github", ".copilot/skills"),
        _agent("cursor", "Cursor", ".cursor", ".cursor/skills"),
        _agent("amp", "Amp", ".agents", ".config/agents/skills"),
        _agent("antigravity", "Antigravity", ".agent", ".gemini/antigravity/global_skills"),
        _agent("clawdbot", "Clawdbot", "", ".clawdbot/skills"),
        _agent("cline", "Cline", ".cline", ".cline/skills"),
        _agent("codebuddy", "CodeBuddy", ".codebuddy", ".codebuddy/skills"),
        _agent("command-code", "Command Code", ".commandcode", ".commandcode/skills"),
        _agent("continue", "Continue", ".continue", ".continue/skills"),
        _agent("crush", "Crush", ".crush", ".config/crush/skills"),
        _agent("droid", "Droid", ".factory", ".factory/skills"),
        _agent("goose", "Goose", ".goose", ".config/goose/skills"),
        _agent("kilo", "Kilo Code", ".kilocode", ".kilocode/skills"),
        _agent("kiro-cli", "Kiro CLI", ".kiro", ".kiro/skills"),
        _agent("mcpjam", "MCPJam", ".mcpjam", ".mcpjam/skills"),
        _agent("mux", "Mux", ".mux", ".mux/skills"),
        _agent("openhands", "OpenHands", ".openhands", ".openhands/skills"),
        _agent("pi", "Pi", ".pi", ".pi/agent/skills"),
        _agent("qoder", "Qoder", ".qoder", ".qoder/skills"),
        _agent("qwen-code", "Qwen Code", ".qwen", ".qwen/skills"),
        _agent("roo", "Roo Code", ".roo", ".roo/skills"),
        _agent("trae", "Trae", ".trae", ".trae/skills"),
        _agent("windsurf", "Windsurf", ".windsurf", ".codeium/windsurf/skills"),
        _agent("zencoder", "Zencoder", ".zencoder", ".zencoder/skills"),
        _agent("neovate", "Neovate", ".neovate", ".neovate/skills"),
    )
}

#: Agent whose ecosystem keeps instructions under ``.github/``.
DOTTED_INSTRUCTIONS_AGENT = "github-copilot"


def get_agent_config(name: str) -> AgentConfig | None:
    """Return the descriptor for *name*, or ``None`` for an unknown agent."""
    return AGENTS.get(name)


def detect_installed_agents(home_dir: Path) -> list[str]:
    """Return agents whose global skills home exists under *home_dir*."""
    installed: list[str] = []
    for name, agent in AGENTS.items():
        marker = home_dir / Path(agent.global_skills_dir).parent
        if marker.exists():
            installed.append(name)
    return installed
