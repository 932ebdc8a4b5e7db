"""Unit tests for packaged asset loading (start_vibe_project.infra.assets).

Tests cover:
- find_package_root walking upward to manifest.json, and its level cap
- TemplateLoader against the real packaged resources
- Memoisation of the package root
- Missing templates reported as TemplateLoadError with the logical path
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from start_vibe_project.errors import TemplateLoadError
from start_vibe_project.infra import LocalFileSystem, TemplateLoader
from start_vibe_project.infra import assets
from start_vibe_project.infra.assets import MAX_ROOT_SEARCH_LEVELS, find_package_root

pytestmark = pytest.mark.unit


class TestFindPackageRoot:
    def test_finds_marker_in_ancestor(self, tmp_path: Path):
        (tmp_path / "manifest.json").write_text("{}")
        start = tmp_path / "a" / "b"
        start.mkdir(parents=True)
        assert find_package_root(start).value == tmp_path.resolve()

    def test_gives_up_after_level_cap(self, tmp_path: Path):
        (tmp_path / "manifest.json").write_text("{}")
        start = tmp_path.joinpath(*[f"d{i}" for i in range(MAX_ROOT_SEARCH_LEVELS)])
        start.mkdir(parents=True)

        result = find_package_root(start)

        assert result.is_err()
        assert isinstance(result.error, TemplateLoadError)
        assert result.error.template_path == "package-root-not-found"

    def test_real_package_root(self):
        root = find_package_root(Path(assets.__file__).parent)
        assert (root.value / "templates" / "plans" / "init.md").is_file()


class TestTemplateLoader:
    @pytest.mark.asyncio
    async def test_loads_template(self, package_loader: TemplateLoader):
        result = await package_loader.load_template("plans/init.md")
        assert result.is_ok()
        assert "{{prioritySkillList}}" in result.value

    @pytest.mark.asyncio
    async def test_loads_dotfile_asset(self, package_loader: TemplateLoader):
        result = await package_loader.load_file_asset(".editorconfig")
        assert result.value.startswith("root = true")

    @pytest.mark.asyncio
    async def test_loads_data(self, package_loader: TemplateLoader):
        result = await package_loader.load_data("skill-registry.json")
        assert '"start_skills"' in result.value

    @pytest.mark.asyncio
    async def test_missing_template(self, package_loader: TemplateLoader):
        result = await package_loader.load_template("plans/missing.md")
        assert result.is_err()
        assert isinstance(result.error, TemplateLoadError)
        assert result.error.template_path == "plans/missing.md"
        assert result.error.message.startswith("Failed to load template")

    @pytest.mark.asyncio
    async def test_root_lookup_is_memoised(self, local_fs: LocalFileSystem):
        loader = TemplateLoader(local_fs)
        with patch.object(assets, "find_package_root", wraps=find_package_root) as spy:
            await loader.load_template("plans/init.md")
            await loader.load_file_asset("AGENTS.md")
        assert spy.call_count == 1

    @pytest.mark.asyncio
    async def test_missing_root_is_fatal(self, local_fs: LocalFileSystem, tmp_path: Path):
        loader = TemplateLoader(local_fs, start_dir=tmp_path)
        result = await loader.load_template("plans/init.md")
        assert result.is_err()
        assert result.error.template_path == "package-root-not-found"
