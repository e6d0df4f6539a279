"""Tests for the Jinja2 document renderer and the built-in templates."""

from pathlib import Path

import pytest
from knowmap_core.config import TechStack
from knowmap_core.errors import TemplateError
from knowmap_core.knowledge.documents import (
    IndexRow,
    build_directory_tree,
    index_context,
    infer_file_description,
    module_doc_context,
)
from knowmap_core.merging import AUTO_END, AUTO_START, USER_END, USER_START, parse_sections
from knowmap_core.registry import Module, ModuleRelationships
from knowmap_core.rendering import (
    INDEX_TEMPLATE,
    MODULE_README_TEMPLATE,
    TemplateRenderer,
    join_or,
)
from knowmap_core.settings import reset_settings


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


def test_join_or() -> None:
    assert join_or(["a", "b"]) == "a, b"
    assert join_or([]) == "None"
    assert join_or(None, fallback="-") == "-"
    assert join_or([1, 2], sep=" | ") == "1 | 2"


def test_module_readme(renderer: TemplateRenderer) -> None:
    module = Module(
        name="api",
        description="HTTP API",
        paths=["src/api/**"],
        keywords=["api", "http"],
        relationships=ModuleRelationships(depends_on=["core"], used_by=[]),
    )
    key_files = [{"path": "src/api/index.ts", "description": "Module entry point"}]

    text = renderer.render(MODULE_README_TEMPLATE, module_doc_context(module, key_files))

    assert text.startswith("# api\n")
    assert "> HTTP API" in text
    assert "- **Path**: `src/api/**`" in text
    assert "- **Keywords**: api, http" in text
    assert "- **Depends on**: core" in text
    assert "- **Used by**: none" in text
    assert "| `src/api/index.ts` | Module entry point |" in text
    assert "_Not documented yet._" in text
    assert [s.type for s in parse_sections(text)] == ["static", "auto", "static", "user", "static"]


def test_index_rows(renderer: TemplateRenderer) -> None:
    rows = [IndexRow("api", "HTTP API", ("api",)), IndexRow("old", "old module", status="Deprecated")]

    text = renderer.render(
        INDEX_TEMPLATE, index_context("shop", TechStack(language="python"), "docs/ai-knowledge", rows)
    )

    assert "- **Language**: python" in text
    assert "- **Framework**: none" in text
    assert "| [api](modules/api/README.md) | HTTP API | api | Active |" in text
    assert "| [old](modules/old/README.md) | old module | - | Deprecated |" in text


@pytest.mark.parametrize(
    ("template", "context"),
    [
        ("architecture.md.j2", {"project_name": "x", "architecture": "unknown", "tech_stack": TechStack(),
                                "file_count": 0, "directory_tree": "", "entry_points": [], "modules": []}),
        ("raw_scan.md.j2", {"project_name": "x", "tech_stack": TechStack(), "entry_points": [],
                            "directory_tree": "", "dependencies": [], "config_files": [],
                            "file_stats": {"total_files": 0, "scan_depth": 10}}),
        ("conventions.md.j2", {"project_name": "x", "tech_stack": None}),
        ("index.md.j2", {"project_name": "x", "tech_stack": None, "knowledge_base_path": "kb", "modules": []}),
    ],
)
def test_every_template_has_one_auto_and_one_user_region(
    renderer: TemplateRenderer, template: str, context: dict
) -> None:
    text = renderer.render(template, context)

    assert text.count(AUTO_START) == 1
    assert text.count(AUTO_END) == 1
    assert text.count(USER_START) == 1
    assert text.count(USER_END) == 1
    assert text.endswith("\n")


def test_missing_context_key_is_a_template_error(renderer: TemplateRenderer) -> None:
    with pytest.raises(TemplateError) as exc_info:
        renderer.render(INDEX_TEMPLATE, {"project_name": "x"})

    assert exc_info.value.template_name == INDEX_TEMPLATE


def test_unknown_template_is_a_template_error(renderer: TemplateRenderer) -> None:
    with pytest.raises(TemplateError, match="template not found"):
        renderer.render("nope.md.j2", {})


def test_override_directory_shadows_builtin_templates(tmp_path: Path) -> None:
    (tmp_path / INDEX_TEMPLATE).write_text("custom {{ project_name }}\n", encoding="utf-8")
    renderer = TemplateRenderer(tmp_path)

    assert renderer.render(INDEX_TEMPLATE, {"project_name": "shop"}) == "custom shop\n"
    assert renderer.render("conventions.md.j2", {"project_name": "shop", "tech_stack": None}).startswith(
        "# Coding Conventions"
    )


def test_from_settings_reads_templates_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KNOWMAP_TEMPLATES_DIR", str(tmp_path))
    reset_settings()

    assert TemplateRenderer.from_settings().templates_dirs[0] == str(tmp_path)


@pytest.mark.parametrize(
    ("path", "description"),
    [
        ("src/index.ts", "Module entry point"),
        ("src/user.service.ts", "Service implementation"),
        ("src/user.test.ts", "Test file"),
        ("src/App.tsx", "React component"),
        ("templates/page.hbs", "Handlebars template"),
        ("templates/page.md.j2", "Jinja2 template"),
        ("pkg/mod.py", "Python source"),
        ("Makefile", "Source file"),
    ],
)
def test_infer_file_description(path: str, description: str) -> None:
    assert infer_file_description(path) == description


def test_build_directory_tree() -> None:
    files = ["README.md", "src/a/b/c/deep.ts", "src/a/x.ts", "tests/t.py"]

    assert build_directory_tree(files, 2) == "src/\n  a/\ntests/"
    assert build_directory_tree(files, 0) == ""
