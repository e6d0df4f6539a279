"""Tests for full knowledge-base generation."""

from pathlib import Path

import pytest
from knowmap_core.errors import PrerequisiteError, RegistryParseError
from knowmap_core.knowledge import run_knowledge_generate
from knowmap_core.registry import ModuleRegistry, save_registry
from knowmap_core.registry.schemas import Module, ModuleRelationships
from knowmap_core.settings import reset_settings

KB = Path("docs/ai-knowledge")


@pytest.fixture
def registered(project: Path, make_files) -> Path:
    make_files(
        {
            "src/api/index.ts": "export * from './routes';\n",
            "src/api/routes.ts": "export const routes = [];\n",
            "src/api/routes.test.ts": "test('x', () => {});\n",
        }
    )
    save_registry(
        ModuleRegistry(
            modules=[
                Module(
                    name="api",
                    description="HTTP API",
                    paths=["src/api/**"],
                    keywords=["api", "http"],
                    relationships=ModuleRelationships(depends_on=["web"]),
                ),
                Module(name="web", paths=["src/web/**"], relationships=ModuleRelationships(used_by=["api"])),
            ]
        ),
        project / KB / "module-map.yaml",
    )
    return project


def test_missing_registry_is_a_prerequisite_error(project: Path) -> None:
    with pytest.raises(PrerequisiteError, match="module registry not found"):
        run_knowledge_generate(project)


def test_malformed_registry_is_reported(project: Path) -> None:
    registry_path = project / KB / "module-map.yaml"
    registry_path.parent.mkdir(parents=True)
    registry_path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(RegistryParseError):
        run_knowledge_generate(project)


def test_every_registered_module_gets_a_readme(registered: Path) -> None:
    result = run_knowledge_generate(registered)

    assert result.module_count == 2
    assert [(m.name, m.file_count) for m in result.modules] == [("api", 3), ("web", 0)]
    assert [(f.path, f.action) for f in result.generated_files] == [
        ("docs/ai-knowledge/modules/api/README.md", "created"),
        ("docs/ai-knowledge/modules/web/README.md", "created"),
        ("docs/ai-knowledge/_index.md", "created"),
    ]

    api = (registered / KB / "modules/api/README.md").read_text(encoding="utf-8")
    assert "> HTTP API" in api
    assert "- **Depends on**: web" in api
    assert "- **Used by**: none" in api
    assert "| `src/api/index.ts` | Module entry point |" in api
    assert "| `src/api/routes.test.ts` | Test file |" in api

    web = (registered / KB / "modules/web/README.md").read_text(encoding="utf-8")
    assert "> web module" in web
    assert "- **Used by**: api" in web

    index = (registered / KB / "_index.md").read_text(encoding="utf-8")
    assert index.startswith("# demo Knowledge Base")
    assert "| [api](modules/api/README.md) | HTTP API | api, http | Active |" in index
    assert "| [web](modules/web/README.md) | web module | - | Active |" in index


def test_regeneration_updates_and_keeps_user_notes(registered: Path) -> None:
    run_knowledge_generate(registered)
    readme = registered / KB / "modules/api/README.md"
    placeholder = "<!-- Design decisions, caveats and anything else worth keeping about api. -->"
    readme.write_text(readme.read_text(encoding="utf-8").replace(placeholder, "Routes are versioned."), encoding="utf-8")

    result = run_knowledge_generate(registered)

    assert {f.action for f in result.generated_files} == {"updated"}
    assert "Routes are versioned." in readme.read_text(encoding="utf-8")


def test_dry_run_reports_without_writing(registered: Path) -> None:
    result = run_knowledge_generate(registered, dry_run=True)

    assert result.dry_run
    assert [f.action for f in result.generated_files] == ["created", "created", "created"]
    assert not (registered / KB / "modules").exists()
    assert not (registered / KB / "_index.md").exists()


def test_key_files_are_capped(registered: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KNOWMAP_KEY_FILES_LIMIT", "1")
    reset_settings()

    result = run_knowledge_generate(registered)

    assert result.modules[0].file_count == 1
    api = (registered / KB / "modules/api/README.md").read_text(encoding="utf-8")
    assert "src/api/index.ts" in api
    assert "src/api/routes.ts" not in api


def test_config_excludes_apply_to_module_files(registered: Path) -> None:
    (registered / ".knowmap.yaml").write_text(
        "project:\n  name: demo\nexclude:\n  - '*.test.ts'\n", encoding="utf-8"
    )

    result = run_knowledge_generate(registered)

    assert result.modules[0].file_count == 2
