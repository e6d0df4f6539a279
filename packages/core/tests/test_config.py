"""Tests for project configuration loading and path resolution."""

from pathlib import Path

import pytest
import yaml
from knowmap_core.config import (
    KnowledgeConfig,
    ProjectConfig,
    ProjectInfo,
    TechStack,
    load_project_config,
    read_config,
    resolve_base_paths,
    validate_config,
    write_config,
)
from knowmap_core.errors import ConfigInvalidError, ConfigNotFoundError

FULL_CONFIG = """\
version: "1.0"
project:
  name: shop
  owner: team-a
tech_stack:
  language: typescript
  framework: next.js
paths:
  base_dir: documentation
  api: src/api/**
exclude:
  - "*.env*"
knowledge:
  base_path: documentation/kb
"""


class TestValidateConfig:
    def test_full_config(self) -> None:
        config = validate_config(FULL_CONFIG)

        assert config.project.name == "shop"
        assert config.project.model_extra == {"owner": "team-a"}
        assert config.tech_stack == TechStack(language="typescript", framework="next.js")
        assert config.paths == {"base_dir": "documentation", "api": "src/api/**"}
        assert config.exclude == ["*.env*"]
        assert config.knowledge == KnowledgeConfig(base_path="documentation/kb")

    def test_minimal_config_gets_defaults(self) -> None:
        config = validate_config("project:\n  name: shop\n")

        assert config.tech_stack is None
        assert config.paths == {}
        assert config.exclude == []
        assert config.knowledge is None

    def test_unknown_top_level_keys_are_kept(self) -> None:
        config = validate_config("project:\n  name: shop\nextras:\n  color: blue\n")

        assert config.model_extra == {"extras": {"color": "blue"}}

    @pytest.mark.parametrize(
        ("raw", "fragment"),
        [
            ("version: '1.0'\n", "project: Field required"),
            ("project:\n  version: '2'\n", "project.name: Field required"),
            ("project:\n  name: [unclosed\n", "<string>"),
            ("- a\n- b\n", "expected a mapping"),
            ("", "expected a mapping"),
        ],
    )
    def test_invalid_configs(self, raw: str, fragment: str) -> None:
        with pytest.raises(ConfigInvalidError) as exc_info:
            validate_config(raw)

        assert fragment in exc_info.value.message
        assert exc_info.value.code == "CONFIG_INVALID"


def test_read_config_requires_the_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigNotFoundError) as exc_info:
        read_config(tmp_path)

    assert exc_info.value.path == str(tmp_path.resolve() / ".knowmap.yaml")


def test_load_project_config_falls_back_to_directory_name(tmp_path: Path) -> None:
    project_dir = tmp_path / "inventory"
    project_dir.mkdir()

    assert load_project_config(project_dir).project.name == "inventory"


def test_load_project_config_does_not_hide_invalid_files(make_files) -> None:
    root = make_files({".knowmap.yaml": "project: {}\n"})

    with pytest.raises(ConfigInvalidError):
        load_project_config(root)


class TestBasePaths:
    def test_defaults(self, tmp_path: Path) -> None:
        paths = resolve_base_paths(ProjectConfig(project=ProjectInfo(name="x")), tmp_path)
        root = tmp_path.resolve()

        assert paths.base_dir == root / "docs"
        assert paths.knowledge_path == root / "docs/ai-knowledge"
        assert paths.specs_path == root / "docs/specs"
        assert paths.registry_path == root / "docs/ai-knowledge/module-map.yaml"
        assert paths.index_path == root / "docs/ai-knowledge/_index.md"
        assert paths.module_doc_path("api") == root / "docs/ai-knowledge/modules/api/README.md"

    def test_base_dir_moves_the_knowledge_base(self, tmp_path: Path) -> None:
        config = ProjectConfig(project=ProjectInfo(name="x"), paths={"base_dir": "documentation"})

        paths = resolve_base_paths(config, tmp_path)

        assert paths.knowledge_path == tmp_path.resolve() / "documentation/ai-knowledge"

    def test_explicit_knowledge_path_wins(self, tmp_path: Path) -> None:
        paths = resolve_base_paths(validate_config(FULL_CONFIG), tmp_path)

        assert paths.knowledge_path == tmp_path.resolve() / "documentation/kb"
        assert paths.specs_path == tmp_path.resolve() / "documentation/specs"


def test_write_config_omits_unset_fields(tmp_path: Path) -> None:
    config = ProjectConfig(project=ProjectInfo(name="shop"), tech_stack=TechStack(language="python"))

    path = write_config(config, tmp_path)

    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {
        "project": {"name": "shop"},
        "tech_stack": {"language": "python"},
        "paths": {},
        "exclude": [],
    }
    assert read_config(tmp_path) == config


def test_config_round_trip_keeps_unknown_keys(make_files) -> None:
    root = make_files({".knowmap.yaml": FULL_CONFIG})

    write_config(read_config(root), root)

    assert read_config(root) == validate_config(FULL_CONFIG)
