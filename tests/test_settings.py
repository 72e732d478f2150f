from pathlib import Path

import pytest

from bootstrapper.errors import SettingsError
from bootstrapper.settings import Settings, load_settings, settings_from_mapping


def test_defaults_without_file(tmp_path: Path) -> None:
    s = load_settings(None, template_dir=tmp_path)
    assert s == Settings()
    assert s.github_org == "Bionic-AI-Solutions"
    assert s.identifiers.project_id == "dev-template"
    assert "k8s/base/namespace.yaml" in s.customize_files


def test_yaml_overrides(tmp_path: Path) -> None:
    cfg = tmp_path / "s.yaml"
    cfg.write_text(
        "github_org: acme\n"
        "required_tools: [git]\n"
        "compose_command: docker\n"
        "identifiers:\n"
        "  project_id: my-template\n"
        "  legacy_db_names: old_db\n"
    )
    s = load_settings(cfg)
    assert s.github_org == "acme"
    assert s.required_tools == ("git",)
    assert s.compose_command == ("docker",)
    assert s.identifiers.project_id == "my-template"
    assert s.identifiers.legacy_db_names == ("old_db",)
    assert s.identifiers.display_name == "Dev-PyNode"


def test_template_dir_settings_file_is_picked_up(tmp_path: Path) -> None:
    (tmp_path / "bootstrap.yaml").write_text("registry_username: someone\n")
    assert load_settings(None, template_dir=tmp_path).registry_username == "someone"


def test_empty_list_clears_tuple() -> None:
    assert settings_from_mapping({"required_tools": []}).required_tools == ()


@pytest.mark.parametrize(
    "content, message",
    [
        ("nope: 1\n", "Unknown settings key"),
        ("- a\n- b\n", "mapping"),
        ("identifiers: 3\n", "identifiers"),
        ("identifiers:\n  bogus: x\n", "Unknown identifiers keys"),
        ("required_tools: {a: 1}\n", "list of strings"),
        ("github_org: [unclosed\n", "Invalid YAML"),
    ],
)
def test_invalid_settings(tmp_path: Path, content: str, message: str) -> None:
    cfg = tmp_path / "s.yaml"
    cfg.write_text(content)
    with pytest.raises(SettingsError, match=message):
        load_settings(cfg)


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(SettingsError, match="does not exist"):
        load_settings(tmp_path / "missing.yaml")
