import json

import pytest

from doc_context.dependencies import read_package_versions


@pytest.fixture
def in_tmp_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_manifest(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_later_sections_override_and_modifiers_are_stripped(in_tmp_cwd):
    _write_manifest(
        in_tmp_cwd / "package.json",
        {
            "dependencies": {"a": "^1.2.3", "react": "~18.2.0", "next": "14.1.0"},
            "devDependencies": {"a": "~2.0.0", "local": {"path": "../lib"}},
            "peerDependencies": {"react": "^18.3.1"},
        },
    )

    versions = read_package_versions("package.json")

    assert versions == {"a": "2.0.0", "react": "18.3.1", "next": "14.1.0"}


def test_only_one_leading_modifier_is_removed(in_tmp_cwd):
    _write_manifest(in_tmp_cwd / "package.json", {"dependencies": {"odd": "^^1.0.0", "range": ">=2"}})

    assert read_package_versions("package.json") == {"odd": "^1.0.0", "range": ">=2"}


def test_missing_file_reports_resolved_path(in_tmp_cwd):
    result = read_package_versions("nested/package.json")

    assert isinstance(result, str)
    assert "not found" in result
    assert str((in_tmp_cwd / "nested" / "package.json").resolve()) in result


def test_tilde_paths_stay_relative_to_working_directory(in_tmp_cwd):
    (in_tmp_cwd / "~").mkdir()
    _write_manifest(in_tmp_cwd / "~" / "package.json", {"dependencies": {"vite": "^5.0.0"}})

    assert read_package_versions("~/package.json") == {"vite": "5.0.0"}


def test_unknown_user_tilde_path_is_reported_not_raised(in_tmp_cwd):
    result = read_package_versions("~nosuchuser_zz/package.json")

    assert "not found" in result
    assert str(in_tmp_cwd.resolve() / "~nosuchuser_zz" / "package.json") in result


def test_directory_is_not_a_manifest(in_tmp_cwd):
    (in_tmp_cwd / "pkg").mkdir()

    assert "not found" in read_package_versions("pkg")


def test_invalid_json_is_reported(in_tmp_cwd):
    (in_tmp_cwd / "package.json").write_text("{not json", encoding="utf-8")

    result = read_package_versions("package.json")

    assert result.startswith("Error parsing JSON in package.json:")


def test_manifest_without_dependencies(in_tmp_cwd):
    _write_manifest(in_tmp_cwd / "package.json", {"name": "demo", "dependencies": {}})

    assert read_package_versions("package.json") == "No dependencies found in package.json."


def test_non_object_manifest_has_no_dependencies(in_tmp_cwd):
    _write_manifest(in_tmp_cwd / "package.json", ["not", "an", "object"])

    assert read_package_versions("package.json") == "No dependencies found in package.json."


def test_absolute_path_and_repeat_reads_are_identical(in_tmp_cwd):
    manifest = in_tmp_cwd / "package.json"
    _write_manifest(manifest, {"dependencies": {"zod": "^3.22.4"}})

    first = read_package_versions(str(manifest))
    second = read_package_versions(str(manifest))

    assert first == second == {"zod": "3.22.4"}
