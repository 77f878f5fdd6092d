"""Tests for the command-line surface (modforge.cli)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from modforge.cli import build_parser, main, request_from_args


class TestParser:
    @pytest.mark.unit
    def test_minimal(self):
        args = build_parser().parse_args(["infra", "cache"])
        assert request_from_args(args) == {
            "name": "cache",
            "library_kind": "infra",
            "include_cqrs": False,
            "consolidates_providers": False,
        }

    @pytest.mark.unit
    def test_flags(self):
        args = build_parser().parse_args(
            [
                "feature",
                "billing",
                "--directory",
                "apps/shop",
                "--no-client-server",
                "--edge",
                "--cqrs",
                "--consolidates-providers",
                "--providers",
                "stripe,paypal",
                "--sub-modules",
                "refunds",
                "--platform",
                "browser",
                "--tags",
                "team:pay",
            ]
        )
        raw = request_from_args(args)
        assert raw["parent_directory"] == "apps/shop"
        assert raw["include_client_server_split"] is False
        assert raw["include_edge_surface"] is True
        assert raw["include_cqrs"] is True
        assert raw["consolidates_providers"] is True
        assert raw["providers"] == "stripe,paypal"
        assert raw["sub_modules"] == "refunds"
        assert raw["platform"] == "browser"
        assert raw["tags"] == "team:pay"

    @pytest.mark.unit
    def test_client_server_unset_is_omitted(self):
        args = build_parser().parse_args(["infra", "widget"])
        assert "include_client_server_split" not in request_from_args(args)

    @pytest.mark.unit
    def test_unknown_kind_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["service", "cache"])


class TestMain:
    @pytest.mark.integration
    def test_writes_files(self, tmp_workspace: Path, capsys):
        assert main(["infra", "cache", "--workspace", str(tmp_workspace)]) == 0
        root = tmp_workspace / "libs" / "infra" / "cache"
        assert (root / "README.md").is_file()
        assert (root / "src" / "lib" / "layers.ts").is_file()
        assert (root / "project.json").is_file()
        assert "infra-cache" in capsys.readouterr().out

    @pytest.mark.integration
    def test_dry_run_writes_nothing(self, tmp_workspace: Path, capsys):
        assert main(["infra", "cache", "--dry-run", "--workspace", str(tmp_workspace)]) == 0
        assert list(tmp_workspace.iterdir()) == []
        assert "Dry run" in capsys.readouterr().out

    @pytest.mark.integration
    def test_atomic_matches_direct(self, tmp_path: Path):
        direct, atomic = tmp_path / "direct", tmp_path / "atomic"
        args = ["feature", "payment", "--sub-modules", "refunds"]
        assert main([*args, "--workspace", str(direct)]) == 0
        assert main([*args, "--atomic", "--workspace", str(atomic)]) == 0

        def snapshot(base: Path) -> dict[str, str]:
            return {
                p.relative_to(base).as_posix(): p.read_text(encoding="utf-8")
                for p in base.rglob("*")
                if p.is_file()
            }

        assert snapshot(direct) == snapshot(atomic)

    @pytest.mark.integration
    def test_json_output(self, tmp_workspace: Path, capsys):
        assert main(["infra", "queue", "--json", "--workspace", str(tmp_workspace)]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["ok"] is True
        assert payload["result"]["project_name"] == "infra-queue"
        assert list(tmp_workspace.iterdir()) == []

    @pytest.mark.integration
    def test_json_response_includes_registration_files(self, tmp_workspace: Path, capsys):
        assert main(["infra", "queue", "--json", "--workspace", str(tmp_workspace)]) == 0
        payload = json.loads(capsys.readouterr().out)
        paths = {f["path"] for f in payload["response"]["files"]}
        assert "libs/infra/queue/project.json" in paths
        assert "libs/infra/queue/package.json" in paths
        assert "libs/infra/queue/project.json" in payload["result"]["files_written"]

    @pytest.mark.integration
    def test_json_failure(self, capsys):
        assert main(["infra", "  ", "--json"]) == 1
        payload = json.loads(capsys.readouterr().out)
        assert payload["ok"] is False
        assert payload["error"]["kind"] == "ValidationError"

    @pytest.mark.integration
    def test_validation_error_exit_code(self, tmp_workspace: Path, capsys):
        assert main(["infra", "  ", "--workspace", str(tmp_workspace)]) == 1
        assert "ValidationError" in capsys.readouterr().err
        assert list(tmp_workspace.iterdir()) == []

    @pytest.mark.integration
    def test_storage_error_exit_code(self, tmp_workspace: Path, capsys):
        (tmp_workspace / "libs").write_text("not a directory", encoding="utf-8")
        assert main(["infra", "cache", "--workspace", str(tmp_workspace)]) == 1
        assert "StorageError" in capsys.readouterr().err

    @pytest.mark.integration
    def test_config_file(self, tmp_path: Path, tmp_workspace: Path):
        config_path = tmp_path / "modforge.yaml"
        config_path.write_text(
            f"package_scope: '@acme'\nworkspace_root: {tmp_workspace.as_posix()}\n", encoding="utf-8"
        )
        assert main(["infra", "auth", "--config", str(config_path)]) == 0
        package = json.loads((tmp_workspace / "libs/infra/auth/package.json").read_text(encoding="utf-8"))
        assert package["name"] == "@acme/infra-auth"

    @pytest.mark.integration
    def test_missing_config_file(self, tmp_path: Path, capsys):
        assert main(["infra", "auth", "--config", str(tmp_path / "absent.json")]) == 1
        assert "configuration" in capsys.readouterr().err
