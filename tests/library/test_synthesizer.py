"""Tests for workspace synthesis and template rendering."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from shana_library.config import ShanaSettings
from shana_library.errors import ConfigurationError
from shana_library.errors import GenerationError
from shana_library.models import ModFile
from shana_library.models import ModuleVersion
from shana_library.models import Replacement
from shana_library.models import Requirement
from shana_library.models import RunContext
from shana_library.models import WorkFile
from shana_library.modules.gomod import parse_mod_file
from shana_library.modules.gomod import parse_work_file
from shana_library.workspace import WorkspaceSynthesizer

CORE = "github.com/go-shana/core"
WORKSPACE_MODULE = "github.com/go-shana/shana-workspace/debug-server"


def make_context(project_root: Path, requires=None, work_file=None) -> RunContext:
    return RunContext(
        pkg_name="example.com/svc",
        project_root=project_root,
        core_package=CORE,
        service_pkgs=["example.com/svc/api/hello", "example.com/svc/api/world"],
        mod_file=ModFile(
            module=WORKSPACE_MODULE,
            go="1.21",
            requires=requires or [],
            replaces=[
                Replacement(old=ModuleVersion(path="example.com/svc"), new=ModuleVersion(path=str(project_root))),
            ],
        ),
        work_file=work_file,
    )


@pytest.fixture
def synthesizer(settings: ShanaSettings) -> WorkspaceSynthesizer:
    return WorkspaceSynthesizer(settings)


@pytest.mark.unit
class TestRender:
    """Test in-memory rendering."""

    def test_go_mod_with_no_requirements(self, synthesizer: WorkspaceSynthesizer) -> None:
        """Test zero requirements render an empty but valid require block."""
        files = synthesizer.render("httpjson", make_context(Path("/src/svc")))

        assert files["go.mod"] == (
            f"module {WORKSPACE_MODULE}\n"
            "\n"
            "go 1.21\n"
            "\n"
            "require (\n"
            ")\n"
            "\n"
            "replace (\n"
            "\texample.com/svc => /src/svc\n"
            ")\n"
        )
        # Reparses cleanly
        mod_file = parse_mod_file(files["go.mod"])
        assert mod_file.requires == []
        assert mod_file.replaces[0].new.path == "/src/svc"

    def test_go_mod_with_requirements_and_override(self, synthesizer: WorkspaceSynthesizer) -> None:
        """Test core requirement and local override lines."""
        context = make_context(
            Path("/src/svc"),
            requires=[Requirement(mod=ModuleVersion(path=CORE, version="v0.3.0"))],
        )
        context.mod_file.replaces.insert(
            0, Replacement(old=ModuleVersion(path=CORE), new=ModuleVersion(path="/src/core"))
        )

        go_mod = synthesizer.render("httpjson", context)["go.mod"]

        assert f"require (\n\t{CORE} v0.3.0\n)\n" in go_mod
        assert f"replace (\n\t{CORE} => /src/core\n\texample.com/svc => /src/svc\n)\n" in go_mod

    def test_paths_with_spaces_are_quoted(self, synthesizer: WorkspaceSynthesizer) -> None:
        """Test directory paths that need quoting survive a reparse."""
        go_mod = synthesizer.render("httpjson", make_context(Path("/my projects/svc")))["go.mod"]

        assert '"/my projects/svc"' in go_mod
        assert parse_mod_file(go_mod).replaces[0].new.path == "/my projects/svc"

    def test_main_go_imports_all_packages(self, synthesizer: WorkspaceSynthesizer) -> None:
        """Test the entry point blank-imports packages and sets the package prefix."""
        main_go = synthesizer.render("httpjson", make_context(Path("/src/svc")))["main.go"]

        assert "package main" in main_go
        assert f'\t"{CORE}/rpc/httpjson"\n' in main_go
        assert '\t_ "example.com/svc/api/hello"\n\t_ "example.com/svc/api/world"\n)' in main_go
        assert 'serverConfig.PkgPrefix = "example.com/svc"' in main_go
        assert 'config.New[httpjson.Config]("shana.httpjson")' in main_go

    def test_go_work_rendered_when_present(self, synthesizer: WorkspaceSynthesizer) -> None:
        """Test go.work lists member roots."""
        work_file = WorkFile(go="1.21", uses=[".", "/src/svc", "/src/core"])

        files = synthesizer.render("httpjson", make_context(Path("/src/svc"), work_file=work_file))

        assert files["go.work"].startswith("go 1.21\n\nuse (\n\t.\n\t/src/svc\n\t/src/core\n)\n")
        assert parse_work_file(files["go.work"]).uses == [".", "/src/svc", "/src/core"]

    def test_go_work_omitted_without_work_file(self, synthesizer: WorkspaceSynthesizer) -> None:
        """Test no go.work for toolchains without workspace support."""
        files = synthesizer.render("httpjson", make_context(Path("/src/svc")))

        assert sorted(files) == ["go.mod", "main.go"]

    def test_unsupported_protocol(self, synthesizer: WorkspaceSynthesizer) -> None:
        """Test unknown server protocols are rejected."""
        with pytest.raises(ConfigurationError, match="unsupported server-proto 'grpc'"):
            synthesizer.render("grpc", make_context(Path("/src/svc")))


@pytest.mark.unit
class TestMaterialize:
    """Test workspace directory lifecycle."""

    def test_creates_files_and_removes_directory(self, synthesizer: WorkspaceSynthesizer, go_project: Path) -> None:
        """Test files exist inside the context and the directory is gone after."""
        with synthesizer.materialize("httpjson", make_context(go_project)) as workspace:
            assert workspace.path.is_dir()
            assert workspace.path.name.startswith("shana-workspace-")
            assert (workspace.path / "go.mod").is_file()
            assert (workspace.path / "main.go").is_file()
            assert sorted(workspace.files) == ["go.mod", "main.go"]

        assert not workspace.path.exists()

    def test_links_runtime_config(self, synthesizer: WorkspaceSynthesizer, go_project: Path) -> None:
        """Test shana.yaml is hard linked, not copied."""
        config_file = go_project / "shana.yaml"
        config_file.write_text("shana:\n  httpjson:\n    addr: :9696\n")

        with synthesizer.materialize("httpjson", make_context(go_project)) as workspace:
            linked = workspace.path / "shana.yaml"
            assert linked.read_text() == config_file.read_text()
            assert linked.stat().st_ino == config_file.stat().st_ino
            assert "shana.yaml" in workspace.files

        assert config_file.exists()

    def test_link_failure_is_fatal(self, synthesizer: WorkspaceSynthesizer, go_project: Path) -> None:
        """Test a failing hard link aborts and still removes the workspace."""
        (go_project / "shana.yaml").write_text("shana: {}\n")
        created = []
        real_mkdtemp = tempfile.mkdtemp

        def tracking_mkdtemp(*args, **kwargs):
            path = real_mkdtemp(*args, **kwargs)
            created.append(Path(path))
            return path

        with (
            patch("tempfile.mkdtemp", side_effect=tracking_mkdtemp),
            patch.object(Path, "hardlink_to", side_effect=OSError("cross-device link")),
            pytest.raises(GenerationError, match="cross-device link"),
        ):
            with synthesizer.materialize("httpjson", make_context(go_project)):
                pytest.fail("workspace should not be yielded")

        assert len(created) == 1
        assert not created[0].exists()

    def test_removed_when_body_raises(self, synthesizer: WorkspaceSynthesizer, go_project: Path) -> None:
        """Test cleanup on exceptions raised by the caller."""
        with pytest.raises(RuntimeError):
            with synthesizer.materialize("httpjson", make_context(go_project)) as workspace:
                raise RuntimeError("boom")

        assert not workspace.path.exists()

    def test_unsupported_protocol_creates_nothing(self, synthesizer: WorkspaceSynthesizer, go_project: Path) -> None:
        """Test no directory is created for unknown protocols."""
        with patch("tempfile.mkdtemp") as mock_mkdtemp:
            with pytest.raises(ConfigurationError):
                with synthesizer.materialize("grpc", make_context(go_project)):
                    pass

        mock_mkdtemp.assert_not_called()

    def test_each_materialize_is_independent(self, synthesizer: WorkspaceSynthesizer, go_project: Path) -> None:
        """Test two workspaces never share a directory."""
        context = make_context(go_project)
        with synthesizer.materialize("httpjson", context) as first:
            pass
        with synthesizer.materialize("httpjson", context) as second:
            assert not first.path.exists()

        assert first.path != second.path
        assert not second.path.exists()
