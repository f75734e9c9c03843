"""
Shared pytest fixtures for the shana test suite.

Provides fixtures for:
- Sample Go projects on disk
- Runner settings isolated from the user's environment
- A fake go toolchain standing in for psutil.Popen
"""

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from shana_library.config import ShanaSettings

GO_MOD = """module example.com/svc

go 1.21

require (
\tgithub.com/go-shana/core v0.3.0
\tgithub.com/stretchr/testify v1.8.4 // indirect
)

replace github.com/go-shana/core => ../core
"""


def write_files(root: Path, files: dict[str, str]) -> None:
    """Create files (and parent directories) under root."""
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


@pytest.fixture
def go_project(tmp_path: Path) -> Path:
    """Create a Go service project with a local core checkout beside it.

    Layout:
        svc/go.mod                      module example.com/svc
        svc/api/hello/hello.go          package
        svc/api/hello/hello_test.go
        svc/api/world/world.go          package
        svc/internal/db/db.go           skipped (internal)
        svc/testonly/only_test.go       skipped (tests only)
        svc/docs/README.md              skipped (no Go source)
        core/go.mod                     module github.com/go-shana/core
    """
    project_root = tmp_path / "svc"
    write_files(
        project_root,
        {
            "go.mod": GO_MOD,
            "api/hello/hello.go": "package hello\n",
            "api/hello/hello_test.go": "package hello\n",
            "api/world/world.go": "package world\n",
            "internal/db/db.go": "package db\n",
            "testonly/only_test.go": "package testonly\n",
            "docs/README.md": "# docs\n",
        },
    )
    write_files(tmp_path / "core", {"go.mod": "module github.com/go-shana/core\n\ngo 1.21\n"})
    return project_root


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> ShanaSettings:
    """Default settings, unaffected by SHANA_* variables of the test runner."""
    monkeypatch.setenv("SHANA_HOME", str(tmp_path / "shana-home"))
    for var in ("SHANA_GO_BINARY", "SHANA_CORE_PACKAGE", "SHANA_SKIP_DIRS", "SHANA_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return ShanaSettings()


class FakeProcess:
    """Stand-in for psutil.Popen that never spawns anything."""

    def __init__(
        self,
        args: list[str],
        cwd: str | None,
        returncode: int,
        on_wait: Callable[["FakeProcess"], None] | None,
        block: bool,
    ) -> None:
        self.args = args
        self.cwd = cwd
        self.pid = 4242
        self.returncode = returncode
        self.on_wait = on_wait
        self.block = block
        self.terminate_calls = 0
        self.terminated = threading.Event()

    def wait(self) -> int:
        if self.on_wait is not None:
            self.on_wait(self)
        if self.block and not self.terminated.wait(timeout=5):
            raise AssertionError(f"{self.args} was never terminated")
        return self.returncode

    def terminate(self) -> None:
        self.terminate_calls += 1
        self.terminated.set()


class FakeToolchain:
    """psutil.Popen replacement recording every stage that gets spawned.

    Behaviour is configured per stage ("tidy", "compile", "execute"):
        returncodes: exit status returned by wait()
        hooks: called at the start of wait()
        blocking: wait() blocks until terminate() is called
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.processes: dict[str, FakeProcess] = {}
        self.returncodes: dict[str, int] = {}
        self.hooks: dict[str, Callable[[FakeProcess], None]] = {}
        self.blocking: set[str] = set()
        self.spawn_error: OSError | None = None

    @staticmethod
    def stage_of(args: list[str]) -> str:
        if args[1:3] == ["mod", "tidy"]:
            return "tidy"
        if args[1:2] == ["build"]:
            return "compile"
        return "execute"

    @property
    def stages(self) -> list[str]:
        return [call["stage"] for call in self.calls]

    def __call__(self, args: list[str], cwd: str | None = None, **kwargs: Any) -> FakeProcess:
        if self.spawn_error is not None:
            raise self.spawn_error

        stage = self.stage_of(args)
        workspace = Path(cwd) if cwd else None
        self.calls.append(
            {
                "stage": stage,
                "args": list(args),
                "cwd": cwd,
                "workspace_files": sorted(p.name for p in workspace.iterdir()) if workspace else [],
            }
        )
        process = FakeProcess(
            args,
            cwd,
            returncode=self.returncodes.get(stage, 0),
            on_wait=self.hooks.get(stage),
            block=stage in self.blocking,
        )
        self.processes[stage] = process
        return process


@pytest.fixture
def toolchain() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture
def write_tree() -> Callable[[Path, dict[str, str]], None]:
    """Expose write_files to tests."""
    return write_files
