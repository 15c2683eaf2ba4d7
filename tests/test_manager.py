"""Tests for the copy orchestration."""

from __future__ import annotations

import hashlib
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import FailingFormatter, FakeResolver, PassthroughFormatter, write_package

from go_copystd import (
    CopyConfig,
    CopyManager,
    FormatError,
    GoImportsFormatter,
    PackageDescriptor,
    PackageState,
    ResolverError,
)


def tree_checksums(root: Path) -> dict[str, str]:
    """Map every file under root to the sha256 of its content."""
    return {
        path.relative_to(root).as_posix(): hashlib.sha256(path.read_bytes()).hexdigest()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def config(src_root: Path, dst_root: Path) -> CopyConfig:
    return CopyConfig(module="example.com/x", src_root=src_root, dst_root=dst_root)


class TestCopyManager:
    """Tests for CopyManager class."""

    def test_init_missing_src(self, tmp_path: Path) -> None:
        config = CopyConfig(module="example.com/x", src_root=tmp_path / "nope")

        with pytest.raises(ValueError, match="Source directory not found"):
            CopyManager(config)

    def test_init_src_is_file(self, tmp_path: Path) -> None:
        src = tmp_path / "file"
        src.write_text("")

        with pytest.raises(ValueError, match="not a directory"):
            CopyManager(CopyConfig(module="example.com/x", src_root=src))

    def test_default_collaborators(self, config: CopyConfig) -> None:
        manager = CopyManager(config)

        assert isinstance(manager.formatter, GoImportsFormatter)
        assert manager.formatter.local_prefix == "example.com/x"
        assert manager.resolver.src_root == config.src_root

    def test_end_to_end(
        self,
        config: CopyConfig,
        foo_bar_packages: list[PackageDescriptor],
        dst_root: Path,
    ) -> None:
        """Test copying internal/foo and its restricted dependency internal/bar."""
        manager = CopyManager(
            config, resolver=FakeResolver(foo_bar_packages), formatter=PassthroughFormatter()
        )

        outcomes = manager.run(["internal/foo"])

        assert [(o.import_path, o.state) for o in outcomes] == [
            ("internal/foo", PackageState.REWRITTEN),
            ("internal/bar", PackageState.REWRITTEN),
        ]
        foo = (dst_root / "foo" / "a.go").read_text(encoding="utf-8")
        bar = (dst_root / "bar" / "a.go").read_text(encoding="utf-8")
        assert '"example.com/x/bar"' in foo
        assert '"internal/bar"' not in foo
        assert '"fmt"' in foo
        assert '"errors"' in bar
        assert outcomes[0].target_dir == dst_root / "foo"
        assert outcomes[0].written_files == [dst_root / "foo" / "a.go"]

    def test_rerun_performs_no_writes(
        self,
        config: CopyConfig,
        foo_bar_packages: list[PackageDescriptor],
        dst_root: Path,
    ) -> None:
        """Test that a second run leaves populated output untouched."""
        resolver = FakeResolver(foo_bar_packages)
        CopyManager(config, resolver=resolver, formatter=PassthroughFormatter()).run(
            ["internal/foo"]
        )
        before = tree_checksums(dst_root)

        formatter = PassthroughFormatter()
        outcomes = CopyManager(config, resolver=resolver, formatter=formatter).run(
            ["internal/foo"]
        )

        assert tree_checksums(dst_root) == before
        assert all(o.state is PackageState.SKIPPED for o in outcomes)
        assert formatter.calls == []

    def test_rerun_with_overwrite_writes_nothing_new(
        self,
        src_root: Path,
        dst_root: Path,
        foo_bar_packages: list[PackageDescriptor],
    ) -> None:
        """Test file-level idempotence when package-level skipping is off."""
        config = CopyConfig(
            module="example.com/x", src_root=src_root, dst_root=dst_root, overwrite=True
        )
        resolver = FakeResolver(foo_bar_packages)
        CopyManager(config, resolver=resolver, formatter=PassthroughFormatter()).run(
            ["internal/foo"]
        )
        before = tree_checksums(dst_root)

        outcomes = CopyManager(config, resolver=resolver, formatter=PassthroughFormatter()).run(
            ["internal/foo"]
        )

        assert tree_checksums(dst_root) == before
        assert all(o.state is PackageState.REWRITTEN for o in outcomes)
        assert all(o.written_files == [] for o in outcomes)

    def test_sentinel_never_copied(
        self, config: CopyConfig, src_root: Path, dst_root: Path
    ) -> None:
        pkg = write_package(
            src_root,
            "cmd/internal/buildcfg",
            {"cfg.go": "package buildcfg\n", "zbootstrap.go": "package buildcfg\n"},
        )
        manager = CopyManager(config, resolver=FakeResolver([pkg]), formatter=PassthroughFormatter())

        manager.run(["cmd/internal/buildcfg"])

        assert (dst_root / "buildcfg" / "cfg.go").exists()
        assert not list(dst_root.rglob("zbootstrap.go"))

    def test_shared_dependency_across_roots(
        self, config: CopyConfig, src_root: Path, dst_root: Path
    ) -> None:
        """Test that a package reached from two roots is written once."""
        shared = write_package(src_root, "internal/shared", {"s.go": "package shared\n"})
        a = write_package(
            src_root, "internal/a", {"a.go": "package a\n"}, imports=["internal/shared"]
        )
        b = write_package(
            src_root, "internal/b", {"b.go": "package b\n"}, imports=["internal/shared"]
        )
        manager = CopyManager(
            config, resolver=FakeResolver([shared, a, b]), formatter=PassthroughFormatter()
        )

        outcomes = manager.run(["internal/a", "internal/b"])

        states = {(o.import_path, o.state) for o in outcomes}
        assert ("internal/shared", PackageState.REWRITTEN) in states
        assert ("internal/shared", PackageState.SKIPPED) in states
        assert sorted(p.name for p in dst_root.iterdir()) == ["a", "b", "shared"]

    def test_unmapped_package_skipped(
        self, src_root: Path, dst_root: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that a restricted package without a rewrite rule is not copied."""
        config = CopyConfig(
            module="example.com/x",
            src_root=src_root,
            dst_root=dst_root,
            restricted_prefixes=("internal", "vendor/internal"),
        )
        a = write_package(
            src_root, "internal/a", {"a.go": "package a\n"}, imports=["vendor/internal/v"]
        )
        v = write_package(src_root, "vendor/internal/v", {"v.go": "package v\n"})
        manager = CopyManager(config, resolver=FakeResolver([a, v]), formatter=PassthroughFormatter())

        outcomes = manager.run(["internal/a"])

        assert outcomes[1].import_path == "vendor/internal/v"
        assert outcomes[1].state is PackageState.SKIPPED
        assert outcomes[1].target_dir is None
        assert "no rewrite rule" in capsys.readouterr().err

    def test_format_failure_aborts_run(
        self, config: CopyConfig, foo_bar_packages: list[PackageDescriptor]
    ) -> None:
        manager = CopyManager(
            config, resolver=FakeResolver(foo_bar_packages), formatter=FailingFormatter()
        )

        with pytest.raises(FormatError):
            manager.run(["internal/foo", "internal/bar"])

        assert len(manager.outcomes) == 1
        assert manager.outcomes[0].state is PackageState.FAILED
        assert "expected declaration" in manager.outcomes[0].reason

    def test_resolver_failure_aborts_run(self, config: CopyConfig) -> None:
        class BrokenResolver(FakeResolver):
            def resolve(self, *patterns: str) -> list[PackageDescriptor]:
                raise ResolverError("go command not found")

        manager = CopyManager(config, resolver=BrokenResolver(), formatter=PassthroughFormatter())

        with pytest.raises(ResolverError):
            manager.run(["internal/foo"])

        assert manager.outcomes == []

    def test_goimports_checked_before_run(self, config: CopyConfig) -> None:
        manager = CopyManager(config, resolver=FakeResolver())

        with patch.object(GoImportsFormatter, "is_installed", return_value=False):
            with pytest.raises(FormatError, match="goimports is required"):
                manager.run(["internal/foo"])

    def test_analyze_does_not_write(
        self,
        config: CopyConfig,
        foo_bar_packages: list[PackageDescriptor],
        dst_root: Path,
    ) -> None:
        formatter = PassthroughFormatter()
        manager = CopyManager(config, resolver=FakeResolver(foo_bar_packages), formatter=formatter)

        destinations = manager.analyze(["internal/foo"])

        assert destinations == {
            "internal/foo": dst_root / "foo",
            "internal/bar": dst_root / "bar",
        }
        assert list(dst_root.iterdir()) == []
        assert formatter.calls == []
