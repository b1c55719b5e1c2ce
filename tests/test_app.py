"""Tests for the editor: validation, permissions, removal precedence and batch.

Validation always happens before the file is touched, and a missing
write permission stops a command before any backup or mutation.
"""

from pathlib import Path

import pytest

from hostsedit.app import HostsEditor
from hostsedit.config import Config
from hostsedit.errors import (
    DuplicateEntry,
    EmptyField,
    FileNotFound,
    InvalidAddress,
    InvalidDomain,
    NotFound,
    PermissionDenied,
)

from conftest import SAMPLE_HOSTS


def _deny_writes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("hostsedit.app.os.access", lambda path, mode: False)


class TestSetup:
    """Verify construction from configuration."""

    def test_invalid_log_level(self, hosts_path: Path) -> None:
        """A bad LOG_LEVEL is rejected up front."""
        with pytest.raises(ValueError):
            HostsEditor(Config(hosts_file_path=str(hosts_path), log_level="LOUD"))

    def test_logger_handlers_not_duplicated(self, config: Config) -> None:
        """Building two editors keeps a single handler."""
        first = HostsEditor(config)
        second = HostsEditor(config)
        assert first.logger is second.logger
        assert len(second.logger.handlers) == 1


class TestAdd:
    """Verify input validation for new entries."""

    def test_add(self, editor: HostsEditor, hosts_path: Path) -> None:
        """A valid pair is appended."""
        entry = editor.add("1.1.1.1", "test.local")
        assert entry.to_hosts_line() == "1.1.1.1 test.local"
        assert hosts_path.read_text().endswith("1.1.1.1 test.local\n")

    def test_domain_whitespace_collapsed(self, editor: HostsEditor, hosts_path: Path) -> None:
        """Runs of whitespace in the domain field become single spaces."""
        editor.add("1.1.1.3", "  multiple.local    domains.local ")
        assert "1.1.1.3 multiple.local domains.local\n" in hosts_path.read_text()

    def test_ipv6(self, editor: HostsEditor, hosts_path: Path) -> None:
        """IPv6 literals are accepted as given."""
        editor.add("2001:DB8::1:CAFE", "mixed.ipv6.test")
        assert "2001:DB8::1:CAFE mixed.ipv6.test" in hosts_path.read_text()

    @pytest.mark.parametrize(
        "address, domains, error",
        [
            ("1.1.1.1", "", EmptyField),
            ("1.1.1.1", "   ", EmptyField),
            ("", "test.local", EmptyField),
            ("256.256.256.256", "invalid.local", InvalidAddress),
            ("001.002.003.004", "test.local", InvalidAddress),
            ("1.1.1.1 ", "test.local", InvalidAddress),
            ("2001::db8::1", "ipv6invalid.test", InvalidAddress),
            ("1.1.1.1", "invalid..domain", InvalidDomain),
            ("1.1.1.1", "test@#$.local", InvalidDomain),
        ],
    )
    def test_rejected_before_mutation(
        self, editor: HostsEditor, hosts_path: Path, address: str, domains: str, error: type
    ) -> None:
        """Bad input raises and leaves no trace on disk."""
        with pytest.raises(error):
            editor.add(address, domains)
        assert hosts_path.read_text() == SAMPLE_HOSTS
        assert editor.backup_manager.list_backups() == []

    def test_duplicate(self, editor: HostsEditor) -> None:
        """The second identical add fails."""
        editor.add("1.1.1.1", "test.local")
        with pytest.raises(DuplicateEntry):
            editor.add("1.1.1.1", "test.local")

    def test_permission_denied(self, editor: HostsEditor, hosts_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without write access nothing is attempted."""
        _deny_writes(monkeypatch)
        with pytest.raises(PermissionDenied):
            editor.add("1.1.1.1", "test.local")
        assert hosts_path.read_text() == SAMPLE_HOSTS
        assert editor.backup_manager.list_backups() == []

    def test_backup_matches_pre_mutation_content(self, editor: HostsEditor) -> None:
        """After a successful add the newest backup is the old file."""
        editor.add("4.4.4.4", "backup.test")
        backups = editor.backup_manager.list_backups()
        assert backups[-1].read_text() == SAMPLE_HOSTS


class TestRemove:
    """Verify how removal targets are interpreted."""

    @pytest.mark.parametrize(
        "target, kind",
        [
            ("1", "position"),
            ("007", "position"),
            ("1.1.1.1", "address"),
            ("::1", "address"),
            ("2001:db8::1", "address"),
            ("example.com", "domain"),
            ("123abc", "domain"),
            ("001.002.003.004", "domain"),
        ],
    )
    def test_classify_target(self, target: str, kind: str) -> None:
        """Digits mean an id, then a valid address, then a domain."""
        assert HostsEditor.classify_target(target) == kind

    def test_remove_by_position(self, editor: HostsEditor) -> None:
        """An all-digit target removes that position."""
        result = editor.remove("3")
        assert result.kind == "position"
        assert result.removed == ["10.0.0.5 nas.lan"]
        assert [line for _, line in editor.list_entries()] == [
            "127.0.0.1 localhost",
            "::1 localhost ip6-localhost",
        ]

    def test_remove_by_address(self, editor: HostsEditor) -> None:
        """A valid address removes lines starting with it."""
        editor.add("1.1.1.3", "test3.local")
        result = editor.remove("1.1.1.3")
        assert result.kind == "address"
        assert result.removed == ["1.1.1.3 test3.local"]

    def test_remove_by_domain(self, editor: HostsEditor, hosts_path: Path) -> None:
        """Anything else is matched against line endings."""
        result = editor.remove("nas.lan")
        assert result.kind == "domain"
        assert "nas.lan" not in hosts_path.read_text()

    def test_numeric_domain_unreachable_by_name(self, editor: HostsEditor, hosts_path: Path) -> None:
        """An all-digit target is always an id, never a domain name."""
        hosts_path.write_text("10.0.0.9 1234\n")
        with pytest.raises(NotFound):
            editor.remove("1234")
        assert hosts_path.read_text() == "10.0.0.9 1234\n"

    def test_invalid_position(self, editor: HostsEditor) -> None:
        """Id zero is never valid."""
        with pytest.raises(NotFound):
            editor.remove("0")

    def test_position_with_malformed_address(self, editor: HostsEditor, hosts_path: Path) -> None:
        """A line whose address is not an IP cannot be removed by id."""
        hosts_path.write_text("not-an-ip somehost\n")
        with pytest.raises(InvalidAddress):
            editor.remove("1")
        assert hosts_path.read_text() == "not-an-ip somehost\n"

    def test_empty_target(self, editor: HostsEditor) -> None:
        """An empty target is refused."""
        with pytest.raises(EmptyField):
            editor.remove("")

    def test_permission_denied(self, editor: HostsEditor, monkeypatch: pytest.MonkeyPatch) -> None:
        """Removal also needs write access."""
        _deny_writes(monkeypatch)
        with pytest.raises(PermissionDenied):
            editor.remove("nas.lan")


class TestSearch:
    """Verify search passes through to the store."""

    def test_search(self, editor: HostsEditor) -> None:
        """Matches come back as raw lines."""
        assert editor.search("LOCALHOST") == ["127.0.0.1 localhost", "::1 localhost ip6-localhost"]


class TestBatch:
    """Verify batch adds with per-line failure accounting."""

    def test_one_good_one_bad(self, editor: HostsEditor, hosts_path: Path, tmp_path: Path) -> None:
        """A malformed line is counted and skipped; the good one lands."""
        source = tmp_path / "batch.txt"
        source.write_text("8.8.8.8 batch1.test\n9.9.9.9\n")

        result = editor.batch(str(source))

        assert (result.success, result.failed) == (1, 1)
        assert result.failures[0][0] == "9.9.9.9"
        content = hosts_path.read_text()
        assert "8.8.8.8 batch1.test" in content
        assert "9.9.9.9" not in content

    def test_skips_comments_and_blank_lines(self, editor: HostsEditor, tmp_path: Path) -> None:
        """Only entry lines are attempted."""
        source = tmp_path / "batch.txt"
        source.write_text("# header\n\n   \n8.8.8.8 batch1.test\n9.9.9.9   batch2.test  extra.test")

        result = editor.batch(str(source))

        assert (result.success, result.failed) == (2, 0)
        assert "9.9.9.9 batch2.test extra.test" in editor.search("batch2")

    def test_duplicates_counted_as_failures(self, editor: HostsEditor, tmp_path: Path) -> None:
        """Existing entries fail without stopping the batch."""
        source = tmp_path / "batch.txt"
        source.write_text("10.0.0.5 nas.lan\n8.8.8.8 batch1.test\n")

        result = editor.batch(str(source))

        assert (result.success, result.failed) == (1, 1)

    def test_missing_file(self, editor: HostsEditor, tmp_path: Path) -> None:
        """A missing source file is an error."""
        with pytest.raises(FileNotFound):
            editor.batch(str(tmp_path / "nonexistent.txt"))

    def test_single_backup_holds_pre_batch_content(self, editor: HostsEditor, tmp_path: Path) -> None:
        """All lines are written in one transaction behind one snapshot."""
        source = tmp_path / "batch.txt"
        source.write_text("8.8.8.8 batch1.test\n8.8.4.4 batch2.test\n1.1.1.1 batch3.test\n")

        result = editor.batch(str(source))

        assert result.success == 3
        backups = editor.backup_manager.list_backups()
        assert len(backups) == 1
        assert backups[0].read_text() == SAMPLE_HOSTS

    def test_duplicate_within_batch(self, editor: HostsEditor, hosts_path: Path, tmp_path: Path) -> None:
        """A line repeated in the same batch is rejected the second time."""
        source = tmp_path / "batch.txt"
        source.write_text("8.8.8.8 batch1.test\n8.8.8.8 batch1.test\n")

        result = editor.batch(str(source))

        assert (result.success, result.failed) == (1, 1)
        assert hosts_path.read_text().count("8.8.8.8 batch1.test") == 1

    def test_all_lines_failing_leaves_file_alone(self, editor: HostsEditor, hosts_path: Path, tmp_path: Path) -> None:
        """Nothing to add means no backup and no rewrite."""
        source = tmp_path / "batch.txt"
        source.write_text("9.9.9.9\n300.1.1.1 bad.test\n")

        result = editor.batch(str(source))

        assert (result.success, result.failed) == (0, 2)
        assert hosts_path.read_text() == SAMPLE_HOSTS
        assert editor.backup_manager.list_backups() == []

    def test_undecodable_bytes_fail_that_line_only(self, editor: HostsEditor, hosts_path: Path, tmp_path: Path) -> None:
        """Bytes that are not UTF-8 make their line invalid, not the batch."""
        source = tmp_path / "batch.txt"
        source.write_bytes(b"8.8.8.8 ok.test\n\xff\xfe bad\n")

        result = editor.batch(str(source))

        assert (result.success, result.failed) == (1, 1)
        assert "8.8.8.8 ok.test" in hosts_path.read_text()

    def test_unreadable_file(self, editor: HostsEditor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A batch file that cannot be opened raises PermissionDenied."""
        source = tmp_path / "batch.txt"
        source.write_text("8.8.8.8 batch1.test\n")

        def _refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("hostsedit.app.open", _refuse, raising=False)
        with pytest.raises(PermissionDenied):
            editor.batch(str(source))
