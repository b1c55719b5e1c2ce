"""Shared fixtures: a small hosts file in a temporary directory."""

import logging
from pathlib import Path

import pytest

from hostsedit.app import HostsEditor
from hostsedit.backup import BackupManager
from hostsedit.config import Config
from hostsedit.hosts_manager import EntryStore

SAMPLE_HOSTS = """\
# Static table lookup for hostnames.
127.0.0.1 localhost
::1 localhost ip6-localhost

# Local services
10.0.0.5\tnas.lan
"""


@pytest.fixture(autouse=True)
def _reset_logger():
    """Drop handlers bound to a previous test's captured stderr."""
    yield
    logger = logging.getLogger("hostsedit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def hosts_path(tmp_path: Path) -> Path:
    path = tmp_path / "etc" / "hosts"
    path.parent.mkdir()
    path.write_text(SAMPLE_HOSTS)
    return path


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("hostsedit.tests")


@pytest.fixture
def store(hosts_path: Path, logger: logging.Logger) -> EntryStore:
    return EntryStore(hosts_path, BackupManager(hosts_path, logger), logger)


@pytest.fixture
def config(hosts_path: Path, tmp_path: Path) -> Config:
    return Config(hosts_file_path=str(hosts_path), install_dir=str(tmp_path / "bin"))


@pytest.fixture
def editor(config: Config) -> HostsEditor:
    return HostsEditor(config)
