"""Shared test fixtures."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dev_kit.filesystem import FileOperations
from dev_kit.install import Installer
from dev_kit.rollback import RollbackManager
from dev_kit.validator import SkillValidator


@pytest.fixture
def temp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Override home directory for testing."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    """Directory for rollback backups."""
    return tmp_path / "backups"


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    """An existing, empty agent skill directory."""
    target = tmp_path / "skills"
    target.mkdir()
    return target


# ============================================================================
# Sample Content Fixtures
# ============================================================================


@pytest.fixture
def sample_skill_content() -> str:
    """Sample SKILL.md content."""
    return """---
name: demo
description: Demo skill
---
Body
"""


@pytest.fixture
def sample_skill_dir(tmp_path: Path, sample_skill_content: str) -> Path:
    """Create a skill directory with SKILL.md and a supporting script."""
    skill_dir = tmp_path / "source" / "demo"
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text(sample_skill_content)
    (skill_dir / "scripts").mkdir()
    (skill_dir / "scripts" / "run.sh").write_text("echo demo\n")
    return skill_dir


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def filesystem() -> FileOperations:
    """Real file operations."""
    return FileOperations(logger=logging.getLogger("tests.fs"))


@pytest.fixture
def rollbacks(filesystem: FileOperations, backup_root: Path) -> RollbackManager:
    """Rollback manager writing backups under tmp_path."""
    return RollbackManager(filesystem, backup_root)


@pytest.fixture
def installer(filesystem: FileOperations, rollbacks: RollbackManager) -> Installer:
    """Installer wired to real file operations."""
    return Installer(
        validator=SkillValidator(filesystem),
        filesystem=filesystem,
        rollbacks=rollbacks,
        logger=logging.getLogger("tests.installer"),
    )


# ============================================================================
# Mock FileSystem Fixture
# ============================================================================


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock tracks all filesystem operations without touching real files.
    """
    fs = MagicMock()
    fs.path_exists.return_value = False
    fs.is_dir.return_value = False
    fs.read_text.return_value = ""
    fs.list_directories.return_value = []
    return fs
