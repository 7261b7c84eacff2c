import os

from fdfind.dir_entry import DirEntry
from fdfind.filetypes import FileTypes


def _entry(path, follow=False):
    return DirEntry.normal(str(path), 1, follow)


def test_files_only(tmp_path):
    f = tmp_path / "file"
    f.write_text("x")
    d = tmp_path / "dir"
    d.mkdir()
    types = FileTypes(files=True)
    assert not types.should_ignore(_entry(f))
    assert types.should_ignore(_entry(d))


def test_directories_only(tmp_path):
    f = tmp_path / "file"
    f.write_text("x")
    types = FileTypes(directories=True)
    assert not types.should_ignore(_entry(tmp_path))
    assert types.should_ignore(_entry(f))


def test_default_ignores_everything(tmp_path):
    f = tmp_path / "file"
    f.write_text("x")
    assert FileTypes().should_ignore(_entry(f))
    assert FileTypes().should_ignore(_entry(tmp_path))


def test_missing_entry_is_ignored(tmp_path):
    types = FileTypes(files=True, directories=True, symlinks=True)
    assert types.should_ignore(_entry(tmp_path / "missing"))


def test_symlinks(tmp_path):
    target = tmp_path / "target"
    target.write_text("x")
    link = tmp_path / "link"
    os.symlink(target, link)
    assert not FileTypes(symlinks=True).should_ignore(_entry(link))
    assert FileTypes(files=True).should_ignore(_entry(link))
    assert not FileTypes(files=True).should_ignore(_entry(link, follow=True))


def test_empty_only(tmp_path):
    empty = tmp_path / "empty"
    empty.write_bytes(b"")
    full = tmp_path / "full"
    full.write_bytes(b"abc")
    empty_dir = tmp_path / "emptydir"
    empty_dir.mkdir()
    types = FileTypes(files=True, directories=True, empty_only=True)
    assert not types.should_ignore(_entry(empty))
    assert types.should_ignore(_entry(full))
    assert not types.should_ignore(_entry(empty_dir))
    assert types.should_ignore(_entry(tmp_path))


def test_executables_only(tmp_path):
    script = tmp_path / "run"
    script.write_text("#!/bin/sh\n")
    script.chmod(0o755)
    plain = tmp_path / "plain"
    plain.write_text("data")
    plain.chmod(0o644)
    types = FileTypes(files=True, executables_only=True)
    assert not types.should_ignore(_entry(script))
    assert types.should_ignore(_entry(plain))