"""Tests for the directory snapshot."""

from pathlib import Path

from vibesh.context import directory_context


def make_tree(root: Path, dirs: int, files: int) -> None:
    for i in range(dirs):
        (root / f"dir{i:02d}").mkdir()
    for i in range(files):
        (root / f"file{i:02d}.txt").write_text("x" * i)


class TestDirectoryContext:
    def test_small_directory(self, tmp_path: Path):
        make_tree(tmp_path, dirs=1, files=2)

        lines = directory_context(tmp_path).splitlines()

        assert lines == [
            f"Current directory: {tmp_path.resolve()}",
            "",
            "Contents:",
            "- [DIR] dir00",
            "- [FILE] file00.txt (0 bytes)",
            "- [FILE] file01.txt (1 bytes)",
            "",
            "Summary: 1 directories, 2 files",
        ]

    def test_file_listing_is_capped(self, tmp_path: Path):
        make_tree(tmp_path, dirs=2, files=25)

        text = directory_context(tmp_path)

        assert text.count("[FILE]") == 20
        assert text.count("[DIR]") == 2
        assert "- [FILE] file19.txt (19 bytes)" in text
        assert "file20.txt" not in text
        assert "... and 5 more files" in text
        assert "Summary: 2 directories, 25 files" in text

    def test_custom_cap(self, tmp_path: Path):
        make_tree(tmp_path, dirs=0, files=3)

        text = directory_context(tmp_path, max_files=1)

        assert text.count("[FILE]") == 1
        assert "... and 2 more files" in text

    def test_empty_directory(self, tmp_path: Path):
        text = directory_context(tmp_path)

        assert text.endswith("Summary: 0 directories, 0 files\n")

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert directory_context().startswith(f"Current directory: {Path.cwd()}")

    def test_unreadable_directory(self, tmp_path: Path):
        missing = tmp_path / "missing"

        text = directory_context(missing)

        assert text == f"Current directory: {missing.resolve()}\nError listing files"
