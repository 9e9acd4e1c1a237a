"""Directory snapshot handed to the model and shown by the ``context`` built-in."""

from pathlib import Path

from vibesh.constants import CONTEXT_MAX_FILES


def directory_context(path: str | Path | None = None, max_files: int = CONTEXT_MAX_FILES) -> str:
    """Describe the contents of a directory as plain text.

    Lists every subdirectory and up to ``max_files`` files with their
    sizes, followed by a truncation note and a summary line.

    Args:
        path: Directory to describe (defaults to the current directory)
        max_files: Maximum number of files listed individually

    Returns:
        Multi-line snapshot text
    """
    try:
        cwd = Path(path).resolve() if path is not None else Path.cwd()
    except OSError:
        return "Error getting current directory"

    try:
        entries = sorted(cwd.iterdir(), key=lambda p: p.name)
    except OSError:
        return f"Current directory: {cwd}\nError listing files"

    lines = [f"Current directory: {cwd}", "", "Contents:"]
    dir_count = 0
    file_count = 0

    for entry in entries:
        if entry.is_dir():
            dir_count += 1
            lines.append(f"- [DIR] {entry.name}")
            continue

        file_count += 1
        if file_count <= max_files:
            try:
                size = entry.stat().st_size
            except OSError:
                # Dangling symlink or a file removed while listing
                size = 0
            lines.append(f"- [FILE] {entry.name} ({size} bytes)")

    if file_count > max_files:
        lines.append(f"... and {file_count - max_files} more files")

    lines.append("")
    lines.append(f"Summary: {dir_count} directories, {file_count} files")
    return "\n".join(lines) + "\n"
