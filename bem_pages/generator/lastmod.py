"""Read last-modified dates for content files from git history."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

COMMIT_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\S+$")


def parse_name_only_log(output: str) -> dict[str, str]:
    """Map each file to the newest commit date in ``git log --name-only`` output.

    The log lists commits newest first, each as a ``%cI`` date line followed
    by the files it touched, so the first date seen for a file wins.

    >>> parse_name_only_log("2024-05-02T10:00:00+03:00\\n\\na.md\\n2024-01-01T00:00:00+00:00\\n\\na.md\\nb.md\\n")
    {'a.md': '2024-05-02T10:00:00+03:00', 'b.md': '2024-01-01T00:00:00+00:00'}
    """
    dates: dict[str, str] = {}
    current: str | None = None
    for line in output.splitlines():
        text = line.strip()
        if not text:
            continue
        if COMMIT_DATE_PATTERN.match(text):
            current = text
            continue
        if current is not None:
            dates.setdefault(text, current)
    return dates


def git_lastmod(content_dir: Path, *, git_exe: str | None = None) -> dict[str, str]:
    """Return commit dates for files under ``content_dir`` from one ``git log``.

    Paths are relative to ``content_dir``. Without git or history the result
    is empty and pages are listed without ``<lastmod>``.
    """
    cmd = git_exe or shutil.which("git")
    if not cmd:
        logger.warning("git not found; sitemap.xml will have no lastmod dates")
        return {}
    try:
        completed = subprocess.run(  # noqa: S603
            [cmd, "log", "--relative", "--name-only", "--format=%cI", "--", "."],
            cwd=content_dir,
            check=True,
            text=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.warning("Could not read git history for %s: %s", content_dir, exc)
        return {}
    return parse_name_only_log(completed.stdout)


__all__ = ["git_lastmod", "parse_name_only_log"]
