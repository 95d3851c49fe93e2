from __future__ import annotations

import itertools
import os
import sys
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path
from typing import Iterator

from .errors import TemplateNotFound
from .pages import is_content_file, process_page

MAX_WORKERS = 32


def resolve_workers(value: object) -> int:
    workers = int(value or 0)
    if workers <= 0:
        workers = os.cpu_count() or 1
    return max(1, min(workers, MAX_WORKERS))


def process_directory(
    directory: Path,
    args: object,
    executor: Executor,
    counter: Iterator[int],
    skip: Path | None = None,
) -> tuple[list[dict], list[Path]]:
    """Transform every content file below ``directory``.

    Files of one directory run concurrently and are joined before the
    subdirectories are visited, depth first, in name order. Returns the
    collected pages in discovery order and the pages that failed.
    """
    entries = sorted(directory.iterdir(), key=lambda p: p.name)
    files = [path for path in entries if path.is_file() and is_content_file(path) and path != skip]
    subdirs = [path for path in entries if path.is_dir() and not path.name.startswith(".")]
    jobs = [(path, next(counter)) for path in files]

    def render(job: tuple[Path, int]) -> tuple[dict | None, Path | None]:
        path, order = job
        try:
            return process_page(path, args, order), None
        except TemplateNotFound as exc:
            print(f"Skipping {path}: {exc}", file=sys.stderr)
            return None, path

    collected: list[dict] = []
    failures: list[Path] = []
    for page, failed in executor.map(render, jobs):
        if page is not None:
            collected.append(page)
        if failed is not None:
            failures.append(failed)

    for subdir in subdirs:
        sub_collected, sub_failures = process_directory(subdir, args, executor, counter, skip)
        collected.extend(sub_collected)
        failures.extend(sub_failures)
    return collected, failures


def walk_pages(args: object) -> tuple[list[dict], list[Path]]:
    pages_dir = Path(args.pages)
    index_path = pages_dir / getattr(args, "index_page", "index.md")
    with ThreadPoolExecutor(max_workers=resolve_workers(getattr(args, "build_workers", 0))) as executor:
        return process_directory(pages_dir, args, executor, itertools.count(), skip=index_path)
