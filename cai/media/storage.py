"""Filename policy and writes for generated media.

Naming:
    `<timestamp>_<slug>.<ext>`, where the timestamp has minute granularity and
    the slug is derived from the user prompt (or a fixed label for audio).
    If the name is taken, `_1`, `_2`, ... is appended until a free name is
    found. Files are opened in exclusive-create mode, so two concurrent
    writers can never overwrite each other.

Error handling strategy:
    File-system failures raise `OutputWriteError`.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from cai.core.errors import OutputWriteError

logger = logging.getLogger(__name__)


FILLER_WORDS = frozenset({
    "a", "an", "the", "of", "in", "on", "at", "to", "for", "and", "with",
})

MAX_SLUG_LENGTH = 30

DEFAULT_SLUG = "output"

TIMESTAMP_FORMAT = "%Y-%m-%dt%H%M"


def slugify(text: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Derive a filename slug from prompt text.

    Lower-cases, splits on runs of non-alphanumerics, drops filler words,
    joins with underscores and truncates. Returns `DEFAULT_SLUG` when
    nothing is left.
    """
    words = [
        word for word in re.split(r"[^a-z0-9]+", text.lower())
        if word and word not in FILLER_WORDS
    ]
    slug = "_".join(words)[:max_length].strip("_")
    return slug or DEFAULT_SLUG


def timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def save_bytes(
    data: bytes,
    slug: str,
    ext: str,
    output_dir: Path | str = ".",
    now: datetime | None = None,
) -> Path:
    """Write `data` under a fresh, non-colliding name.

    Args:
        data: File content.
        slug: Name fragment (see `slugify`).
        ext: Extension without the dot.
        output_dir: Target directory; must exist.
        now: Timestamp override.

    Returns:
        Path of the written file.

    Raises:
        OutputWriteError: Directory missing or not writable.
    """
    stem = f"{timestamp(now)}_{slug}"
    directory = Path(output_dir)
    counter = 0

    while True:
        name = f"{stem}.{ext}" if counter == 0 else f"{stem}_{counter}.{ext}"
        path = directory / name
        try:
            with path.open("xb") as handle:
                handle.write(data)
        except FileExistsError:
            counter += 1
            continue
        except OSError as err:
            raise OutputWriteError(path, err) from err

        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path
