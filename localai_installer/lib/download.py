from __future__ import annotations

import logging
from pathlib import Path

import requests

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def download_file(url: str, dest: Path, *, timeout: float = 60, dry_run: bool = False) -> Path:
    """Stream `url` into `dest`.

    The body is written to `<dest>.part` and renamed on completion, so an
    interrupted download never looks like a cached artifact.
    """

    if dry_run:
        logger.info("Would download %s -> %s", url, dest)
        return dest

    dest.parent.mkdir(parents=True, exist_ok=True)
    part = dest.with_name(dest.name + ".part")

    logger.info("Downloading %s -> %s", url, dest)
    with requests.get(url, stream=True, timeout=timeout) as r:
        r.raise_for_status()
        total = 0
        with open(part, "wb") as f:
            for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
                    total += len(chunk)

    part.replace(dest)
    logger.info("Downloaded %s (%d bytes)", dest.name, total)
    return dest
