# airmaint/services/evidence.py
from __future__ import annotations

import logging
import random
import re
import time
from pathlib import Path

from fastapi import UploadFile

log = logging.getLogger("airmaint.uploads")

PUBLIC_PREFIX = "/uploads"
_CHUNK = 1024 * 1024
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class EvidenceRejected(ValueError):
    pass


def _stored_name(original: str | None) -> str:
    base = _UNSAFE.sub("_", Path(original or "photo").name).strip("._") or "photo"
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}-{base}"


def save_evidence_photos(
    files: list[UploadFile],
    *,
    upload_dir: str,
    max_bytes: int,
    max_files: int,
) -> list[str]:
    """
    Writes image uploads to upload_dir and returns their public paths
    (/uploads/<name>). All files are checked before anything is written.
    """
    if not files:
        raise EvidenceRejected("No files uploaded")
    if len(files) > max_files:
        raise EvidenceRejected(f"At most {max_files} files per upload")

    payloads: list[tuple[str, bytes]] = []
    for f in files:
        if not (f.content_type or "").startswith("image/"):
            raise EvidenceRejected("Only images are allowed")

        data = bytearray()
        while chunk := f.file.read(_CHUNK):
            data.extend(chunk)
            if len(data) > max_bytes:
                raise EvidenceRejected(f"File {f.filename!r} exceeds {max_bytes} bytes")
        payloads.append((_stored_name(f.filename), bytes(data)))

    target = Path(upload_dir)
    target.mkdir(parents=True, exist_ok=True)

    paths: list[str] = []
    for name, data in payloads:
        (target / name).write_bytes(data)
        paths.append(f"{PUBLIC_PREFIX}/{name}")

    log.info("stored %d evidence file(s)", len(paths))
    return paths
