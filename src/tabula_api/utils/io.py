"""File I/O helpers for uploaded documents."""

from __future__ import annotations

from typing import BinaryIO

PDF_SIGNATURE = b"%PDF"


def has_pdf_signature(stream: BinaryIO) -> bool:
    """Check a seekable stream for the PDF signature, leaving it rewound."""
    head = stream.read(len(PDF_SIGNATURE))
    stream.seek(0)
    return head == PDF_SIGNATURE
