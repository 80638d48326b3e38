# tests/multipart_helpers.py
"""Expected multipart/form-data bytes for a fixed boundary."""
from __future__ import annotations

from email import policy
from email.parser import BytesParser
from typing import List, Optional, Tuple

BOUNDARY = "testboundary"

# first bytes of a PNG file plus some binary filler
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(256))


def field_part(name: str, value: str, boundary: str = BOUNDARY) -> bytes:
    return (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{name}"\r\n'
        f"\r\n"
        f"{value}"
    ).encode("utf-8")


def file_part(name: str, filename: str, data: bytes, boundary: str = BOUNDARY) -> bytes:
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
        f"Content-Type: application/octet-stream\r\n"
        f"\r\n"
    ).encode("utf-8")
    return head + data


def multipart_body(*parts: bytes, boundary: str = BOUNDARY) -> bytes:
    closing = f"--{boundary}--\r\n".encode("ascii")
    if not parts:
        return closing
    return b"\r\n".join(parts) + b"\r\n" + closing


def parse_multipart(body: bytes, content_type: str) -> List[Tuple[Optional[str], Optional[str], bytes]]:
    """(name, filename, payload) for each part, in body order."""
    message = BytesParser(policy=policy.HTTP).parsebytes(
        b"Content-Type: " + content_type.encode("ascii") + b"\r\n\r\n" + body
    )
    parts = []
    for part in message.iter_parts():
        parts.append(
            (
                part.get_param("name", header="content-disposition"),
                part.get_filename(),
                part.get_payload(decode=True),
            )
        )
    return parts
