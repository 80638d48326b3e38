# formclient/application/ports/urllib3_multipart_writer.py
from __future__ import annotations

import io
from typing import Optional

from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary

from formclient.application.ports.multipart_writer import MultipartWriterPort

FILE_PART_CONTENT_TYPE = "application/octet-stream"


class _PartWriter:
    """
    Write handle for the most recently opened part.
    Becomes invalid as soon as another part is opened or the writer closes.
    """

    def __init__(self, owner: "MultipartFormWriter", index: int):
        self._owner = owner
        self._index = index

    def write(self, data: bytes) -> int:
        if self._owner._closed:
            raise ValueError("multipart writer is closed")
        if self._owner._part_count != self._index:
            raise ValueError("write to a superseded multipart part")
        return self._owner._buf.write(data)


class MultipartFormWriter(MultipartWriterPort):
    """
    Part layout follows urllib3.filepost.encode_multipart_formdata, except that
    parts are written one by one so file data can be streamed in after the
    part headers:

        --<boundary>\\r\\n<headers>\\r\\n\\r\\n<data>
        \\r\\n--<boundary>\\r\\n<headers>\\r\\n\\r\\n<data>
        \\r\\n--<boundary>--\\r\\n
    """

    def __init__(self, boundary: Optional[str] = None, buffer: Optional[io.BytesIO] = None):
        self._boundary = boundary or choose_boundary()
        self._buf = buffer if buffer is not None else io.BytesIO()
        self._part_count = 0
        self._closed = False

    @property
    def boundary(self) -> str:
        return self._boundary

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self._boundary}"

    def write_field(self, key: str, value: str) -> None:
        field = RequestField(name=key, data=value)
        field.make_multipart()
        part = self._open_part(field)
        part.write(value.encode("utf-8"))

    def create_file_part(self, key: str, filename: str) -> _PartWriter:
        field = RequestField(name=key, data=b"", filename=filename)
        field.make_multipart(content_type=FILE_PART_CONTENT_TYPE)
        return self._open_part(field)

    def close(self) -> None:
        if self._closed:
            raise ValueError("multipart writer is already closed")
        if self._part_count > 0:
            self._buf.write(b"\r\n")
        self._buf.write(f"--{self._boundary}--\r\n".encode("ascii"))
        self._closed = True

    def getvalue(self) -> bytes:
        return self._buf.getvalue()

    def _open_part(self, field: RequestField) -> _PartWriter:
        if self._closed:
            raise ValueError("multipart writer is closed")
        if self._part_count > 0:
            self._buf.write(b"\r\n")
        self._buf.write(f"--{self._boundary}\r\n".encode("ascii"))
        self._buf.write(field.render_headers().encode("utf-8"))
        self._part_count += 1
        return _PartWriter(self, self._part_count)
