"""Shared response builders for file downloads"""

import re
import unicodedata
from urllib.parse import quote

from fastapi.responses import Response

UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9._ -]+')


def ascii_filename(filename: str, fallback: str = "download.pdf") -> str:
    """Latin-1 safe fallback for clients that ignore filename*"""
    normalized = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    cleaned = re.sub(r"\s+", " ", UNSAFE_FILENAME_CHARS.sub("", normalized)).strip(" .")
    return cleaned or fallback


def content_disposition(filename: str, disposition: str = "attachment") -> str:
    """Header value with an ASCII filename plus the RFC 5987 UTF-8 form"""
    return f"{disposition}; filename=\"{ascii_filename(filename)}\"; filename*=UTF-8''{quote(filename, safe='')}"


def pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename)},
    )
