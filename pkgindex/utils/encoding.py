"""
Text normalisation for file names and file content.

Everything stored in the document table is valid Unicode text. File content
is also NFC-normalised; file names are not, so a stored path still names the
file on disk. UTF-8 input is taken as-is; anything else goes through charset
detection (chardet), so legacy encodings such as Shift_JIS or EUC-JP still
end up searchable.
"""

import codecs
import logging
import unicodedata
from typing import Optional

import chardet

from pkgindex.exceptions import ContentEncodingError

logger = logging.getLogger(__name__)


def detect_encoding(raw: bytes) -> Optional[str]:
    """Guess the encoding of ``raw``; None when chardet has no opinion."""
    return chardet.detect(raw).get("encoding")


def to_canonical(raw: bytes, name: str = "<bytes>") -> str:
    """
    Decode ``raw`` into canonical text.

    Args:
        raw: Undecoded bytes (file content or an encoded file name)
        name: Label used in error messages

    Returns:
        Decoded text, unchanged in normal form so that file names keep
        matching the names on disk

    Raises:
        ContentEncodingError: the bytes are not UTF-8 and no detected
            encoding decodes them
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        encoding = detect_encoding(raw)
        if not encoding:
            raise ContentEncodingError(name)
        try:
            codecs.lookup(encoding)
            text = raw.decode(encoding)
        except (LookupError, UnicodeDecodeError) as e:
            raise ContentEncodingError(name, encoding) from e
        logger.debug("Decoded %s as %s", name, encoding)

    return text


def read_normalized(filename: str) -> str:
    """Read a file and return its content as canonical NFC text.

    ``OSError`` from the read propagates unchanged.
    """
    with open(filename, "rb") as f:
        raw = f.read()
    return unicodedata.normalize("NFC", to_canonical(raw, filename))
