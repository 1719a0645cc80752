from .base import Parser

from .qua import (
    QuaParser,
    decode,
    decode_text,
    encode,
    to_text,
)
