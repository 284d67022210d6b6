"""In-game text (nametags, display names, connect codes) is stored as NUL-padded Shift-JIS. Melee renders most
latin characters using their fullwidth forms, so decoded text is folded back to ASCII where a halfwidth
equivalent exists."""

from .log import log

_FULLWIDTH_START = 0xFF00
_FULLWIDTH_END = 0xFF5F

_SPECIAL_CASES = {
    0x3000: 0x20,  # ideographic space
    0x2019: 0x27,  # right single quotation mark
    0x201D: 0x22,  # right double quotation mark
}


def _halfwidth_char(char: str) -> str:
    code = ord(char)
    if _FULLWIDTH_START < code < _FULLWIDTH_END:
        return chr(0x20 + (code - _FULLWIDTH_START))
    return chr(_SPECIAL_CASES.get(code, code))


def to_halfwidth(text: str) -> str:
    """Maps fullwidth characters to their ASCII counterparts, all other characters are unchanged"""
    return "".join(_halfwidth_char(c) for c in text)


def decode_shift_jis(raw: bytes | None) -> str:
    """Decodes a NUL-terminated Shift-JIS buffer. Returns an empty string if the buffer is missing or invalid."""
    if raw is None:
        return ""

    # Shift-JIS trail bytes are never 0x00, so splitting before decoding is safe
    raw = raw.split(b"\x00", 1)[0]
    try:
        text = raw.decode("shift-jis")
    except UnicodeDecodeError:
        log.debug("undecodable shift-jis text: %r" % raw)
        return ""

    return to_halfwidth(text)
