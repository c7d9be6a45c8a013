"""
Helpers shared by the line-oriented parsers.
"""

from typing import Optional, Tuple

# Addresses are kept as signed 64-bit values; anything above is a kernel address.
MAX_ADDRESS = (1 << 63) - 1


def parse_address(text: str) -> Optional[int]:
    """
    Parse a hexadecimal address, with or without a ``0x`` prefix.

    Returns None when the text is not hexadecimal or the value does not fit a
    signed 64-bit integer (e.g. ``ffffffff810c1b00``).
    """
    text = text.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    if not text:
        return None
    try:
        value = int(text, 16)
    except ValueError:
        return None
    if value > MAX_ADDRESS or value < -MAX_ADDRESS - 1:
        return None
    return value


def split_module_symbol(text: str) -> Tuple[str, str]:
    """
    Split ``module!symbol`` on the first ``!``.

    Text without a ``!`` is taken as a bare symbol with an empty module.
    """
    text = text.strip()
    idx = text.find("!")
    if idx == -1:
        return "", text
    return text[:idx], text[idx + 1:]
