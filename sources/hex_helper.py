"""hex_helper.py

Utility class that groups together the small helper functions that deal with
hex formatting of raw advertisement payloads.

Typical usage
-------------
>>> from hex_helper import HexHelper
>>> HexHelper.to_hex_string(b"\x40\x00\x01")
'40:00:01'
>>> HexHelper.from_hex_string("40 00 01")
b'@\x00\x01'
"""

from typing import Union


class HexHelper:
    """
    Helper for converting payloads to and from their hexadecimal form.
    """

    # ------------------------------------------------------------------
    # Hex conversion helpers
    # ------------------------------------------------------------------
    @staticmethod
    def to_hex_string(byte_array: Union[bytes, bytearray]) -> str:
        """
        Convert a sequence of bytes to a colon‑separated hex string.

        Example
        -------
        >>> HexHelper.to_hex_string(b"\x01\xab")
        '01:ab'
        """
        return ":".join(f"{c:02x}" for c in byte_array)

    @staticmethod
    def from_hex_string(hex_str: str) -> bytes:
        """
        Parse ``'4000a1'``, ``'40 00 A1'`` or ``'40:00:a1'`` into bytes.

        Raises
        ------
        ValueError
            If the string holds anything but hex digits and separators.
        """
        cleaned = hex_str.replace(":", "").replace(" ", "").replace("-", "")
        if cleaned.lower().startswith("0x"):
            cleaned = cleaned[2:]
        return bytes.fromhex(cleaned)
