"""ASCII-friendly orthography input.

``{xx}`` names a whole glyph (``{ae}`` is æ), ``\\dc`` puts diacritic ``d`` on
character ``c`` (``\\~n`` is ñ). Unknown names and commands pass through
without their markup.
"""

from __future__ import annotations

import re
import unicodedata

COMBINATIONS: dict[str, str] = {
    "o": "ø",
    "O": "Ø",
    "ae": "æ",
    "AE": "Æ",
    "oe": "œ",
    "OE": "Œ",
    "ss": "ß",
    "ng": "ŋ",
    "NG": "Ŋ",
    "sh": "ʃ",
    "zh": "ʒ",
    "th": "θ",
    "dh": "ð",
    "l": "ł",
    "L": "Ł",
    "d": "đ",
    "schwa": "ə",
    "glottal": "ʔ",
    "i": "ı",
}

DIACRITICS: dict[str, str] = {
    "~": "\u0303",  # tilde
    "'": "\u0301",  # acute
    "`": "\u0300",  # grave
    "^": "\u0302",  # circumflex
    '"': "\u0308",  # diaeresis
    "-": "\u0304",  # macron
    "v": "\u030c",  # caron
    "o": "\u030a",  # ring above
    "u": "\u0306",  # breve
    ".": "\u0307",  # dot above
    "c": "\u0327",  # cedilla
    "k": "\u0328",  # ogonek
}

_COMBINATION = re.compile(r"\{(\w+)\}")
_COMMAND = re.compile(r"\\(.)(.)", re.DOTALL)


def _combination(match: re.Match[str]) -> str:
    name = match.group(1)
    return COMBINATIONS.get(name, name)


def _command(match: re.Match[str]) -> str:
    mark, base = match.group(1), match.group(2)
    if mark not in DIACRITICS:
        return mark + base
    return unicodedata.normalize("NFC", base + DIACRITICS[mark])


def interpret(text: str) -> str:
    """Replace glyph names and diacritic commands with Unicode text."""
    text = _COMBINATION.sub(_combination, text)
    return _COMMAND.sub(_command, text)
