"""Copy partner IBANs and references to the system clipboard."""

from __future__ import annotations

import base64
import logging
import os
import sys
from dataclasses import dataclass
from typing import TextIO

import pyperclip

logger = logging.getLogger(__name__)


@dataclass
class CopyResult:
    success: bool
    method: str | None = None


def _write_control_sequence(sequence: str, stream: TextIO | None = None) -> bool:
    candidates: list[TextIO] = []
    if stream is not None:
        candidates.append(stream)

    # `sys.__stdout__` is the real terminal even while textual owns `sys.stdout`.
    if sys.__stdout__ is not None:
        candidates.append(sys.__stdout__)
    candidates.append(sys.stdout)

    for output in candidates:
        try:
            output.write(sequence)
            output.flush()
            return True
        except (OSError, ValueError):
            continue
    return False


def copy_with_osc52(text: str, stream: TextIO | None = None) -> bool:
    if not text:
        return False

    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    osc = f"\x1b]52;c;{payload}\x07"

    # tmux only forwards OSC sequences wrapped in a DCS passthrough.
    if os.getenv("TMUX"):
        osc = f"\x1bPtmux;\x1b{osc}\x1b\\"

    return _write_control_sequence(osc, stream=stream)


def copy_with_pyperclip(text: str) -> bool:
    if not text:
        return False

    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.debug("pyperclip copy unavailable: %s", e)
        return False
    return True


def copy_text(text: str, prefer_osc52: bool = False) -> CopyResult:
    if prefer_osc52:
        methods = (("osc52", copy_with_osc52), ("pyperclip", copy_with_pyperclip))
    else:
        methods = (("pyperclip", copy_with_pyperclip), ("osc52", copy_with_osc52))

    for method_name, method in methods:
        if method(text):
            return CopyResult(success=True, method=method_name)

    return CopyResult(success=False)


def copy_iban(iban: str, prefer_osc52: bool = False) -> CopyResult:
    """Copy an IBAN without the grouping spaces banks show it with."""
    return copy_text(iban.replace(" ", ""), prefer_osc52=prefer_osc52)
