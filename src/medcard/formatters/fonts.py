"""Process-wide font registration for Korean/English card text."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from reportlab.lib.fonts import addMapping
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfbase.ttfonts import TTFont

log = logging.getLogger(__name__)

_lock = threading.Lock()
_registered: dict[tuple[str, Optional[str]], str] = {}


def register_fonts(cjk_font_name: str, cjk_font_path: Optional[Path] = None) -> str:
    """Register the CJK font once and return the reportlab font name to use.

    With ``cjk_font_path`` the TTF is embedded under ``cjk_font_name``;
    otherwise ``cjk_font_name`` must be one of reportlab's built-in CID
    fonts (e.g. ``HYGothic-Medium``).
    """
    key = (cjk_font_name, str(cjk_font_path) if cjk_font_path else None)
    with _lock:
        if key in _registered:
            return _registered[key]
        if cjk_font_path is not None:
            pdfmetrics.registerFont(TTFont(cjk_font_name, str(cjk_font_path)))
            log.info("Registered TTF font %s from %s", cjk_font_name, cjk_font_path)
        else:
            pdfmetrics.registerFont(UnicodeCIDFont(cjk_font_name))
            log.info("Registered CID font %s", cjk_font_name)
        # CID/TTF faces ship no bold or italic variant; map <b>/<i> onto the regular face
        for bold in (0, 1):
            for italic in (0, 1):
                addMapping(cjk_font_name, bold, italic, cjk_font_name)
        _registered[key] = cjk_font_name
        return cjk_font_name
