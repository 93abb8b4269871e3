"""Best-effort structured extraction from free-form model replies.

Models wrap JSON in prose or markdown fences. We look for the first balanced
``{...}`` or ``[...]`` block (string-aware, so braces inside quoted values do
not end the block early) and decode it.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Extraction:
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _find_balanced(text: str, opener: str, closer: str) -> Optional[str]:
    start = text.find(opener)
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(text)):
            ch = text[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == opener:
                depth += 1
            elif ch == closer:
                depth -= 1
                if depth == 0:
                    return text[start:idx + 1]
        # unbalanced from this opener; try the next one
        start = text.find(opener, start + 1)
    return None


def _extract(text: Optional[str], opener: str, closer: str, expected: type) -> Extraction:
    if not text or not text.strip():
        return Extraction(error="empty response")
    block = _find_balanced(text, opener, closer)
    if block is None:
        return Extraction(error=f"no {opener}...{closer} block found")
    try:
        data = json.loads(block)
    except json.JSONDecodeError as exc:
        return Extraction(error=f"invalid JSON: {exc.msg}")
    if not isinstance(data, expected):
        return Extraction(error=f"expected {expected.__name__}, got {type(data).__name__}")
    return Extraction(data=data)


def extract_json_object(text: Optional[str]) -> Extraction:
    return _extract(text, "{", "}", dict)


def extract_json_array(text: Optional[str]) -> Extraction:
    return _extract(text, "[", "]", list)
