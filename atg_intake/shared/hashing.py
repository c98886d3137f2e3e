"""
Canonical Hashing Layer
Single source of truth for evaluation hashes.
"""

import hashlib
import json
from typing import Any

# Fields to exclude from hashing (volatile/generated)
VOLATILE_FIELDS = frozenset([
    "submitted_at",
    "generated_at",
    "timestamp",
    "_metadata"
])


def canonicalize(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Convert object to canonical JSON string.
    Deterministic: same input always produces same output.
    """
    def _clean(o: Any) -> Any:
        if isinstance(o, dict):
            return {
                k: _clean(v)
                for k, v in sorted(o.items())
                if not (exclude_volatile and k in VOLATILE_FIELDS)
            }
        elif isinstance(o, (list, tuple)):
            return [_clean(i) for i in o]
        elif isinstance(o, float):
            # 60000.0 and 60000 are the same answer
            if o.is_integer():
                return int(o)
            return round(o, 10)
        return o

    cleaned = _clean(obj)
    return json.dumps(cleaned, sort_keys=True, separators=(',', ':'), ensure_ascii=True)


def canonicalize_and_hash(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Hash an object's canonical form.
    Returns: "sha256:<64-char-hex>"
    """
    canonical = canonicalize(obj, exclude_volatile)
    digest = hashlib.sha256(canonical.encode('utf-8')).hexdigest()
    return f"sha256:{digest}"

