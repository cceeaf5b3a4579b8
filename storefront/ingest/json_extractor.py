"""Extract and walk embedded JSON in HTML pages."""

import json
import logging
from typing import Any, Dict, Optional

from selectolax.parser import HTMLParser

logger = logging.getLogger(__name__)

NEXT_DATA_SELECTOR = "script#__NEXT_DATA__"


def find_next_data_script(html: str) -> Optional[str]:
    """Raw text of the ``__NEXT_DATA__`` script tag, or None when absent."""
    tree = HTMLParser(html)
    node = tree.css_first(NEXT_DATA_SELECTOR)
    if node is None:
        return None
    return node.text()


def extract_next_data(html: str) -> Optional[Dict[str, Any]]:
    """
    Extract __NEXT_DATA__ script tag content.

    Common in Next.js applications. Returns None when the tag is missing or
    does not hold a JSON object.
    """
    script = find_next_data_script(html)
    if script is None:
        return None
    try:
        data = json.loads(script)
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse __NEXT_DATA__: {e}")
        return None
    return data if isinstance(data, dict) else None


def navigate_json(data: Any, *keys: str) -> Any:
    """
    Follow ``keys`` through nested mappings.

    Raises:
        KeyError: naming the key that is missing, or the key at which a
            non-mapping value was found.
    """
    current = data
    for key in keys:
        if not isinstance(current, dict):
            raise KeyError(f"expected map at key {key}")
        if key not in current:
            raise KeyError(f"key {key} not found")
        current = current[key]
    return current
