"""Boundary parsing for loosely typed deployment inputs.

Deployment inputs arrive from YAML files or the command line in more than
one textual shape: a real list, a comma separated string, or a JSON array
string. This module turns each of those into one typed form so the rest of
the package never has to guess.
"""

import json
import logging
from typing import Any, Dict, List


logger = logging.getLogger(__name__)


def parse_list(value: Any, field_name: str = "value") -> List[str]:
    """Parse a list input given as a list, a JSON array, or a comma list.

    Entries are stripped of surrounding whitespace and empty entries are
    dropped. ``None`` and empty strings yield an empty list.
    """
    if value is None:
        return []
        
    if isinstance(value, (list, tuple)):
        items = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        items = [value]
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                items = json.loads(text)
            except json.JSONDecodeError as e:
                logger.warning(f"{field_name} looks like a JSON array but is invalid ({e}), using empty list")
                return []
            if not isinstance(items, list):
                logger.warning(f"{field_name} is not a JSON array, using empty list")
                return []
        else:
            items = text.split(",")
    else:
        logger.warning(f"Unsupported {field_name} type {type(value).__name__}, using empty list")
        return []
        
    result = []
    for item in items:
        if isinstance(item, (dict, list)):
            # Structured entries are normalized by the model validators
            result.append(item)
            continue
        text = str(item).strip()
        if text:
            result.append(text)
    return result


def parse_mapping(value: Any, field_name: str = "value") -> Dict[str, Any]:
    """Parse a mapping input given as a mapping or a JSON object string.

    Anything that is not an object degrades to an empty mapping with a
    warning.
    """
    if value is None:
        return {}
        
    if isinstance(value, dict):
        return dict(value)
        
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return {}
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            logger.warning(f"{field_name} is not a valid JSON object, using empty environment")
            return {}
        if isinstance(parsed, dict):
            return parsed
            
    logger.warning(f"{field_name} is not a valid JSON object, using empty environment")
    return {}

