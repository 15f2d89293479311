"""Helpers shared by the outbound HTTP adapters."""

import json
from typing import Any, Dict

import aiohttp


async def read_json_body(response: aiohttp.ClientResponse) -> Dict[str, Any]:
    """Parse a response body as a JSON object; anything else lands under ``raw``."""
    text = await response.text()
    if not text:
        return {}
    try:
        parsed = json.loads(text)
    except ValueError:
        return {"raw": text[:500]}
    if isinstance(parsed, dict):
        return parsed
    return {"raw": parsed}
