"""
Link parameters value object.

A consultation link carries short query keys (``a`` appointment number,
``un`` user name, ``ui`` user id, ``d`` doctor, ``s`` speciality, ``ad``
date, ``at`` time) whose values are ciphertext. The link hash binds OTP
challenges and access tokens to one exact parameter set.
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple

from ...core.exceptions import InvalidPayloadError
from ...core.utils.crypto_utils import hash_value
from ..errors import InvalidLinkHashError


@dataclass(frozen=True)
class LinkParameters:
    """Immutable snapshot of the parameters captured from a consultation link."""

    items: Tuple[Tuple[str, Optional[str]], ...]

    @classmethod
    def from_mapping(cls, params: Any) -> "LinkParameters":
        """Validate a decoded JSON body field and freeze it."""
        if not isinstance(params, Mapping) or not params:
            raise InvalidPayloadError("Encrypted parameters are required")

        items = []
        for key, value in params.items():
            if not isinstance(key, str) or not key:
                raise InvalidPayloadError("Link parameter keys must be non-empty strings")
            if value is not None and not isinstance(value, str):
                raise InvalidPayloadError(
                    f"Link parameter '{key}' must be a string or null"
                )
            items.append((key, value))
        return cls(items=tuple(items))

    def as_mapping(self) -> Mapping[str, Optional[str]]:
        return MappingProxyType(dict(self.items))

    def get(self, key: str) -> Optional[str]:
        for item_key, value in self.items:
            if item_key == key:
                return value
        return None

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self.items)

    def canonical_json(self) -> str:
        """Key-sorted compact JSON; byte-identical parameter sets serialize identically."""
        return json.dumps(
            dict(self.items), sort_keys=True, separators=(",", ":"), ensure_ascii=False
        )

    def link_hash(self) -> str:
        try:
            return hash_value(self.canonical_json())
        except (TypeError, ValueError) as exc:
            raise InvalidLinkHashError(f"Unable to serialize link parameters: {exc}") from exc
