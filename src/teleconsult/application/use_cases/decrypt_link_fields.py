"""Single and batch decryption of link fields with payload masking."""

import logging
from typing import Any, Iterable

from ...core.config import DecryptSettings
from ...core.exceptions import (
    BatchTooLargeError,
    DecryptionError,
    InputTooLargeError,
    InvalidPayloadError,
    ValidationError,
)
from ...core.utils.crypto import decrypt_text
from ...core.utils.masking import sanitize_decrypted_text
from ..dto.consultation_dto import BatchDecryptResult

logger = logging.getLogger(__name__)

INVALID_ITEM_MESSAGE = "Invalid input"
OVERSIZED_ITEM_MESSAGE = "Input too large"


class LinkDecryptionService:
    """Decrypts link parameters for display.

    Used by both the gated and the ungated endpoints; gating happens in the
    access middleware, not here.
    """

    def __init__(self, settings: DecryptSettings, expose_details: bool = False) -> None:
        self._settings = settings
        self._expose_details = expose_details
        if not settings.key:
            logger.warning("No decrypt key configured; every decryption will fail")

    @property
    def max_batch_items(self) -> int:
        return self._settings.max_batch_items

    def decrypt_single(self, text: Any) -> str:
        if not isinstance(text, str) or not text:
            raise ValidationError("text must be a non-empty string")
        if len(text) > self._settings.max_text_length:
            raise InputTooLargeError(f"text length {len(text)} exceeds {self._settings.max_text_length}")
        return sanitize_decrypted_text(decrypt_text(self._settings.key, text))

    def decrypt_batch(self, items: Any) -> BatchDecryptResult:
        """Decrypt every ``{key, text}`` item; failures land in ``errors`` under the same key.

        The item-count cap is enforced before any item is touched.
        """
        if not isinstance(items, list):
            raise InvalidPayloadError("texts must be an array of {key, text} objects")
        if len(items) > self._settings.max_batch_items:
            raise BatchTooLargeError(len(items), self._settings.max_batch_items)

        outcome = BatchDecryptResult()
        for index, item in enumerate(_as_items(items)):
            key, text = item
            if key is None:
                outcome.errors[f"item_{index}"] = INVALID_ITEM_MESSAGE
                continue
            # A repeated key reports only its last item, never both a result and an error.
            outcome.results.pop(key, None)
            outcome.errors.pop(key, None)
            try:
                outcome.results[key] = self.decrypt_single(text)
            except InputTooLargeError:
                outcome.errors[key] = OVERSIZED_ITEM_MESSAGE
            except ValidationError:
                outcome.errors[key] = INVALID_ITEM_MESSAGE
            except DecryptionError as exc:
                outcome.errors[key] = exc.message if self._expose_details else exc.public_message
        return outcome


def _as_items(items: Iterable[Any]):
    for item in items:
        if not isinstance(item, dict):
            yield None, None
            continue
        key = item.get("key")
        yield (str(key) if key not in (None, "") else None), item.get("text")
