"""
SMS delivery service interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class SmsSender(ABC):
    """Delivers one-time passwords over SMS."""

    @abstractmethod
    async def send_otp(self, mobile: str, otp_code: str) -> Dict[str, Any]:
        """
        Send ``otp_code`` to ``mobile``.

        Returns:
            Provider acknowledgement (never contains the code).

        Raises:
            SmsDeliveryError: the gateway rejected or never received the message.
        """
        pass
