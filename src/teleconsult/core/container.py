"""
Dependency injection container for the teleconsult access service.

One container is built per application instance and kept on
``app.state.container``. Tests register fakes (verifier, SMS sender, clock)
before the first lookup; everything else is built lazily from settings.
"""

from typing import Any, Callable, Dict, Optional

from .config import Settings, get_settings
from .exceptions import ConfigurationError
from .utils.datetime_utils import Clock, system_clock


class ServiceNames:
    """Service names used throughout the application."""

    # Core
    SETTINGS = "settings"
    CLOCK = "clock"

    # Stores
    OTP_STORE = "otp_store"
    ACCESS_STORE = "access_store"
    RATE_LIMIT_STORE = "rate_limit_store"

    # External services
    CRM_TOKEN_CACHE = "crm_token_cache"
    APPOINTMENT_VERIFIER = "appointment_verifier"
    SMS_SENDER = "sms_sender"

    # Application services
    APPOINTMENT_RESOLVER = "appointment_resolver"
    PRECHECK_USE_CASE = "precheck_use_case"
    VERIFY_OTP_USE_CASE = "verify_otp_use_case"
    ACCESS_GATE = "access_gate"
    DECRYPTION_SERVICE = "decryption_service"
    RATE_LIMITER = "rate_limiter"


class Container:
    """Lightweight dependency injection container."""

    def __init__(self, settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> None:
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._singletons: Dict[str, Any] = {}
        self._settings = settings or get_settings()
        self.register_singleton(ServiceNames.SETTINGS, self._settings)
        self.register_singleton(ServiceNames.CLOCK, clock or system_clock)
        _register_defaults(self)

    @property
    def settings(self) -> Settings:
        return self._settings

    def register_singleton(self, name: str, instance: Any) -> None:
        """Register a singleton instance (replaces any factory of the same name)."""
        self._factories.pop(name, None)
        self._singletons[name] = instance

    def register_factory(self, name: str, factory: Callable[[], Any]) -> None:
        """Register a factory function; it runs once, on first lookup."""
        self._singletons.pop(name, None)
        self._factories[name] = factory

    def get(self, name: str) -> Any:
        """Get a service by name."""
        if name in self._singletons:
            return self._singletons[name]

        if name in self._factories:
            instance = self._factories.pop(name)()
            self._singletons[name] = instance
            return instance

        raise ConfigurationError(f"Service '{name}' not found")

    def get_or_none(self, name: str) -> Optional[Any]:
        try:
            return self.get(name)
        except ConfigurationError:
            return None

    def has(self, name: str) -> bool:
        return name in self._factories or name in self._singletons


def _register_defaults(container: Container) -> None:
    # Imports are local so that core/ does not depend on adapters/ at import time.
    from ..adapters.external.crm_token_cache import CrmTokenCache
    from ..adapters.external.crm_verification_service import CrmAppointmentVerifier
    from ..adapters.external.sms_service_airtel import AirtelSmsSender
    from ..adapters.stores.in_memory_rate_limit_store import InMemoryRateLimitStore
    from ..adapters.stores.in_memory_session_store import InMemorySessionStore
    from ..application.use_cases.authorize_consultation_access import ConsultationAccessGate
    from ..application.use_cases.check_rate_limit import DecryptRateLimiter
    from ..application.use_cases.decrypt_link_fields import LinkDecryptionService
    from ..application.use_cases.precheck_consultation import PrecheckConsultationUseCase
    from ..application.use_cases.resolve_appointment import AppointmentResolver
    from ..application.use_cases.verify_consultation_otp import VerifyConsultationOtpUseCase

    s = container.settings
    get = container.get

    container.register_factory(ServiceNames.OTP_STORE, lambda: InMemorySessionStore("otp_sessions"))
    container.register_factory(
        ServiceNames.ACCESS_STORE, lambda: InMemorySessionStore("access_sessions")
    )
    container.register_factory(ServiceNames.RATE_LIMIT_STORE, InMemoryRateLimitStore)

    container.register_factory(
        ServiceNames.CRM_TOKEN_CACHE, lambda: CrmTokenCache(s.crm, get(ServiceNames.CLOCK))
    )
    container.register_factory(
        ServiceNames.APPOINTMENT_VERIFIER,
        lambda: CrmAppointmentVerifier(s.crm, get(ServiceNames.CRM_TOKEN_CACHE)),
    )
    container.register_factory(ServiceNames.SMS_SENDER, lambda: AirtelSmsSender(s.sms))

    container.register_factory(
        ServiceNames.APPOINTMENT_RESOLVER,
        lambda: AppointmentResolver(s.decrypt.key, get(ServiceNames.APPOINTMENT_VERIFIER)),
    )
    container.register_factory(
        ServiceNames.PRECHECK_USE_CASE,
        lambda: PrecheckConsultationUseCase(
            otp_settings=s.otp,
            resolver=get(ServiceNames.APPOINTMENT_RESOLVER),
            sms_sender=get(ServiceNames.SMS_SENDER),
            otp_store=get(ServiceNames.OTP_STORE),
            clock=get(ServiceNames.CLOCK),
        ),
    )
    container.register_factory(
        ServiceNames.VERIFY_OTP_USE_CASE,
        lambda: VerifyConsultationOtpUseCase(
            otp_settings=s.otp,
            access_settings=s.access,
            otp_store=get(ServiceNames.OTP_STORE),
            access_store=get(ServiceNames.ACCESS_STORE),
            clock=get(ServiceNames.CLOCK),
        ),
    )
    container.register_factory(
        ServiceNames.ACCESS_GATE,
        lambda: ConsultationAccessGate(
            access_store=get(ServiceNames.ACCESS_STORE),
            clock=get(ServiceNames.CLOCK),
            enabled=s.access.enabled,
        ),
    )
    container.register_factory(
        ServiceNames.DECRYPTION_SERVICE,
        lambda: LinkDecryptionService(s.decrypt, expose_details=s.is_development),
    )
    container.register_factory(
        ServiceNames.RATE_LIMITER,
        lambda: DecryptRateLimiter(
            s.rate_limit, get(ServiceNames.RATE_LIMIT_STORE), get(ServiceNames.CLOCK)
        ),
    )
