from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import requests

from app.config import AppConfig
from app.enums.garden import BackendMode
from app.services.ai.care_advisor import CareAdvisorService
from app.services.ai.llm_backends import LLMBackend, create_backend
from app.services.application.auth_service import DemoSessionGate, Session, SessionGate, SupabaseSessionGate
from app.services.application.garden_service import GardenController
from app.services.application.notifications_service import NotificationCenter, TimerFactory
from app.services.utilities.email_service import EmailConfig, EmailService, PlantNotifier
from app.utils.emitters import EmitterService
from infrastructure.database.repositories.base import PlantStore
from infrastructure.database.repositories.plants import create_plant_repository
from infrastructure.database.rest_client import PostgrestClient
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage the garden backend services."""

    config: AppConfig
    backend_mode: BackendMode
    audit_logger: AuditLogger
    plant_store: PlantStore
    session_gate: SessionGate
    notifications: NotificationCenter
    notifier: PlantNotifier
    care_advisor: CareAdvisorService
    garden: GardenController
    postgrest: Optional[PostgrestClient] = None
    emitter_service: Optional[EmitterService] = None
    _unsubscribers: List[Callable[[], None]] = field(default_factory=list, repr=False)

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        socketio: Any = None,
        http_session: Optional[requests.Session] = None,
        timer_factory: Optional[TimerFactory] = None,
        llm_backend: Optional[LLMBackend] = None,
    ) -> "ServiceContainer":
        """Wire every service from ``config``; the plant store is chosen here, once."""
        audit_logger = AuditLogger(config.audit_log_path)

        postgrest: Optional[PostgrestClient] = None
        if config.remote_store_configured:
            backend_mode = BackendMode.REMOTE
            postgrest = PostgrestClient(
                config.supabase_url,
                config.supabase_key,
                session=http_session,
                timeout=config.remote_timeout_seconds,
            )
            session_gate: SessionGate = SupabaseSessionGate(
                config.supabase_url,
                config.supabase_key,
                session=http_session,
                timeout=config.remote_timeout_seconds,
                audit_logger=audit_logger,
            )
        else:
            backend_mode = BackendMode.LOCAL
            session_gate = DemoSessionGate(config.demo_user_id)
        plant_store = create_plant_repository(config, client=postgrest)

        center_kwargs = {"timer_factory": timer_factory} if timer_factory else {}
        notifications = NotificationCenter(config.notification_ttl_seconds, **center_kwargs)

        notifier = PlantNotifier(
            EmailService(
                EmailConfig(
                    smtp_host=config.smtp_host,
                    smtp_port=config.smtp_port,
                    smtp_username=config.smtp_username or None,
                    smtp_password=config.smtp_password or None,
                    smtp_use_tls=config.smtp_use_tls,
                    from_address=config.smtp_from or None,
                )
            )
        )

        if llm_backend is None:
            llm_backend = create_backend(
                config.llm_provider,
                api_key=config.llm_api_key,
                model=config.llm_model,
                timeout=config.llm_timeout,
            )
        care_advisor = CareAdvisorService(llm_backend, simulate=config.advice_simulate)

        garden = GardenController(
            plant_store,
            notifications,
            notifier=notifier,
            audit_logger=audit_logger,
            max_workers=config.store_worker_count,
            tz=config.tzinfo,
        )

        container = cls(
            config=config,
            backend_mode=backend_mode,
            audit_logger=audit_logger,
            plant_store=plant_store,
            session_gate=session_gate,
            notifications=notifications,
            notifier=notifier,
            care_advisor=care_advisor,
            garden=garden,
            postgrest=postgrest,
            emitter_service=EmitterService(socketio) if socketio is not None else None,
        )
        container._wire()
        logger.info("ServiceContainer built (backend=%s, advice=%s)", backend_mode.value, care_advisor.provider_name)
        return container

    def _wire(self) -> None:
        if self.emitter_service is not None:
            self._unsubscribers.append(self.notifications.subscribe(self.emitter_service.emit_notification))
        self._unsubscribers.append(self.session_gate.on_auth_change(self._on_auth_change))
        self._on_auth_change(self.session_gate.get_session())

    def _on_auth_change(self, session: Optional[Session]) -> None:
        """Reload the garden for a new identity, or empty it on sign-out."""
        if self.postgrest is not None:
            self.postgrest.set_access_token(session.access_token if session else None)
        if session is None:
            self.garden.clear()
        else:
            self.garden.load(session.user_id)

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.garden.shutdown()
        self.notifications.shutdown()
        self.audit_logger.close()
        logger.info("ServiceContainer shutdown complete.")
