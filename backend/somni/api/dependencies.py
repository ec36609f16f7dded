"""Service Wiring — builds the process-wide services and exposes them to routes.

Invariants:
    - Exactly one SleepSessionManager per process (its subject locks must be shared)
    - Built once in the lifespan; routes only read app.state
"""

from dataclasses import dataclass

from fastapi import Request

from somni.config import Settings
from somni.infrastructure.clock import SystemTimeProvider
from somni.infrastructure.database import DatabaseSessionManager
from somni.infrastructure.notifications import (
    DisabledNotificationScheduler, LoggingNotificationScheduler,
)
from somni.infrastructure.sleep_store import SqlSleepStore
from somni.services.session_manager import SleepSessionManager
from somni.services.sleep_calculator import SleepCalculator


@dataclass
class Services:
    store: SqlSleepStore
    session_manager: SleepSessionManager
    sleep_calculator: SleepCalculator


def build_services(settings: Settings, db: DatabaseSessionManager) -> Services:
    clock = SystemTimeProvider()
    store = SqlSleepStore(db, clock)
    scheduler = (
        LoggingNotificationScheduler() if settings.notifications_enabled
        else DisabledNotificationScheduler()
    )
    return Services(
        store=store,
        session_manager=SleepSessionManager(store, clock),
        sleep_calculator=SleepCalculator(store, scheduler, clock, profile_repository=store),
    )


def get_session_manager(request: Request) -> SleepSessionManager:
    return request.app.state.services.session_manager


def get_sleep_calculator(request: Request) -> SleepCalculator:
    return request.app.state.services.sleep_calculator
