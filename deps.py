from fastapi import Request

from config import Settings
from lifecycle import PlanLifecycleManager
from notifications import NotificationDispatcher
from plan_index import PlanIndex
from storage import RecordStore

# ==================== DEPENDENCIES ====================

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_index(request: Request) -> PlanIndex:
    return request.app.state.index


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


def get_manager(request: Request) -> PlanLifecycleManager:
    return request.app.state.manager
