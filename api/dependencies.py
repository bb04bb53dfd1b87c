"""
API dependencies: store, notifier, effect dispatch and the acting principal.

Authentication happens upstream; the gateway in front of this API verifies the
identity-provider token and forwards the principal as headers:
- X-User-Id: identity-provider account id (also the rep id)
- X-User-Role: rep, admin or owner
- X-User-Name: optional display name
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from fastapi import BackgroundTasks, Depends, Header, HTTPException

from domain.context import OperationContext
from domain.effects import Outcome
from domain.rep import Role
from repositories.store import DocumentStore, InMemoryStore
from services.notification_service import EffectDispatcher, Notifier, notifier_from_env


@lru_cache(maxsize=1)
def get_store() -> DocumentStore:
    """Store selected by CRM_STORE: `supabase` (default) or `memory`."""

    if os.getenv("CRM_STORE", "supabase").lower() == "memory":
        return InMemoryStore()

    from repositories.supabase_store import SupabaseStore

    return SupabaseStore()


def get_notifier(store: DocumentStore = Depends(get_store)) -> Notifier:
    return notifier_from_env(store)


def get_dispatcher(
    store: DocumentStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> EffectDispatcher:
    return EffectDispatcher(store, notifier)


def get_context(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
) -> OperationContext:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        role = Role((x_user_role or Role.REP.value).lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role: {x_user_role!r}")
    return OperationContext(actor_id=x_user_id, role=role, actor_name=x_user_name)


def run_effects(
    dispatcher: EffectDispatcher,
    ctx: OperationContext,
    outcome: Outcome,
    background_tasks: BackgroundTasks,
) -> None:
    """Append activities now; send notifications after the response is sent."""

    dispatcher.log_activities(ctx, outcome.effects)
    if outcome.notifications:
        background_tasks.add_task(dispatcher.send_notifications, outcome.notifications)


__all__ = ["get_store", "get_notifier", "get_dispatcher", "get_context", "run_effects"]
