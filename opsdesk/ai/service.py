from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..core.constants import CHAT_FAILURE_REPLY
from ..core.exceptions import ProviderError, ValidationError
from ..extensions import db
from ..models.user import User
from .actions import dispatch_action, extract_action
from .client import clean_reply, get_chat_client
from .context import build_context_string, gather_snapshot
from .fallback import keyword_reply
from .prompts import build_system_prompt

log = logging.getLogger(__name__)


class ChatService:
    @staticmethod
    def chat(*, user: User, prompt, now: Optional[datetime] = None) -> dict:
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationError("Invalid prompt")

        try:
            return ChatService._answer(user, prompt.strip(), now)
        except Exception:
            db.session.rollback()
            log.exception("Chat request failed for user %s", user.id)
            return {"response": CHAT_FAILURE_REPLY, "source": "error"}

    @staticmethod
    def _answer(user: User, prompt: str, now: Optional[datetime]) -> dict:
        snapshot = gather_snapshot(user)
        client = get_chat_client()

        if client.available:
            try:
                raw = client.complete(system=build_system_prompt(build_context_string(snapshot)), prompt=prompt)
            except ProviderError as e:
                log.warning("Chat provider unavailable, using keyword replies: %s", e)
            else:
                reply, action = extract_action(raw)
                body = {"response": clean_reply(reply).strip(), "source": "ai"}
                if action is not None:
                    body["action"] = dispatch_action(user, action, now=now).to_dict()
                return body

        return {"response": keyword_reply(prompt, snapshot), "source": "fallback"}
