from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from ..ai.client import get_chat_client
from ..common.datetime_utils import now_local, short_date
from ..common.validators import validate_string
from ..core.constants import PAGE_DEFAULT_ICON, PAGE_DEFAULT_TITLE, TEXT_BLOCK_TYPES
from ..core.exceptions import NotFoundError, ProviderError, ValidationError
from ..extensions import db
from ..models.page import Block, CustomPage
from ..models.user import User
from .base import optional_int

log = logging.getLogger(__name__)

TITLE_SYSTEM_PROMPT = (
    "You are a creative naming assistant. Generate short, evocative titles for moodboards "
    "and creative projects. Respond with only the title, no quotes or extra text."
)
TITLE_MAX_TOKENS = 30
TITLE_MAX_LENGTH = 50
SUMMARY_BLOCK_LIMIT = 10


def mood_board_title(today: Optional[date] = None) -> str:
    today = today or now_local().date()
    return f"Mood Board {short_date(today)}"


def _shorten(text: str, limit: int = 30) -> str:
    return text[: limit - 3] + "..." if len(text) > limit else text


def generate_fallback_title(blocks: Iterable[Block], today: Optional[date] = None) -> str:
    """Pick a title from the page's own text: heading, then sticky note, then body text."""
    blocks = list(blocks)
    for block in blocks:
        if block.type == "heading1" and block.text:
            return block.text[:40]
    for block in blocks:
        if block.type == "sticky_note" and block.text:
            return _shorten(block.text)
    for block in blocks:
        if block.type == "text" and len(block.text) > 5:
            return _shorten(block.text)
    return mood_board_title(today)


def clean_title(raw: str) -> str:
    title = raw.strip()
    if title[:1] in ("'", '"'):
        title = title[1:]
    if title[-1:] in ("'", '"'):
        title = title[:-1]
    title = title.split("\n")[0]
    if len(title) > TITLE_MAX_LENGTH:
        title = title[: TITLE_MAX_LENGTH - 3] + "..."
    return title


def _title_prompt(summary: str) -> str:
    return (
        "Analyze this moodboard content and generate a SHORT, creative title (2-5 words max).\n"
        "The title should capture the main theme or mood. Be creative but concise.\n\n"
        f"Content:\n{summary}\n\n"
        "Respond with ONLY the title, nothing else."
    )


class PageService:
    @staticmethod
    def list_pages(*, user: User) -> list[CustomPage]:
        return (
            CustomPage.query.filter_by(user_id=user.id)
            .order_by(CustomPage.updated_at.desc(), CustomPage.id.desc())
            .all()
        )

    @staticmethod
    def get_page(*, user: User, page_id: int) -> CustomPage:
        page = CustomPage.query.filter_by(id=page_id, user_id=user.id).first()
        if page is None:
            raise NotFoundError("Not found")
        return page

    @staticmethod
    def create_page(*, user: User, data: dict) -> CustomPage:
        page = CustomPage(
            user_id=user.id,
            title=validate_string(data.get("title"), "title", max_length=255) or PAGE_DEFAULT_TITLE,
            icon=validate_string(data.get("icon"), "icon", max_length=32) or PAGE_DEFAULT_ICON,
            blocks=[Block(type="text", content={"text": ""}, order=0)],
        )
        db.session.add(page)
        db.session.commit()
        return page

    @staticmethod
    def update_page(*, user: User, page_id: int, data: dict) -> CustomPage:
        page = PageService.get_page(user=user, page_id=page_id)
        if "title" in data:
            page.title = validate_string(data["title"], "title", max_length=255) or PAGE_DEFAULT_TITLE
        if "icon" in data:
            page.icon = validate_string(data["icon"], "icon", max_length=32) or PAGE_DEFAULT_ICON
        page.updated_at = now_local()
        db.session.commit()
        return page

    @staticmethod
    def delete_page(*, user: User, page_id: int) -> None:
        page = PageService.get_page(user=user, page_id=page_id)
        db.session.delete(page)
        db.session.commit()

    @staticmethod
    def add_block(*, user: User, page_id: int, data: dict) -> Block:
        page = PageService.get_page(user=user, page_id=page_id)
        content = data.get("content") or {}
        if not isinstance(content, dict):
            raise ValidationError("content must be an object")
        order = optional_int(data.get("order"), "order")
        if order is None:
            order = max((b.order for b in page.blocks), default=-1) + 1

        block = Block(
            type=validate_string(data.get("type"), "type", max_length=50) or "text",
            content=content,
            order=order,
        )
        page.blocks.append(block)
        page.updated_at = now_local()
        db.session.commit()
        return block

    @staticmethod
    def update_blocks(*, user: User, page_id: int, blocks) -> list[Block]:
        page = PageService.get_page(user=user, page_id=page_id)
        if not isinstance(blocks, list):
            raise ValidationError("blocks must be a list")

        by_id = {b.id: b for b in page.blocks}
        for raw in blocks:
            if not isinstance(raw, dict):
                raise ValidationError("blocks must contain objects")
            block = by_id.get(optional_int(raw.get("id"), "id"))
            if block is None:
                raise NotFoundError("Block not found")
            if "content" in raw:
                if not isinstance(raw["content"], dict):
                    raise ValidationError("content must be an object")
                block.content = raw["content"]
            if "order" in raw:
                block.order = optional_int(raw["order"], "order") or 0
            if "type" in raw:
                block.type = validate_string(raw["type"], "type", max_length=50, required=True)

        page.updated_at = now_local()
        db.session.commit()
        return sorted(page.blocks, key=lambda b: b.order)

    @staticmethod
    def delete_block(*, user: User, page_id: int, block_id) -> None:
        block_id = optional_int(block_id, "blockId")
        if not block_id:
            raise ValidationError("Block ID required")
        page = PageService.get_page(user=user, page_id=page_id)
        block = next((b for b in page.blocks if b.id == block_id), None)
        if block is None:
            raise NotFoundError("Not found")
        page.blocks.remove(block)
        page.updated_at = now_local()
        db.session.commit()

    @staticmethod
    def analyze_title(*, user: User, page_id: int) -> dict:
        page = PageService.get_page(user=user, page_id=page_id)
        blocks = list(page.blocks)

        lines = [f"[{b.type}]: {b.text.strip()}" for b in blocks if b.type in TEXT_BLOCK_TYPES and b.text.strip()]
        if not lines:
            return {"title": mood_board_title(), "source": "fallback"}

        chat = get_chat_client()
        if not chat.available:
            return {"title": generate_fallback_title(blocks), "source": "heuristic"}

        try:
            raw = chat.complete(
                system=TITLE_SYSTEM_PROMPT,
                prompt=_title_prompt("\n".join(lines[:SUMMARY_BLOCK_LIMIT])),
                max_tokens=TITLE_MAX_TOKENS,
            )
        except ProviderError as e:
            log.warning("Title generation failed for page %s: %s", page.id, e)
            return {"title": generate_fallback_title(blocks), "source": "heuristic"}

        title = clean_title(raw)
        if not title:
            return {"title": generate_fallback_title(blocks), "source": "heuristic"}
        return {"title": title, "source": "ai"}
