from __future__ import annotations

from datetime import date

import pytest

from opsdesk.core.exceptions import NotFoundError, ValidationError
from opsdesk.models.page import Block
from opsdesk.services.page_service import (
    PageService,
    clean_title,
    generate_fallback_title,
    mood_board_title,
)

TODAY = date(2026, 3, 2)


def _blocks(*pairs):
    return [Block(type=kind, content={"text": text}, order=i) for i, (kind, text) in enumerate(pairs)]


def test_new_page_gets_defaults_and_empty_text_block(staff):
    page = PageService.create_page(user=staff, data={})

    assert page.title == "Untitled"
    assert page.icon == "📄"
    assert [(b.type, b.content, b.order) for b in page.blocks] == [("text", {"text": ""}, 0)]


def test_pages_are_owner_scoped(staff, make_user):
    page = PageService.create_page(user=staff, data={"title": "Mine"})
    with pytest.raises(NotFoundError, match="Not found"):
        PageService.get_page(user=make_user(), page_id=page.id)


def test_add_block_appends_after_last_order(staff):
    page = PageService.create_page(user=staff, data={})

    block = PageService.add_block(user=staff, page_id=page.id, data={"type": "heading1", "content": {"text": "Hi"}})

    assert block.order == 1
    assert block.type == "heading1"


def test_update_blocks_in_bulk(staff):
    page = PageService.create_page(user=staff, data={})
    first = page.blocks[0]
    second = PageService.add_block(user=staff, page_id=page.id, data={"content": {"text": "two"}})

    result = PageService.update_blocks(
        user=staff,
        page_id=page.id,
        blocks=[{"id": first.id, "order": 5, "content": {"text": "one"}}, {"id": second.id, "order": 0}],
    )

    assert [b.id for b in result] == [second.id, first.id]
    assert first.content == {"text": "one"}
    with pytest.raises(NotFoundError, match="Block not found"):
        PageService.update_blocks(user=staff, page_id=page.id, blocks=[{"id": 999}])


def test_delete_block_needs_id(staff):
    page = PageService.create_page(user=staff, data={})
    with pytest.raises(ValidationError, match="Block ID required"):
        PageService.delete_block(user=staff, page_id=page.id, block_id=None)
    PageService.delete_block(user=staff, page_id=page.id, block_id=str(page.blocks[0].id))
    assert page.blocks == []


def test_fallback_title_priorities():
    assert generate_fallback_title(_blocks(("text", "some body text"), ("heading1", "Big Idea")), TODAY) == "Big Idea"
    assert generate_fallback_title(_blocks(("text", "body text"), ("sticky_note", "Remember")), TODAY) == "Remember"
    assert generate_fallback_title(_blocks(("text", "a" * 40)), TODAY) == "a" * 27 + "..."
    assert generate_fallback_title(_blocks(("text", "tiny")), TODAY) == "Mood Board 3/2/2026"


def test_mood_board_title():
    assert mood_board_title(TODAY) == "Mood Board 3/2/2026"


def test_clean_title_strips_quotes_and_extra_lines():
    assert clean_title('"Sunset Vibes"\nSecond line') == "Sunset Vibes"
    assert clean_title("x" * 60) == "x" * 47 + "..."


def test_analyze_title_without_text_uses_mood_board(staff):
    page = PageService.create_page(user=staff, data={})
    result = PageService.analyze_title(user=staff, page_id=page.id)
    assert result["source"] == "fallback"
    assert result["title"].startswith("Mood Board ")


def test_analyze_title_without_key_uses_heuristic(staff):
    page = PageService.create_page(user=staff, data={})
    PageService.add_block(user=staff, page_id=page.id, data={"type": "heading1", "content": {"text": "Beach Trip"}})

    assert PageService.analyze_title(user=staff, page_id=page.id) == {"title": "Beach Trip", "source": "heuristic"}


def test_analyze_title_uses_model_reply(staff, fake_chat):
    fake = fake_chat(['"Ocean Calm"'])
    page = PageService.create_page(user=staff, data={})
    PageService.add_block(user=staff, page_id=page.id, data={"type": "text", "content": {"text": "waves and sand"}})

    result = PageService.analyze_title(user=staff, page_id=page.id)

    assert result == {"title": "Ocean Calm", "source": "ai"}
    assert "[text]: waves and sand" in fake.calls[0]["prompt"]
    assert fake.calls[0]["max_tokens"] == 30


def test_analyze_title_provider_failure_falls_back(staff, fake_chat):
    fake_chat(error="timeout")
    page = PageService.create_page(user=staff, data={})
    PageService.add_block(user=staff, page_id=page.id, data={"type": "sticky_note", "content": {"text": "Buy paint"}})

    assert PageService.analyze_title(user=staff, page_id=page.id) == {"title": "Buy paint", "source": "heuristic"}


def test_page_endpoints(client, staff, login):
    login(staff)
    created = client.post("/api/pages", json={"title": "Board"})
    assert created.status_code == 201
    page = created.get_json()
    assert len(page["blocks"]) == 1

    renamed = client.patch(f"/api/pages/{page['id']}", json={"title": "Renamed"})
    assert renamed.get_json()["title"] == "Renamed"
    assert client.delete(f"/api/pages/{page['id']}/blocks").status_code == 400
    assert client.delete(f"/api/pages/{page['id']}").get_json() == {"success": True}
    assert client.get(f"/api/pages/{page['id']}").status_code == 404
