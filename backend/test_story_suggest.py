from unittest.mock import patch

import pytest

from services import story_service
from services.story_service import StoryContext, build_story_prompt, parse_captions


@pytest.fixture
def gemini_text():
    with patch("services.story_service._generate") as generate:
        yield generate


def test_prompt_includes_context_and_style():
    prompt = build_story_prompt(
        "kids building a sandcastle",
        StoryContext(page_number=2, total_pages=8, book_title="Beach Trip",
                     location_name="Malibu", previous_page_text="We arrived!", style="rhyming"),
    )

    assert 'called "Beach Trip"' in prompt
    assert "This is page 2 of 8." in prompt
    assert "The location for this page is: Malibu" in prompt
    assert 'The previous page said: "We arrived!"' in prompt
    assert "STORY STYLE: rhyming" in prompt
    assert "- Maintain rhythm and rhyme scheme" in prompt
    assert "Age-appropriate for 4-8 year olds" in prompt


def test_parse_captions_from_json_array():
    text = 'Sure! ["One", "Two", "Three", "Four"]'
    assert parse_captions(text, 3) == ["One", "Two", "Three"]


def test_parse_captions_from_lines_and_padding():
    text = '1. "We packed the car."\n2. The road was long.\n'
    assert parse_captions(text, 3) == [
        "We packed the car.",
        "The road was long.",
        "A magical moment from our adventure.",
    ]


def test_batch_falls_back_on_unparseable_json(gemini_text):
    gemini_text.return_value = "[not valid json]"
    captions = story_service.suggest_story_batch("Beach Trip", 3)
    assert captions == [
        "Once upon a time, our adventure began...",
        "A wonderful moment from page 2 of our adventure.",
        "And they lived happily ever after.",
    ]


def test_title_falls_back_on_failure(gemini_text):
    gemini_text.side_effect = RuntimeError("quota")
    assert story_service.suggest_book_title(["Paris"]) == "Our Amazing Adventure"


# ============================================
# Endpoints
# ============================================

def test_story_suggest_endpoint(client, gemini_text):
    gemini_text.return_value = "The waves splashed and sparkled in the sun."

    response = client.post(
        "/api/story-suggest",
        json={"bookTitle": "Beach Trip", "pageNumber": 1, "totalPages": 6, "style": "classic"},
    )

    assert response.status_code == 200
    assert response.json() == {"suggestion": "The waves splashed and sparkled in the sun."}
    prompt = gemini_text.call_args[0][0]
    assert "a family enjoying their vacation adventure" in prompt


def test_story_suggest_missing_fields(client, gemini_text):
    response = client.post("/api/story-suggest", json={"bookTitle": "Beach Trip"})

    assert response.status_code == 400
    assert "error" in response.json()
    gemini_text.assert_not_called()


def test_story_suggest_provider_failure(client, gemini_text):
    gemini_text.side_effect = RuntimeError("boom")

    response = client.post("/api/story-suggest", json={"bookTitle": "T", "pageNumber": 1, "totalPages": 2})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate story suggestion"}


def test_batch_endpoint(client, gemini_text):
    gemini_text.return_value = '["A", "B"]'

    response = client.post("/api/story-suggest/batch", json={"bookTitle": "Trip", "pageCount": 3})

    assert response.status_code == 200
    assert response.json() == {"suggestions": ["A", "B", "A magical moment from our adventure."]}


def test_batch_endpoint_validation(client):
    assert client.post("/api/story-suggest/batch", json={"pageCount": 3}).status_code == 400
    assert client.post("/api/story-suggest/batch", json={"bookTitle": "T", "pageCount": 0}).status_code == 400


def test_title_endpoint(client, gemini_text):
    gemini_text.return_value = "The Great Family Road Trip"

    response = client.post("/api/story-suggest/title", json={"locations": ["Paris", "Rome"]})

    assert response.json() == {"title": "The Great Family Road Trip"}
    assert "Paris, Rome" in gemini_text.call_args[0][0]
