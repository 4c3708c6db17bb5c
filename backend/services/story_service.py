"""
Story Service - Children's-book text suggestions from Gemini
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

import google.generativeai as genai

from config import get_settings
from errors import StorySuggestionError

logger = logging.getLogger(__name__)

STORY_STYLES = ("classic", "rhyming", "adventure", "educational")
DEFAULT_TITLE = "Our Amazing Adventure"
PADDING_CAPTION = "A magical moment from our adventure."

STYLE_GUIDES = {
    "classic": (
        "Write 1-2 sentences of simple, engaging text.\n"
        "Use clear, straightforward language that flows naturally.\n"
        'Think: "We had so much fun at the beach!" or "The waves splashed and sparkled in the sun."'
    ),
    "rhyming": (
        "Write 2-4 lines of rhyming verse, like Dr. Seuss or children's poetry.\n"
        "Make it playful, rhythmic, and fun to read aloud.\n"
        'Example style: "We jumped and played beneath the sun, / Our beach adventure had begun!"'
    ),
    "adventure": (
        "Write 1-2 exciting, action-packed sentences.\n"
        "Use dynamic verbs and vivid descriptions.\n"
        "Make the reader feel the excitement and energy of the moment.\n"
        'Example: "We raced down the sandy hill, whooping with joy as the wind whipped through our hair!"'
    ),
    "educational": (
        "Write 1-2 sentences that teach something interesting.\n"
        "Weave in a fun fact or learning moment naturally.\n"
        'Example: "We spotted a hermit crab scuttling along! Did you know hermit crabs find empty shells '
        'to use as their homes?"'
    ),
}

STYLE_REQUIREMENTS = {
    "rhyming": "- Maintain rhythm and rhyme scheme",
    "adventure": "- Use exciting, vivid language",
    "educational": "- Include an interesting fact or learning moment",
}


@dataclass
class StoryContext:
    page_number: int
    total_pages: int
    book_title: str
    location_name: Optional[str] = None
    previous_page_text: Optional[str] = None
    style: str = "classic"


def _text_model():
    settings = get_settings()
    genai.configure(api_key=settings.gemini_api_key)
    return genai.GenerativeModel(model_name=settings.gemini_text_model)


def _generate(prompt: str) -> str:
    timeout = get_settings().http_timeout_seconds
    response = _text_model().generate_content(prompt, request_options={"timeout": timeout})
    if not response.text:
        raise ValueError("Gemini returned an empty response.")
    return response.text.strip()


def build_story_prompt(image_description: str, context: StoryContext) -> str:
    style = context.style if context.style in STYLE_GUIDES else "classic"
    lines = [
        f'You are writing a children\'s storybook called "{context.book_title}".',
        f"This is page {context.page_number} of {context.total_pages}.",
    ]
    if context.location_name:
        lines.append(f"The location for this page is: {context.location_name}")
    if context.previous_page_text:
        lines.append(f'The previous page said: "{context.previous_page_text}"')
    lines += [
        "",
        f"The image shows: {image_description}",
        "",
        f"STORY STYLE: {style}",
        STYLE_GUIDES[style],
        "",
        "Requirements:",
        "- Age-appropriate for 4-8 year olds",
        "- Positive and encouraging tone",
        "- Fun to read aloud",
        "- Connect to the image details",
    ]
    if style in STYLE_REQUIREMENTS:
        lines.append(STYLE_REQUIREMENTS[style])
    lines += ["", "Only return the story text, nothing else."]
    return "\n".join(lines)


def suggest_story_text(image_description: str, context: StoryContext) -> str:
    """
    Raises:
        StorySuggestionError: if the provider call fails
    """
    prompt = build_story_prompt(image_description or "a family enjoying their vacation adventure", context)
    try:
        return _generate(prompt)
    except Exception as e:
        logger.exception(f"Error generating story text for page {context.page_number}")
        raise StorySuggestionError("Failed to generate story suggestion") from e


def suggest_book_title(locations: List[str]) -> str:
    prompt = (
        "Generate a creative, fun title for a children's storybook about a family vacation.\n"
        f"The vacation included these locations: {', '.join(locations)}\n\n"
        "The title should be:\n"
        "- Exciting and adventurous\n"
        "- Age-appropriate (4-8 years old)\n"
        "- 3-6 words long\n"
        "- Capture the magic of family travel\n\n"
        "Only return the title, nothing else."
    )
    try:
        return _generate(prompt)
    except Exception as e:
        logger.error(f"Error generating book title: {e}")
        return DEFAULT_TITLE


def _fallback_captions(page_count: int) -> List[str]:
    captions = []
    for i in range(page_count):
        if i == 0:
            captions.append("Once upon a time, our adventure began...")
        elif i == page_count - 1:
            captions.append("And they lived happily ever after.")
        else:
            captions.append(f"A wonderful moment from page {i + 1} of our adventure.")
    return captions


def parse_captions(text: str, page_count: int) -> List[str]:
    """JSON array if present, otherwise one caption per line; padded/truncated to page_count."""
    match = re.search(r"\[[\s\S]*\]", text)
    if match:
        suggestions = json.loads(match.group(0))
        if not isinstance(suggestions, list):
            raise ValueError("Expected a JSON array of captions")
        suggestions = [str(s) for s in suggestions]
    else:
        suggestions = []
        for line in text.split("\n"):
            line = re.sub(r"^[0-9]+\.\s*", "", line.strip())
            line = re.sub(r"^[\"']|[\"']$", "", line).strip()
            if line:
                suggestions.append(line)

    while len(suggestions) < page_count:
        suggestions.append(PADDING_CAPTION)
    return suggestions[:page_count]


def suggest_story_batch(book_title: str, page_count: int, context: Optional[str] = None) -> List[str]:
    """
    Exactly `page_count` captions forming one narrative arc.

    Raises:
        StorySuggestionError: if the provider call fails (unparseable output falls back to generic captions)
    """
    prompt = (
        "You are a children's storybook author. I need you to write a warm, engaging story for a family "
        f'photo book titled "{book_title}" with {page_count} pages.\n\n'
        "Guidelines:\n"
        f"- Write EXACTLY {page_count} captions, one for each page\n"
        "- Each caption should be 1-2 sentences (under 150 characters)\n"
        "- Use warm, whimsical language appropriate for a children's bedtime story\n"
        "- Create a narrative arc: beginning -> middle -> end\n"
        "- Use the child's perspective when possible\n"
        "- Make it feel magical, loving, and adventurous\n"
        "- Since this is a photo book, reference moments, memories, and family experiences"
    )
    if context:
        prompt += f"\n\nAdditional context: {context}"
    prompt += (
        "\n\nReturn your response as a JSON array of strings, one caption for each page, in order. "
        "Only return the JSON array, nothing else.\n\n"
        f'Now generate {page_count} captions for "{book_title}":'
    )

    try:
        text = _generate(prompt)
    except Exception as e:
        logger.exception(f"Error generating story suggestions for '{book_title}'")
        raise StorySuggestionError("Failed to generate story suggestions") from e

    try:
        return parse_captions(text, page_count)
    except ValueError as e:
        logger.warning(f"Failed to parse suggestions, using generic captions: {e}")
        return _fallback_captions(page_count)
