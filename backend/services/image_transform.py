"""
Image Transform - Turns vacation photos into storybook illustrations.

`ImageTransformer` is the capability the rest of the app depends on; the
Gemini implementation is the production provider and tests substitute their own.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

import google.generativeai as genai

from config import get_settings
from errors import TransformError

logger = logging.getLogger(__name__)

MAX_CHARACTER_REFERENCES = 5  # Gemini multi-image limit

STYLE_DESCRIPTIONS = {
    "disney": "Disney animated movie style with vibrant colors, expressive characters, and magical atmosphere",
    "pixar": "Pixar 3D animation style with realistic lighting, depth, and emotion",
    "watercolor": "Soft watercolor children's book illustration with gentle colors",
    "storybook": "Classic storybook illustration style with warm, inviting tones",
}


@dataclass
class ReferenceImage:
    data: bytes
    mime_type: str = "image/jpeg"


@dataclass
class TransformOptions:
    style: str = "disney"
    character_references: List[ReferenceImage] = field(default_factory=list)
    additional_prompt: str = ""

    def __post_init__(self):
        if self.style not in STYLE_DESCRIPTIONS:
            raise ValueError(f"Unknown illustration style: {self.style}")
        if len(self.character_references) > MAX_CHARACTER_REFERENCES:
            raise ValueError(f"At most {MAX_CHARACTER_REFERENCES} character references are supported")


@dataclass
class TransformedImage:
    data: bytes
    mime_type: str = "image/png"


def build_transform_prompt(options: TransformOptions) -> str:
    lines = [
        f"Transform this photo into a {STYLE_DESCRIPTIONS[options.style]} cartoon illustration.",
        "Maintain the overall scene composition and key elements.",
        "Make it suitable for a children's storybook with a warm, adventurous feel.",
    ]
    if options.character_references:
        lines.append("Keep the characters' appearances consistent with the reference images provided.")
    if options.additional_prompt:
        lines.append(options.additional_prompt)
    return "\n".join(lines)


class ImageTransformer(ABC):
    """Photo in, illustration out."""

    @abstractmethod
    def transform(self, image_bytes: bytes, mime_type: str, options: TransformOptions) -> TransformedImage:
        """
        Raises:
            TransformError: if the provider cannot produce an illustration
        """


class GeminiImageTransformer(ImageTransformer):
    def __init__(self, api_key: str, model_name: str, timeout: float = 120.0):
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY not configured")
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name=model_name)
        self.model_name = model_name
        self.timeout = timeout

    def transform(self, image_bytes: bytes, mime_type: str, options: TransformOptions) -> TransformedImage:
        prompt_parts = [build_transform_prompt(options), {"mime_type": mime_type, "data": image_bytes}]
        for reference in options.character_references:
            prompt_parts.append({"mime_type": reference.mime_type, "data": reference.data})

        logger.info(
            f"Sending transform request to {self.model_name} "
            f"({len(image_bytes)} bytes, {len(options.character_references)} references)"
        )
        try:
            response = self.model.generate_content(prompt_parts, request_options={"timeout": self.timeout})
        except Exception as e:
            logger.error(f"Gemini image request failed: {e}")
            raise TransformError(str(e)) from e

        generated = _extract_inline_image(response)
        if generated is None:
            raise TransformError("No image generated in API response")
        return generated


def _extract_inline_image(response) -> Optional[TransformedImage]:
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return TransformedImage(data=inline.data, mime_type=inline.mime_type or "image/png")
    return None


def get_transformer() -> ImageTransformer:
    settings = get_settings()
    return GeminiImageTransformer(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_image_model,
    )
