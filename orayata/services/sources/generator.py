# orayata/services/sources/generator.py
"""
Source generator collaborators.

The pipeline only needs something with generate(request) -> dict.
LLMSourceGenerator is the production implementation: it prompts an
LLM provider for a Torah study source and parses the JSON it returns.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from orayata.services.llm_service import LLMProvider, get_best_available_client

from .records import GenerationRequest

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are an expert in Torah study and Jewish learning. Generate authentic, "
    "accurate Torah sources with proper citations and Sefaria links. "
    "Always return valid JSON."
)


class SourceGenerator(ABC):
    """Anything that can turn a GenerationRequest into a raw source payload."""

    @abstractmethod
    def generate(self, request: GenerationRequest) -> Dict[str, Any]:
        """
        Generate one source.

        Returns:
            Raw payload dict (checked by the pipeline, not here)

        Raises:
            Any exception on failure; the pipeline reports it as
            GeneratorUnavailable.
        """
        pass


def build_prompt(request: GenerationRequest) -> str:
    """Build the user prompt for a generation request."""
    minutes = request.duration_minutes
    return f"""Generate a Torah study source with the following criteria:
- Topic: {request.topic}
- Study time: {minutes} minutes
- Difficulty: {request.difficulty}
- Language preference: {request.language}

Please provide a complete Torah source with:
1. Appropriate Torah reference (book, chapter, verse format)
2. Valid Sefaria link (https://www.sefaria.org/...)
3. Text excerpt in both English and Hebrew
4. Reflection prompts in both languages
5. Learning objectives
6. Prerequisites (if any)
7. Relevant commentaries

Ensure the Torah reference is accurate and the Sefaria link follows proper formatting.
Focus on authentic Jewish learning content appropriate for the specified difficulty level.

Return ONLY a JSON object with this exact structure:
{{
  "title": "English title",
  "title_he": "Hebrew title",
  "category": "{request.topic}",
  "subcategory": "specific subcategory",
  "source_type": "text_study",
  "start_ref": "Book Chapter:Verse",
  "end_ref": "Book Chapter:Verse",
  "sefaria_link": "https://www.sefaria.org/...",
  "text_excerpt": "English text excerpt",
  "text_excerpt_he": "Hebrew text excerpt",
  "reflection_prompt": "English reflection prompt",
  "reflection_prompt_he": "Hebrew reflection prompt",
  "estimated_time": {minutes},
  "difficulty_level": "{request.difficulty}",
  "learning_objectives": ["objective1", "objective2"],
  "prerequisites": ["prerequisite1"],
  "commentaries": ["commentary1", "commentary2"],
  "language_preference": "{request.language}"
}}"""


def parse_json_response(response: str) -> Dict[str, Any]:
    """
    Parse JSON from LLM response, handling markdown code blocks.

    Raises:
        ValueError: If the response is not a JSON object
    """
    response = (response or "").strip()

    # Handle markdown code blocks
    if response.startswith("```"):
        lines = response.split("\n")
        json_lines = []
        in_block = False
        for line in lines:
            if line.startswith("```") and not in_block:
                in_block = True
                continue
            if line.startswith("```") and in_block:
                break
            if in_block:
                json_lines.append(line)
        response = "\n".join(json_lines)

    try:
        data = json.loads(response)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse AI-generated source content: {e}")

    if not isinstance(data, dict):
        raise ValueError("AI-generated source content is not a JSON object")
    return data


class LLMSourceGenerator(SourceGenerator):
    """
    Generates sources with an LLM provider.

    Usage:
        generator = LLMSourceGenerator()
        payload = generator.generate(GenerationRequest("Shabbat", 15))
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ):
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _get_provider(self) -> LLMProvider:
        if self.provider is None:
            self.provider = get_best_available_client()
        if self.provider is None:
            raise RuntimeError("No LLM provider configured for source generation")
        return self.provider

    def generate(self, request: GenerationRequest) -> Dict[str, Any]:
        provider = self._get_provider()

        logger.info(f"Requesting source for topic={request.topic!r} ({request.duration_minutes} min)")
        content = provider.chat_completion(
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(request)},
            ],
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        logger.debug(f"Generated content: {content[:500]}")

        return parse_json_response(content)
