"""
AI-assisted article drafting
"""

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup

from ..config import settings
from .errors import GenerationError
from .images import ImageStore, generate_image_filename
from .providers import LLMProvider, OpenAIProvider, OllamaProvider

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 70
EXCERPT_MAX_LENGTH = 150
DEFAULT_TITLE = "Breaking News Update"
DEFAULT_EXCERPT = "Recent developments have sparked significant discussion and analysis."

SYSTEM_PROMPT = f"""You are a news writer for "The Daily Dog".

Turn the social media post you are given into a professional, well-structured,
fact-based news article with a journalistic tone.

Respond with JSON only, using these fields:
{{
  "title": "Compelling headline (max {TITLE_MAX_LENGTH} characters)",
  "excerpt": "Brief summary (max {EXCERPT_MAX_LENGTH} characters)",
  "content": "Full article in HTML: 3-5 paragraphs using <p>, <h2>, <h3>",
  "imageUrl": "Optional URL of a relevant image, or null"
}}

If you cite facts or external sources, end the HTML with a references section
in exactly this structure:

<h2>References</h2>
<ol>
  <li id="ref-1"><a href="https://example.com">Source title 1</a></li>
  <li id="ref-2"><a href="https://example2.com">Source title 2</a></li>
</ol>

Reference sources inline with plain bracketed markers like [1], [2] right after
the relevant sentence. Do not use footnote symbols or unicode objects."""

USER_PROMPT = "Please transform this post into a professional news article:\n\n{source_text}"

IMAGE_PROMPT = (
    "Editorial news photograph illustrating the story: {title}. {excerpt} "
    "No text, captions or logos."
)

_CODE_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


@dataclass
class GeneratedArticle:
    title: str
    excerpt: str
    content: str
    image_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "excerpt": self.excerpt,
            "content": self.content,
            "imageUrl": self.image_url,
        }


def strip_code_fence(text: str) -> str:
    """Remove a markdown ``` / ```json wrapper if present"""
    match = _CODE_FENCE.match(text)
    return match.group(1).strip() if match else text.strip()


def truncate_title(title: str, limit: int = TITLE_MAX_LENGTH) -> str:
    if len(title) <= limit:
        return title
    return title[:limit - 3] + "..."


def extract_title(text: str) -> str:
    """First non-empty line, without markdown heading marks"""
    for line in text.splitlines():
        line = re.sub(r"^#+\s*", "", line.strip())
        if line:
            return truncate_title(line)
    return DEFAULT_TITLE


def extract_excerpt(text: str) -> str:
    """First paragraph with markup stripped"""
    first = text.split("\n\n")[0]
    plain = BeautifulSoup(first, "html.parser").get_text(" ", strip=True)
    if len(plain) > 20:
        return plain[:EXCERPT_MAX_LENGTH] + ("..." if len(plain) > EXCERPT_MAX_LENGTH else "")
    return DEFAULT_EXCERPT


def parse_response(raw: str) -> dict:
    """
    Provider text -> {title, excerpt, content, imageUrl}

    Structured JSON is used as-is; anything else goes through heuristic
    extraction so a usable draft always comes back.
    """
    text = strip_code_fence(raw)
    try:
        data = json.loads(text)
        if isinstance(data, dict):
            return data
        logger.warning("Generated JSON is not an object; using heuristic extraction")
    except ValueError:
        logger.warning("Generated response is not JSON; using heuristic extraction")

    return {
        "title": extract_title(text),
        "excerpt": extract_excerpt(text),
        "content": text,
    }


def _text_field(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


class ArticleGenerator:
    """Drafts articles from source text through an LLM provider"""

    def __init__(
        self,
        provider: Optional[LLMProvider],
        image_store: Optional[ImageStore] = None,
        timeout: float = 60.0,
        generate_images: bool = False,
        clock=time.monotonic
    ):
        """
        Args:
            provider: LLM provider; None means generation is not configured
            image_store: where generated images are persisted
            timeout: deadline in seconds for the whole draft, image included
            generate_images: also request an illustration from the provider
            clock: monotonic time source
        """
        self.provider = provider
        self.image_store = image_store
        self.timeout = timeout
        self.generate_images = generate_images
        self.clock = clock

    @property
    def is_configured(self) -> bool:
        return self.provider is not None

    def generate(self, source_text: str, source_image_url: Optional[str] = None) -> GeneratedArticle:
        """
        Draft an article

        Raises:
            ValueError: empty source text
            GenerationTimeoutError: provider deadline exceeded
            QuotaExceededError: provider quota exhausted
            GenerationError: not configured or any other provider failure
        """
        if not source_text or not source_text.strip():
            raise ValueError("Source text is required")
        if self.provider is None:
            raise GenerationError("Article generation provider not configured")

        deadline = self.clock() + self.timeout
        raw = self.provider.complete(
            SYSTEM_PROMPT,
            USER_PROMPT.format(source_text=source_text),
            timeout=self.timeout,
        )
        data = parse_response(raw)

        title = truncate_title(_text_field(data, "title") or DEFAULT_TITLE)
        excerpt = _text_field(data, "excerpt") or DEFAULT_EXCERPT
        content = _text_field(data, "content") or raw

        image_url = (
            self._create_image(title, excerpt, deadline)
            or _text_field(data, "imageUrl")
            or source_image_url
            or None
        )

        logger.info("Article generated by %s: '%s'", self.provider.name, title)
        return GeneratedArticle(title=title, excerpt=excerpt, content=content, image_url=image_url)

    def _create_image(self, title: str, excerpt: str, deadline: float) -> Optional[str]:
        """Generate and persist an illustration within what is left of ``deadline``; None on any failure"""
        if not self.generate_images or self.image_store is None:
            return None

        remaining = deadline - self.clock()
        if remaining <= 0:
            logger.warning("No time left for image generation; falling back")
            return None

        try:
            image = self.provider.generate_image(
                IMAGE_PROMPT.format(title=title, excerpt=excerpt),
                timeout=remaining,
            )
            if image is None:
                return None

            filename = generate_image_filename(title)
            if image.b64_json:
                return self.image_store.save_base64(image.b64_json, filename)
            if image.url:
                remaining = deadline - self.clock()
                if remaining <= 0:
                    logger.warning("No time left to download the generated image; falling back")
                    return None
                return self.image_store.save_from_url(image.url, filename, timeout=remaining)
            return None

        except Exception as e:
            logger.warning("Image generation failed, falling back: %s", e)
            return None


_generator: Optional[ArticleGenerator] = None


def build_provider() -> Optional[LLMProvider]:
    """Provider from settings; None when not configured"""
    if settings.llm_provider == "ollama":
        return OllamaProvider(
            model=settings.ollama_model,
            host=settings.ollama_host,
            timeout=settings.generation_timeout,
        )
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; article generation disabled")
        return None
    return OpenAIProvider(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        image_model=settings.openai_image_model,
    )


def get_generator() -> ArticleGenerator:
    """Return the generator singleton"""
    global _generator
    if _generator is None:
        _generator = ArticleGenerator(
            provider=build_provider(),
            image_store=ImageStore(settings.media_dir),
            timeout=settings.generation_timeout,
            generate_images=settings.generate_images,
        )
    return _generator
