"""
Article generator tests (no network; fake providers)
"""

import base64
import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from dailydog.generation import (
    ArticleGenerator,
    GenerationError,
    GenerationTimeoutError,
    QuotaExceededError,
)
from dailydog.generation.generator import (
    DEFAULT_EXCERPT,
    parse_response,
    strip_code_fence,
    truncate_title,
)
from dailydog.generation.images import ImageStore, generate_image_filename
from dailydog.generation.providers import GeneratedImage, LLMProvider, OpenAIProvider


class FakeProvider(LLMProvider):
    name = "fake"

    def __init__(self, response="", error=None, image=None, image_error=None):
        self.response = response
        self.error = error
        self.image = image
        self.image_error = image_error
        self.calls = []
        self.image_timeouts = []

    def complete(self, system, user, timeout):
        self.calls.append((system, user, timeout))
        if self.error:
            raise self.error
        return self.response

    def generate_image(self, prompt, timeout):
        self.image_timeouts.append(timeout)
        if self.image_error:
            raise self.image_error
        return self.image


class FakeClock:
    """Returns the given readings in order, then repeats the last one"""

    def __init__(self, *readings):
        self.readings = list(readings)

    def __call__(self):
        if len(self.readings) > 1:
            return self.readings.pop(0)
        return self.readings[0]


class RecordingHttp:
    def __init__(self):
        self.timeouts = []

    def get(self, url, timeout=None):
        self.timeouts.append(timeout)
        return httpx.Response(200, content=b"downloaded", request=httpx.Request("GET", url))


def _json_response(**fields):
    data = {
        "title": "Council Approves New Park",
        "excerpt": "The city council voted to build a park downtown.",
        "content": "<p>The council voted on Tuesday.</p>",
    }
    data.update(fields)
    return json.dumps(data)


class TestParsing:
    """Response parsing helpers"""

    def test_strip_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strip_plain_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_unfenced_text_unchanged(self):
        assert strip_code_fence('  {"a": 1} ') == '{"a": 1}'

    def test_truncate_title(self):
        assert truncate_title("x" * 70) == "x" * 70
        truncated = truncate_title("x" * 80)
        assert len(truncated) == 70
        assert truncated.endswith("...")

    def test_heuristic_fallback(self):
        raw = "Storm hits the coast overnight with heavy rain.\n\nResidents were evacuated."
        data = parse_response(raw)

        assert data["title"] == "Storm hits the coast overnight with heavy rain."
        assert data["excerpt"] == "Storm hits the coast overnight with heavy rain."
        assert data["content"] == raw

    def test_heuristic_title_drops_heading_marks(self):
        assert parse_response("## Storm Hits Coast\n\nBody")["title"] == "Storm Hits Coast"

    def test_heuristic_short_paragraph_uses_default_excerpt(self):
        data = parse_response("Short")
        assert data["excerpt"] == DEFAULT_EXCERPT


class TestArticleGenerator:
    """ArticleGenerator tests"""

    def test_json_fields_pass_through(self):
        generator = ArticleGenerator(FakeProvider(_json_response(imageUrl="https://img.example/x.jpg")))
        article = generator.generate("The council approved a park.")

        assert article.title == "Council Approves New Park"
        assert article.excerpt == "The city council voted to build a park downtown."
        assert article.content == "<p>The council voted on Tuesday.</p>"
        assert article.image_url == "https://img.example/x.jpg"

    def test_long_title_truncated(self):
        generator = ArticleGenerator(FakeProvider(_json_response(title="T" * 100)))
        article = generator.generate("source")

        assert len(article.title) == 70
        assert article.title.endswith("...")

    def test_fenced_json(self):
        generator = ArticleGenerator(FakeProvider("```json\n" + _json_response() + "\n```"))
        assert generator.generate("source").title == "Council Approves New Park"

    def test_non_json_still_produces_draft(self):
        generator = ArticleGenerator(FakeProvider("Just some prose about the news of the day, nothing structured."))
        article = generator.generate("source")

        assert article.title
        assert article.excerpt
        assert article.content

    def test_source_text_in_prompt(self):
        provider = FakeProvider(_json_response())
        ArticleGenerator(provider, timeout=12.0).generate("Unique source sentence")

        _, user, timeout = provider.calls[0]
        assert "Unique source sentence" in user
        assert timeout == 12.0

    def test_empty_source_rejected(self):
        generator = ArticleGenerator(FakeProvider(_json_response()))
        with pytest.raises(ValueError):
            generator.generate("   ")

    def test_not_configured(self):
        generator = ArticleGenerator(None)
        assert not generator.is_configured
        with pytest.raises(GenerationError):
            generator.generate("source")

    def test_provider_timeout_propagates(self):
        generator = ArticleGenerator(FakeProvider(error=GenerationTimeoutError("slow")))
        with pytest.raises(GenerationTimeoutError):
            generator.generate("source")

    def test_source_image_fallback(self):
        generator = ArticleGenerator(FakeProvider(_json_response()))
        article = generator.generate("source", source_image_url="https://src.example/a.png")
        assert article.image_url == "https://src.example/a.png"

    def test_no_image_at_all(self):
        generator = ArticleGenerator(FakeProvider(_json_response()))
        assert generator.generate("source").image_url is None

    def test_generated_image_is_stored(self, tmp_path):
        image = GeneratedImage(b64_json=base64.b64encode(b"fake-png").decode())
        generator = ArticleGenerator(
            FakeProvider(_json_response(imageUrl="https://img.example/x.jpg"), image=image),
            image_store=ImageStore(tmp_path),
            generate_images=True,
        )
        article = generator.generate("source", source_image_url="https://src.example/a.png")

        assert article.image_url.startswith("/media/council-approves-new-park-")
        stored = list(tmp_path.iterdir())
        assert len(stored) == 1
        assert stored[0].read_bytes() == b"fake-png"

    def test_image_failure_falls_back(self, tmp_path):
        generator = ArticleGenerator(
            FakeProvider(_json_response(), image_error=RuntimeError("image service down")),
            image_store=ImageStore(tmp_path),
            generate_images=True,
        )
        article = generator.generate("source", source_image_url="https://src.example/a.png")
        assert article.image_url == "https://src.example/a.png"


class TestGenerationDeadline:
    """The image step only gets the time the text call left"""

    def test_image_request_gets_remaining_time(self, tmp_path):
        provider = FakeProvider(
            _json_response(), image=GeneratedImage(b64_json=base64.b64encode(b"png").decode())
        )
        generator = ArticleGenerator(
            provider, image_store=ImageStore(tmp_path), timeout=60.0,
            generate_images=True, clock=FakeClock(0.0, 45.0),
        )
        generator.generate("source")

        assert provider.calls[0][2] == 60.0
        assert provider.image_timeouts == [15.0]

    def test_no_time_left_skips_image(self, tmp_path):
        provider = FakeProvider(
            _json_response(), image=GeneratedImage(b64_json=base64.b64encode(b"png").decode())
        )
        generator = ArticleGenerator(
            provider, image_store=ImageStore(tmp_path), timeout=60.0,
            generate_images=True, clock=FakeClock(0.0, 61.0),
        )
        article = generator.generate("source", source_image_url="https://src.example/a.png")

        assert provider.image_timeouts == []
        assert article.image_url == "https://src.example/a.png"
        assert list(tmp_path.iterdir()) == []

    def test_download_gets_remaining_time(self, tmp_path):
        http = RecordingHttp()
        provider = FakeProvider(_json_response(), image=GeneratedImage(url="https://img.example/gen.png"))
        generator = ArticleGenerator(
            provider, image_store=ImageStore(tmp_path, http_client=http), timeout=60.0,
            generate_images=True, clock=FakeClock(0.0, 10.0, 50.0),
        )
        article = generator.generate("source")

        assert provider.image_timeouts == [50.0]
        assert http.timeouts == [10.0]
        assert article.image_url.endswith(".png")

    def test_store_default_caps_download(self, tmp_path):
        http = RecordingHttp()
        store = ImageStore(tmp_path, timeout=30.0, http_client=http)
        store.save_from_url("https://img.example/a.jpg", "a", timeout=100.0)
        store.save_from_url("https://img.example/b.jpg", "b")

        assert http.timeouts == [30.0, 30.0]


class TestOpenAIProvider:
    """OpenAI error mapping with a fake SDK client"""

    REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")

    def _provider(self, create):
        client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        return OpenAIProvider(api_key="test", client=client)

    def test_timeout_maps(self):
        def create(**kwargs):
            raise openai.APITimeoutError(request=self.REQUEST)

        with pytest.raises(GenerationTimeoutError):
            self._provider(create).complete("system", "user", timeout=5)

    def test_rate_limit_maps_to_quota(self):
        def create(**kwargs):
            raise openai.RateLimitError(
                "quota", response=httpx.Response(429, request=self.REQUEST), body=None
            )

        with pytest.raises(QuotaExceededError):
            self._provider(create).complete("system", "user", timeout=5)

    def test_timeout_passed_to_sdk(self):
        seen = {}

        def create(**kwargs):
            seen.update(kwargs)
            message = SimpleNamespace(content='{"title": "ok"}')
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

        assert self._provider(create).complete("system", "user", timeout=7) == '{"title": "ok"}'
        assert seen["timeout"] == 7

    def test_empty_response(self):
        def create(**kwargs):
            return SimpleNamespace(choices=[])

        with pytest.raises(GenerationError):
            self._provider(create).complete("system", "user", timeout=5)


class TestImageFilename:
    """generate_image_filename tests"""

    def test_safe_characters(self):
        assert generate_image_filename("Hello, World! 2024") == "hello-world-2024"

    def test_length_capped(self):
        assert len(generate_image_filename("word " * 40)) == 50

    def test_empty(self):
        assert generate_image_filename("!!!") == "image"
