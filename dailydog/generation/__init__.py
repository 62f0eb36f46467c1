"""
AI article generation module
"""

from .errors import GenerationError, GenerationTimeoutError, QuotaExceededError
from .providers import LLMProvider, OpenAIProvider, OllamaProvider, GeneratedImage
from .images import ImageStore, generate_image_filename
from .generator import ArticleGenerator, GeneratedArticle, get_generator

__all__ = [
    "GenerationError",
    "GenerationTimeoutError",
    "QuotaExceededError",
    "LLMProvider",
    "OpenAIProvider",
    "OllamaProvider",
    "GeneratedImage",
    "ImageStore",
    "generate_image_filename",
    "ArticleGenerator",
    "GeneratedArticle",
    "get_generator",
]
