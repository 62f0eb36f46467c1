"""JSON API request bodies (camelCase on the wire)"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from dailydog.publishing import ArticleInput, normalize_topics


class ArticlePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    slug: Optional[str] = None
    excerpt: str = ""
    content: str = ""
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    source_text: Optional[str] = Field(default=None, alias="sourceText")
    source_image_url: Optional[str] = Field(default=None, alias="sourceImageUrl")
    topics: Optional[list[Any]] = None
    topic: Optional[str] = None
    is_featured: bool = Field(default=False, alias="isFeatured")
    publish: bool = False

    def to_input(self) -> ArticleInput:
        return ArticleInput(
            title=self.title,
            slug=self.slug,
            excerpt=self.excerpt,
            content=self.content,
            image_url=self.image_url,
            source_text=self.source_text,
            source_image_url=self.source_image_url,
            topics=normalize_topics(self.topics, self.topic),
            is_featured=self.is_featured,
            publish=self.publish,
        )


class GeneratePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_text: Optional[str] = Field(default=None, alias="sourceText")
    source_image_url: Optional[str] = Field(default=None, alias="sourceImageUrl")


class SubscribePayload(BaseModel):
    email: Optional[str] = None
    source: Optional[str] = None


class UnsubscribePayload(BaseModel):
    email: Optional[str] = None
