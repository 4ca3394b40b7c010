from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .utils import parse_date

SortField = Literal["RESMI_GAZETE_TARIHI", "KAYIT_TARIHI", "MEVZUAT_NUMARASI"]
SortDirection = Literal["asc", "desc"]
SearchType = Literal["fulltext", "title"]

MEVZUAT_TURLERI: tuple[str, ...] = (
    "KANUN",
    "CB_KARARNAME",
    "YONETMELIK",
    "CB_YONETMELIK",
    "CB_KARAR",
    "CB_GENELGE",
    "KHK",
    "TUZUK",
    "KKY",
    "UY",
    "TEBLIGLER",
    "MULGA",
)


class CamelModel(BaseModel):
    """Base for payloads exchanged in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class MevzuatTur(CamelModel):
    id: int | None = None
    name: str = ""
    description: str = ""


class MevzuatDocument(CamelModel):
    """Document reference as returned by the legislation search service."""

    mevzuat_id: str
    mevzuat_adi: str = ""
    mevzuat_no: str | None = None
    mevzuat_tur: MevzuatTur | None = None
    resmi_gazete_tarihi: str | None = None
    resmi_gazete_sayisi: str | None = None
    url: str | None = None
    content: str | None = None
    authority: str | None = None

    @property
    def publication_date(self) -> date | None:
        return parse_date(self.resmi_gazete_tarihi)


class MevzuatSearchResult(CamelModel):
    documents: list[MevzuatDocument] = Field(default_factory=list)
    total_results: int = 0
    current_page: int = 1
    page_size: int = 0
    total_pages: int = 0
    error_message: str | None = None


class SearchRequest(BaseModel):
    """Request body for POST /search; the service expects snake_case keys."""

    mevzuat_adi: str | None = None
    phrase: str | None = None
    mevzuat_no: str | None = None
    resmi_gazete_sayisi: str | None = None
    mevzuat_turleri: list[str] | None = None
    page_number: int = 1
    page_size: int = 10
    sort_field: SortField = "RESMI_GAZETE_TARIHI"
    sort_direction: SortDirection = "desc"

    @field_validator("mevzuat_turleri")
    @classmethod
    def _known_types(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return value
        unknown = [item for item in value if item not in MEVZUAT_TURLERI]
        if unknown:
            raise ValueError(f"Bilinmeyen mevzuat türü: {', '.join(unknown)}")
        return value

    @classmethod
    def for_term(cls, term: str, search_type: SearchType, page_size: int) -> "SearchRequest":
        if search_type == "title":
            return cls(mevzuat_adi=term, page_size=page_size)
        return cls(phrase=term, page_size=page_size)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ArticleNode(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    madde_id: str = Field(validation_alias=AliasChoices("madde_id", "maddeId", "id"))
    madde_no: str | None = Field(default=None, validation_alias=AliasChoices("madde_no", "maddeNo"))
    title: str = Field(
        default="", validation_alias=AliasChoices("title", "madde_baslik", "maddeBaslik")
    )
    description: str | None = None
    children: list[ArticleNode] = Field(default_factory=list)


class ArticleContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    madde_id: str | None = Field(default=None, validation_alias=AliasChoices("madde_id", "maddeId"))
    mevzuat_id: str | None = Field(
        default=None, validation_alias=AliasChoices("mevzuat_id", "mevzuatId")
    )
    markdown_content: str = Field(
        default="",
        validation_alias=AliasChoices("markdown_content", "markdownContent", "content"),
    )
    error_message: str | None = Field(
        default=None, validation_alias=AliasChoices("error_message", "errorMessage")
    )
