"""Schema validation of untrusted match input.

Callers may hand the safe matcher entity instances or plain mappings straight
from a request body. Both go through the same pydantic schemas, and the
result is a tagged ``ValidationSuccess`` or ``ValidationFailure`` so the
caller branches on the tag instead of probing fields.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Annotated, Any

import attrs
from attrs import define, field
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
)

from cratematch.config import settings
from cratematch.domain.entities import (
    CandidateRelease,
    FormatCategory,
    FormatDescriptor,
    PurchaseRecord,
)
from cratematch.domain.matching.types import SearchQuery, search_query_for

MAX_FIELD_LENGTH = settings.resilience.max_field_length
MAX_RELEASES = settings.resilience.max_releases

BoundedText = Annotated[StrictStr, Field(max_length=MAX_FIELD_LENGTH)]
RequiredText = Annotated[StrictStr, Field(min_length=1, max_length=MAX_FIELD_LENGTH)]


class PurchaseSchema(BaseModel):
    """Accepted shape of a purchase."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    artist: RequiredText
    title: RequiredText = Field(
        validation_alias=AliasChoices("title", "item_title", "itemTitle")
    )
    format: FormatCategory
    url: StrictStr = ""
    purchase_date: datetime | None = Field(
        default=None, validation_alias=AliasChoices("purchase_date", "purchaseDate")
    )
    raw_format: StrictStr = Field(
        default="", validation_alias=AliasChoices("raw_format", "rawFormat")
    )

    def to_entity(self) -> PurchaseRecord:
        return PurchaseRecord(
            artist=self.artist,
            title=self.title,
            url=self.url,
            purchase_date=self.purchase_date,
            format=self.format,
            raw_format=self.raw_format,
        )


class FormatSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: StrictStr
    qty: StrictStr | StrictInt | None = None
    descriptions: list[StrictStr] = Field(default_factory=list)


class ReleaseSchema(BaseModel):
    """Accepted shape of a catalog release."""

    model_config = ConfigDict(extra="ignore")

    id: StrictInt
    title: BoundedText
    artist: BoundedText = Field(
        default="", validation_alias=AliasChoices("artist", "artists_sort")
    )
    year: StrictInt | None = None
    formats: list[FormatSchema] = Field(default_factory=list)
    uri: StrictStr = ""
    resource_url: StrictStr = ""

    def to_entity(self) -> CandidateRelease:
        return CandidateRelease(
            id=self.id,
            title=self.title,
            artist=self.artist,
            year=self.year or None,
            formats=[
                FormatDescriptor(
                    name=fmt.name,
                    qty=None if fmt.qty is None else str(fmt.qty),
                    descriptions=list(fmt.descriptions),
                )
                for fmt in self.formats
            ],
            uri=self.uri,
            resource_url=self.resource_url,
        )


@define(frozen=True, slots=True)
class ValidationSuccess:
    """Input that passed validation, converted to entities."""

    purchase: PurchaseRecord
    candidates: list[CandidateRelease] = field(factory=list)
    ok: bool = field(default=True, init=False)


@define(frozen=True, slots=True)
class ValidationFailure:
    """Rejected input with enough context to build a fallback outcome."""

    message: str
    errors: list[str] = field(factory=list)
    search_query: SearchQuery = field(factory=SearchQuery)
    ok: bool = field(default=False, init=False)


ValidationResult = ValidationSuccess | ValidationFailure


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    if attrs.has(type(value)):
        return attrs.asdict(value, recurse=True)
    if isinstance(value, Mapping):
        return value
    return None


def _query_echo(purchase: Mapping[str, Any] | None) -> SearchQuery:
    if purchase is None:
        return SearchQuery()
    title = purchase.get("title", purchase.get("item_title", purchase.get("itemTitle")))
    return search_query_for(purchase.get("artist"), title, purchase.get("format"))


def extract_search_query(purchase: Any) -> SearchQuery:
    """Query echo from any usable fields of an unvalidated purchase."""
    return _query_echo(_as_mapping(purchase))


def _describe(exc: ValidationError, prefix: str) -> list[str]:
    return [
        f"{prefix}.{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]


def validate_match_input(purchase: Any, candidates: Any) -> ValidationResult:
    """Validate one purchase and its candidate releases.

    Args:
        purchase: PurchaseRecord or mapping with artist, title and format
        candidates: Sequence of CandidateRelease instances or mappings

    Returns:
        ValidationSuccess holding entities, or ValidationFailure with a query
        echo built from whatever purchase fields were usable
    """
    purchase_data = _as_mapping(purchase)
    search_query = _query_echo(purchase_data)

    if purchase_data is None:
        return ValidationFailure(
            message="Missing or invalid required fields in purchase data",
            errors=["purchase: expected an object"],
            search_query=search_query,
        )

    try:
        purchase_record = PurchaseSchema.model_validate(purchase_data).to_entity()
    except ValidationError as e:
        return ValidationFailure(
            message="Missing or invalid required fields in purchase data",
            errors=_describe(e, "purchase"),
            search_query=search_query,
        )

    if isinstance(candidates, str | bytes) or not isinstance(candidates, Sequence):
        return ValidationFailure(
            message="Invalid catalog release data",
            errors=["candidates: expected a list"],
            search_query=search_query,
        )

    if len(candidates) > MAX_RELEASES:
        return ValidationFailure(
            message="Invalid catalog release data",
            errors=[f"candidates: more than {MAX_RELEASES} releases"],
            search_query=search_query,
        )

    releases = []
    for index, candidate in enumerate(candidates):
        candidate_data = _as_mapping(candidate)
        if candidate_data is None:
            return ValidationFailure(
                message="Invalid catalog release data",
                errors=[f"candidates.{index}: expected an object"],
                search_query=search_query,
            )
        try:
            releases.append(ReleaseSchema.model_validate(candidate_data).to_entity())
        except ValidationError as e:
            return ValidationFailure(
                message="Invalid catalog release data",
                errors=_describe(e, f"candidates.{index}"),
                search_query=search_query,
            )

    return ValidationSuccess(purchase=purchase_record, candidates=releases)
