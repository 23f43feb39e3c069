"""
Normalize the model's extraction output into FinancialData.

The model reports each line item's numbers as a list of {year, value}
objects. Tables and CSV exports look values up by year, so the list is
folded into a {year: value} mapping here.
"""

from typing import Any

from pydantic import BaseModel, field_validator

from finextract.models.financials import (
    COMPLETENESS_NOT_FOUND,
    FinancialData,
    LineItem,
)

UNKNOWN_COMPANY = "Unknown Entity"


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


class RawYearlyValue(BaseModel):
    """One {year, value} pair as returned by the model."""
    year: str
    value: float | None = None

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_str(cls, v: Any) -> Any:
        # Models sometimes emit bare integers for year headings
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("value", mode="before")
    @classmethod
    def _strip_separators(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.replace(",", "").strip()
            return v or None
        return v


class RawLineItem(BaseModel):
    name: str = ""
    standardized_name: str = ""
    yearly_values: list[RawYearlyValue] = []

    @field_validator("yearly_values", mode="before")
    @classmethod
    def _null_values(cls, v: Any) -> Any:
        return _none_to_list(v)


class RawExtraction(BaseModel):
    """Top-level extraction payload, mirroring RESPONSE_SCHEMA."""
    company_name: str | None = None
    currency: str | None = None
    units: str | None = None
    years: list[str] = []
    line_items: list[RawLineItem] = []
    missing_line_items: list[str] = []
    completeness: str | None = None

    @field_validator("line_items", "missing_line_items", mode="before")
    @classmethod
    def _null_lists(cls, v: Any) -> Any:
        return _none_to_list(v)

    @field_validator("years", mode="before")
    @classmethod
    def _years_as_str(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [str(y) if isinstance(y, (int, float)) and not isinstance(y, bool) else y for y in v]
        return _none_to_list(v)


def transform_raw_response(raw: dict | RawExtraction) -> FinancialData:
    """
    Convert a raw extraction payload into the application's FinancialData.

    Args:
        raw: Parsed JSON from the model, or an already validated RawExtraction

    Returns:
        FinancialData with year-keyed values on every line item

    Raises:
        pydantic.ValidationError: If the payload does not have the expected shape
    """
    parsed = raw if isinstance(raw, RawExtraction) else RawExtraction.model_validate(raw)

    line_items = []
    for item in parsed.line_items:
        values: dict[str, float | None] = {}
        for yearly in item.yearly_values:
            # Later entries for the same year overwrite earlier ones
            values[yearly.year] = yearly.value
        line_items.append(LineItem(
            name=item.name,
            standardized_name=item.standardized_name,
            values=values,
        ))

    return FinancialData(
        company_name=parsed.company_name or UNKNOWN_COMPANY,
        currency=parsed.currency or None,
        units=parsed.units or None,
        years=list(parsed.years),
        line_items=line_items,
        missing_line_items=list(parsed.missing_line_items),
        completeness=parsed.completeness or COMPLETENESS_NOT_FOUND,
    )
