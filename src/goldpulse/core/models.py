"""Pydantic data models: the per-cycle value types."""

from __future__ import annotations

import html
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from goldpulse.core.exceptions import SourceFailure
from goldpulse.core.formatting import format_number

TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"


class WorldQuote(BaseModel):
    """Spot price of one troy ounce from the world-market source."""

    model_config = ConfigDict(frozen=True)

    price: float
    metal: str = "XAU"
    currency: str = "USD"
    timestamp: int | None = None

    def render(self) -> str:
        price: float | int = self.price
        if self.price.is_integer():
            price = int(self.price)
        return f"${format_number(price)}/oz"


class LocalPriceRow(BaseModel):
    """One retail product line as quoted by a local gold shop.

    Prices stay strings: the feeds send them as digit strings and they are
    only ever displayed.
    """

    model_config = ConfigDict(frozen=True)

    display_name: str
    buy_price: str
    sell_price: str
    key: str | None = None

    @field_validator("buy_price", "sell_price", mode="before")
    @classmethod
    def price_as_str(cls, v: object) -> str:
        if v is None:
            return ""
        return str(v)

    def render(self, label: str | None = None) -> str:
        """Render as a header line followed by the buy line and the sell line."""
        name = html.escape(label or self.display_name)
        return (
            f"- {name}:\n"
            f"  Mua: {format_number(self.buy_price)} VND\n"
            f"  Bán: {format_number(self.sell_price)} VND"
        )


class LabeledRow(BaseModel):
    """A row paired with the label it is displayed under."""

    model_config = ConfigDict(frozen=True)

    row: LocalPriceRow
    label: str | None = None

    def render(self) -> str:
        return self.row.render(self.label)


class LocalPriceTable(BaseModel):
    """All rows one local source contributes to a report, in display order."""

    model_config = ConfigDict(frozen=True)

    source: str
    rows: list[LabeledRow] = []

    def render(self) -> str:
        return "\n".join(r.render() for r in self.rows)


class SourceOutcome(BaseModel):
    """Result of one fetch: either a value or the failure it raised."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    source: str
    value: WorldQuote | LocalPriceTable | None = None
    failure: SourceFailure | None = None

    @model_validator(mode="after")
    def exactly_one_of_value_or_failure(self) -> SourceOutcome:
        if (self.value is None) == (self.failure is None):
            raise ValueError("exactly one of value or failure must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.failure is None


class ReportSection(BaseModel):
    """A titled block of the report body."""

    model_config = ConfigDict(frozen=True)

    title: str
    body: str


class Report(BaseModel):
    """The full digest sent on a successful cycle."""

    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    world: WorldQuote
    sections: list[ReportSection]

    def render(self) -> str:
        lines = [
            f"🕒 Gold Prices Update ({self.generated_at.strftime(TIMESTAMP_FORMAT)})",
            "",
            f"🌍 World Gold Price: {self.world.render()}",
            "",
            "🏪 Local Gold Shops:",
        ]
        for section in self.sections:
            lines.extend(["", f"{html.escape(section.title)}:", section.body])
        return "\n".join(lines)


class CycleResult(BaseModel):
    """What one cycle sent and how long it took."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    message: str
    duration_ms: float
    failed_sources: list[str] = []
