"""Typed CommerceML records produced by the offers and orders parsers."""

from dataclasses import dataclass, field, fields
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional


def _plain(value: Any) -> Any:
    if isinstance(value, CommerceMLModel):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


class CommerceMLModel:
    """Mixin giving record dataclasses a JSON-friendly ``to_dict``.

    Decimals are rendered as strings to keep their exact value; ``None`` fields
    are left out.
    """

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            result[f.name] = _plain(value)
        return result


@dataclass
class CommercialInformation(CommerceMLModel):
    schema_version: str
    creation_timestamp: Optional[datetime] = None


@dataclass
class CompanyInfo(CommerceMLModel):
    official_name: str
    inn: Optional[str] = None
    kpp: Optional[str] = None
    okpo: Optional[str] = None


@dataclass
class PersonInfo(CommerceMLModel):
    full_name: Optional[str] = None


@dataclass
class Counterparty(CommerceMLModel):
    """Owner or participant; exactly one of the info blocks is set."""

    id: str
    name: str
    company_info: Optional[CompanyInfo] = None
    person_info: Optional[PersonInfo] = None


@dataclass
class Classifier(CommerceMLModel):
    id: str
    name: str
    owner: Optional[Counterparty] = None


@dataclass
class PropertyValue(CommerceMLModel):
    id: str
    value: Optional[str] = None


@dataclass
class ClassifierProperty(CommerceMLModel):
    id: str
    name: str
    value_type: Optional[str] = None
    values: List[PropertyValue] = field(default_factory=list)


@dataclass
class Tax(CommerceMLModel):
    name: str
    included_in_sum: Optional[bool] = None
    excise: Optional[bool] = None


@dataclass
class PriceType(CommerceMLModel):
    id: str
    name: str
    currency: Optional[str] = None
    tax: Optional[Tax] = None


@dataclass
class OffersPackage(CommerceMLModel):
    id: str
    name: str
    catalog_id: Optional[str] = None
    classifier_id: Optional[str] = None
    owner: Optional[Counterparty] = None
    changes_only: Optional[bool] = None
    price_types: List[PriceType] = field(default_factory=list)


@dataclass
class Warehouse(CommerceMLModel):
    id: str
    name: Optional[str] = None


@dataclass
class MeasurementUnit(CommerceMLModel):
    code: Optional[str] = None
    full_name: Optional[str] = None
    acronym: Optional[str] = None


@dataclass
class Price(CommerceMLModel):
    price_type_id: str
    price_per_unit: Decimal
    representation: Optional[str] = None
    currency: Optional[str] = None
    unit_acronym: Optional[str] = None
    coefficient: Optional[Decimal] = None


@dataclass
class Stock(CommerceMLModel):
    warehouse_id: str
    quantity: Optional[int] = None


@dataclass
class Offer(CommerceMLModel):
    id: str
    name: str
    article: Optional[str] = None
    base_unit: Optional[MeasurementUnit] = None
    quantity: Optional[Decimal] = None
    prices: List[Price] = field(default_factory=list)
    stocks: List[Stock] = field(default_factory=list)


@dataclass
class DocumentCounterparty(CommerceMLModel):
    id: str
    name: Optional[str] = None
    role: Optional[str] = None
    company_info: Optional[CompanyInfo] = None
    person_info: Optional[PersonInfo] = None


@dataclass
class DocumentItem(CommerceMLModel):
    id: str
    name: Optional[str] = None
    price_per_unit: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    amount: Optional[Decimal] = None


@dataclass
class Document(CommerceMLModel):
    id: str
    number: Optional[str] = None
    date: Optional[date] = None
    time: Optional[time] = None
    operation: Optional[str] = None
    role: Optional[str] = None
    currency: Optional[str] = None
    rate: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    comment: Optional[str] = None
    counterparties: List[DocumentCounterparty] = field(default_factory=list)
    items: List[DocumentItem] = field(default_factory=list)
