"""CommerceML document parsers built on the streaming engine.

Key Components:
    OffersParser: Classifier, package, warehouses and offers from ``offers.xml``
    OrdersParser: Documents from ``orders.xml``
    fields: Required/optional field accessors for collected records
"""

from . import fields, tags
from .base import CommerceMLParser
from .models import (
    Classifier,
    ClassifierProperty,
    CommercialInformation,
    CompanyInfo,
    Counterparty,
    Document,
    DocumentCounterparty,
    DocumentItem,
    MeasurementUnit,
    Offer,
    OffersPackage,
    PersonInfo,
    Price,
    PriceType,
    PropertyValue,
    Stock,
    Tax,
    Warehouse,
)
from .offers import OffersParser
from .orders import OrdersParser

__all__ = [
    "Classifier",
    "ClassifierProperty",
    "CommerceMLParser",
    "CommercialInformation",
    "CompanyInfo",
    "Counterparty",
    "Document",
    "DocumentCounterparty",
    "DocumentItem",
    "MeasurementUnit",
    "Offer",
    "OffersPackage",
    "OffersParser",
    "OrdersParser",
    "PersonInfo",
    "Price",
    "PriceType",
    "PropertyValue",
    "Stock",
    "Tax",
    "Warehouse",
    "fields",
    "tags",
]
