"""Parser for CommerceML offers documents (``offers.xml``).

Example:
    >>> parser = OffersParser()
    >>> parser.on_offer(lambda offer: print(offer.id, offer.prices))
    >>> parser.parse("offers.xml")
"""

from typing import Callable, ClassVar, Dict

from commerceml_stream.streaming import ElementNode

from . import fields, tags
from .base import CommerceMLParser, RuleSpec, document_path, map_counterparty
from .models import (
    Classifier,
    ClassifierProperty,
    MeasurementUnit,
    Offer,
    OffersPackage,
    Price,
    PriceType,
    PropertyValue,
    Stock,
    Tax,
    Warehouse,
)

CLASSIFIER = document_path(tags.CLASSIFIER)
CLASSIFIER_PROPERTY = CLASSIFIER + (tags.PROPERTIES, tags.PROPERTY)
OFFERS_PACKAGE = document_path(tags.OFFERS_PACKAGE)
WAREHOUSE = OFFERS_PACKAGE + (tags.WAREHOUSES, tags.WAREHOUSE)
OFFER = OFFERS_PACKAGE + (tags.OFFERS, tags.OFFER)


def map_classifier(record: ElementNode) -> Classifier:
    owner = fields.optional_element(record, tags.OWNER)
    return Classifier(
        id=fields.require_text(record, tags.ID),
        name=fields.require_text(record, tags.NAME),
        owner=map_counterparty(owner) if owner is not None else None,
    )


def map_classifier_property(record: ElementNode) -> ClassifierProperty:
    values = []
    variants = fields.optional_element(record, tags.VALUE_VARIANTS)
    for entry in fields.elements(variants, tags.DICTIONARY):
        values.append(PropertyValue(
            id=fields.require_text(entry, tags.VALUE_ID),
            value=fields.optional_text(entry, tags.VALUE),
        ))
    return ClassifierProperty(
        id=fields.require_text(record, tags.ID),
        name=fields.require_text(record, tags.NAME),
        value_type=fields.optional_text(record, tags.VALUE_TYPE),
        values=values,
    )


def map_price_type(node: ElementNode) -> PriceType:
    tax = fields.optional_element(node, tags.TAX)
    return PriceType(
        id=fields.require_text(node, tags.ID),
        name=fields.require_text(node, tags.NAME),
        currency=fields.optional_text(node, tags.CURRENCY),
        tax=Tax(
            name=fields.require_text(tax, tags.NAME),
            included_in_sum=fields.optional_bool(tax, tags.INCLUDED_IN_SUM),
            excise=fields.optional_bool(tax, tags.EXCISE),
        ) if tax is not None else None,
    )


def map_offers_package(record: ElementNode) -> OffersPackage:
    owner = fields.optional_element(record, tags.OWNER)
    price_types = fields.optional_element(record, tags.PRICE_TYPES)
    return OffersPackage(
        id=fields.require_text(record, tags.ID),
        name=fields.require_text(record, tags.NAME),
        catalog_id=fields.optional_text(record, tags.CATALOG_ID),
        classifier_id=fields.optional_text(record, tags.CLASSIFIER_ID),
        owner=map_counterparty(owner) if owner is not None else None,
        changes_only=fields.to_bool(
            fields.attribute(record, tags.CHANGES_ONLY),
            f"{record.name}@{tags.CHANGES_ONLY}",
        ),
        price_types=[map_price_type(n) for n in fields.elements(price_types, tags.PRICE_TYPE)],
    )


def map_warehouse(record: ElementNode) -> Warehouse:
    return Warehouse(
        id=fields.require_text(record, tags.ID),
        name=fields.optional_text(record, tags.NAME),
    )


def map_price(node: ElementNode) -> Price:
    path = f"{tags.PRICE}/{tags.PRICE_PER_UNIT}"
    price = fields.to_decimal(fields.require_text(node, tags.PRICE_PER_UNIT), path)
    return Price(
        price_type_id=fields.require_text(node, tags.PRICE_TYPE_ID),
        price_per_unit=price,
        representation=fields.optional_text(node, tags.REPRESENTATION),
        currency=fields.optional_text(node, tags.CURRENCY),
        unit_acronym=fields.optional_text(node, tags.UNIT),
        coefficient=fields.optional_decimal(node, tags.COEFFICIENT),
    )


def map_stock(node: ElementNode) -> Stock:
    return Stock(
        warehouse_id=fields.require_attribute(node, tags.WAREHOUSE_ID),
        quantity=fields.to_int(
            fields.attribute(node, tags.WAREHOUSE_QUANTITY),
            f"{node.name}@{tags.WAREHOUSE_QUANTITY}",
        ),
    )


def map_offer(record: ElementNode) -> Offer:
    unit = fields.optional_node(record, tags.BASE_UNIT)
    prices = fields.optional_element(record, tags.PRICES)
    return Offer(
        id=fields.require_text(record, tags.ID),
        name=fields.require_text(record, tags.NAME),
        article=fields.optional_text(record, tags.ARTICLE),
        base_unit=MeasurementUnit(
            code=fields.attribute(unit, tags.UNIT_CODE),
            full_name=fields.attribute(unit, tags.UNIT_FULL_NAME),
            acronym=fields.attribute(unit, tags.UNIT_ACRONYM),
        ) if unit is not None else None,
        quantity=fields.optional_decimal(record, tags.QUANTITY),
        prices=[map_price(n) for n in fields.elements(prices, tags.PRICE)],
        stocks=[map_stock(n) for n in fields.elements(record, tags.WAREHOUSE)],
    )


class OffersParser(CommerceMLParser):
    """Streams an offers document and reports each block as it completes.

    Offers and warehouses are delivered one by one; the classifier and
    package headers are collected without their bulky sections.
    """

    RULES: ClassVar[Dict[str, RuleSpec]] = {
        "commercial_information": (document_path(), []),
        "classifier": (CLASSIFIER, [
            CLASSIFIER + (tags.ID,),
            CLASSIFIER + (tags.NAME,),
            CLASSIFIER + (tags.OWNER,),
        ]),
        "classifier_property": (CLASSIFIER_PROPERTY, [CLASSIFIER_PROPERTY]),
        "offers_package": (OFFERS_PACKAGE, [
            OFFERS_PACKAGE + (tags.ID,),
            OFFERS_PACKAGE + (tags.NAME,),
            OFFERS_PACKAGE + (tags.CATALOG_ID,),
            OFFERS_PACKAGE + (tags.CLASSIFIER_ID,),
            OFFERS_PACKAGE + (tags.OWNER,),
            OFFERS_PACKAGE + (tags.PRICE_TYPES,),
        ]),
        "warehouse": (WAREHOUSE, [WAREHOUSE]),
        "offer": (OFFER, [OFFER]),
    }

    def on_classifier(self, callback: Callable[[Classifier], None]) -> None:
        """Classifier header: id, name and owner, without groups or properties."""
        self._subscribe("classifier", map_classifier, callback)

    def on_classifier_property(self, callback: Callable[[ClassifierProperty], None]) -> None:
        self._subscribe("classifier_property", map_classifier_property, callback)

    def on_offers_package(self, callback: Callable[[OffersPackage], None]) -> None:
        """Package header with price types; offers arrive through :meth:`on_offer`.

        The package completes after all of its offers, at the closing tag.
        """
        self._subscribe("offers_package", map_offers_package, callback)

    def on_warehouse(self, callback: Callable[[Warehouse], None]) -> None:
        self._subscribe("warehouse", map_warehouse, callback)

    def on_offer(self, callback: Callable[[Offer], None]) -> None:
        self._subscribe("offer", map_offer, callback)
