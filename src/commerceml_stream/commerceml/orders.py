"""Parser for CommerceML orders documents (``orders.xml``)."""

from typing import Callable, ClassVar, Dict

from commerceml_stream.streaming import ElementNode

from . import fields, tags
from .base import CommerceMLParser, RuleSpec, document_path, map_company_or_person
from .models import Document, DocumentCounterparty, DocumentItem

DOCUMENT = document_path(tags.DOCUMENT)


def map_document_counterparty(node: ElementNode) -> DocumentCounterparty:
    company, person = map_company_or_person(node)
    return DocumentCounterparty(
        id=fields.require_text(node, tags.ID),
        name=fields.optional_text(node, tags.NAME),
        role=fields.optional_text(node, tags.ROLE),
        company_info=company,
        person_info=person,
    )


def map_document_item(node: ElementNode) -> DocumentItem:
    return DocumentItem(
        id=fields.require_text(node, tags.ID),
        name=fields.optional_text(node, tags.NAME),
        price_per_unit=fields.optional_decimal(node, tags.PRICE_PER_UNIT),
        quantity=fields.optional_decimal(node, tags.QUANTITY),
        amount=fields.optional_decimal(node, tags.AMOUNT),
    )


def map_document(record: ElementNode) -> Document:
    counterparties = fields.optional_element(record, tags.COUNTERPARTIES)
    products = fields.optional_element(record, tags.PRODUCTS)
    date_path = f"{record.name}/{tags.DATE}"
    return Document(
        id=fields.require_text(record, tags.ID),
        number=fields.optional_text(record, tags.NUMBER),
        date=fields.to_date(fields.optional_text(record, tags.DATE), date_path),
        time=fields.to_time(
            fields.optional_text(record, tags.TIME), f"{record.name}/{tags.TIME}"
        ),
        operation=fields.optional_text(record, tags.OPERATION),
        role=fields.optional_text(record, tags.ROLE),
        currency=fields.optional_text(record, tags.CURRENCY),
        rate=fields.optional_decimal(record, tags.RATE),
        amount=fields.optional_decimal(record, tags.AMOUNT),
        comment=fields.optional_text(record, tags.COMMENT),
        counterparties=[
            map_document_counterparty(n)
            for n in fields.elements(counterparties, tags.COUNTERPARTY)
        ],
        items=[map_document_item(n) for n in fields.elements(products, tags.PRODUCT)],
    )


class OrdersParser(CommerceMLParser):
    """Streams an orders document, delivering each ``Документ`` as it completes."""

    RULES: ClassVar[Dict[str, RuleSpec]] = {
        "commercial_information": (document_path(), []),
        "document": (DOCUMENT, [DOCUMENT]),
    }

    def on_document(self, callback: Callable[[Document], None]) -> None:
        self._subscribe("document", map_document, callback)
