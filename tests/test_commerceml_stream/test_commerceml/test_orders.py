"""Tests for the CommerceML orders parser."""

from datetime import date, time
from decimal import Decimal

from commerceml_stream.commerceml import OrdersParser
from commerceml_stream.commerceml.models import CommercialInformation
from commerceml_stream.tokenization.events import element

ORDERS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<КоммерческаяИнформация ВерсияСхемы="2.08" ДатаФормирования="2024-04-02">
  <Документ>
    <Ид>doc-1</Ид>
    <Номер>1001</Номер>
    <Дата>2024-04-01</Дата>
    <Время>10:15:00</Время>
    <ХозОперация>Заказ товара</ХозОперация>
    <Роль>Продавец</Роль>
    <Валюта>RUB</Валюта>
    <Курс>1</Курс>
    <Сумма>1140.50</Сумма>
    <Комментарий>Доставка после 18:00</Комментарий>
    <Контрагенты>
      <Контрагент>
        <Ид>c-1</Ид>
        <Наименование>Петров</Наименование>
        <ПолноеНаименование>Петров Петр Петрович</ПолноеНаименование>
        <Роль>Покупатель</Роль>
      </Контрагент>
    </Контрагенты>
    <Товары>
      <Товар>
        <Ид>o-1</Ид>
        <Наименование>Мяч</Наименование>
        <ЦенаЗаЕдиницу>150</ЦенаЗаЕдиницу>
        <Количество>2</Количество>
        <Сумма>300</Сумма>
      </Товар>
      <Товар>
        <Ид>o-2</Ид>
        <Наименование>Кукла</Наименование>
        <ЦенаЗаЕдиницу>840.50</ЦенаЗаЕдиницу>
        <Количество>1</Количество>
        <Сумма>840.50</Сумма>
      </Товар>
    </Товары>
  </Документ>
  <Документ>
    <Ид>doc-2</Ид>
    <Номер>1002</Номер>
    <Контрагенты>
      <Контрагент>
        <Ид>c-2</Ид>
        <Наименование>ООО Лютик</Наименование>
        <ОфициальноеНаименование>ООО "Лютик"</ОфициальноеНаименование>
        <ИНН>5001002003</ИНН>
        <Роль>Покупатель</Роль>
      </Контрагент>
      <Контрагент>
        <Ид>c-3</Ид>
        <Роль>Плательщик</Роль>
      </Контрагент>
    </Контрагенты>
  </Документ>
</КоммерческаяИнформация>
"""


class TestOrdersParser:
    """Typed records from an orders document."""

    def test_documents(self) -> None:
        parser = OrdersParser()
        documents: list = []
        parser.on_document(documents.append)
        parser.parse_string(ORDERS_XML)

        first, second = documents
        assert first.id == "doc-1"
        assert first.number == "1001"
        assert first.date == date(2024, 4, 1)
        assert first.time == time(10, 15)
        assert first.operation == "Заказ товара"
        assert first.role == "Продавец"
        assert first.currency == "RUB"
        assert first.rate == Decimal("1")
        assert first.amount == Decimal("1140.50")
        assert first.comment == "Доставка после 18:00"
        assert [(i.id, i.quantity, i.amount) for i in first.items] == [
            ("o-1", Decimal("2"), Decimal("300")),
            ("o-2", Decimal("1"), Decimal("840.50")),
        ]

        buyer, = first.counterparties
        assert buyer.role == "Покупатель"
        assert buyer.person_info.full_name == "Петров Петр Петрович"

        assert second.date is None
        assert second.time is None
        assert second.items == []
        company, payer = second.counterparties
        assert company.company_info.official_name == 'ООО "Лютик"'
        assert company.company_info.inn == "5001002003"
        assert payer.name is None
        assert payer.person_info.full_name is None

    def test_commercial_information_date_only(self) -> None:
        parser = OrdersParser()
        infos: list = []
        parser.on_commercial_information(infos.append)
        parser.parse_string(ORDERS_XML)

        assert infos == [CommercialInformation("2.08", infos[0].creation_timestamp)]
        assert infos[0].creation_timestamp.date() == date(2024, 4, 2)

    def test_feed_prepared_events(self) -> None:
        parser = OrdersParser()
        documents: list = []
        parser.on_document(documents.append)
        parser.feed(element(
            "КоммерческаяИнформация",
            element("Документ", element("Ид", "doc-9")),
            ВерсияСхемы="2.08",
        ))
        parser.close()

        assert [d.id for d in documents] == ["doc-9"]
        assert documents[0].counterparties == []

    def test_document_to_dict(self) -> None:
        parser = OrdersParser()
        documents: list = []
        parser.on_document(documents.append)
        parser.parse_string(ORDERS_XML)

        data = documents[0].to_dict()
        assert data["date"] == "2024-04-01"
        assert data["time"] == "10:15:00"
        assert data["amount"] == "1140.50"
        assert data["counterparties"][0]["person_info"] == {
            "full_name": "Петров Петр Петрович"
        }
