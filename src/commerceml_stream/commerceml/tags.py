"""CommerceML element and attribute names."""

# Document root
COMMERCIAL_INFORMATION = "КоммерческаяИнформация"
SCHEMA_VERSION = "ВерсияСхемы"
CREATION_DATE = "ДатаФормирования"

# Common fields
ID = "Ид"
NAME = "Наименование"
OWNER = "Владелец"
CURRENCY = "Валюта"
ROLE = "Роль"
QUANTITY = "Количество"

# Counterparty
OFFICIAL_NAME = "ОфициальноеНаименование"
FULL_NAME = "ПолноеНаименование"
INN = "ИНН"
KPP = "КПП"
OKPO = "ОКПО"

# Classifier
CLASSIFIER = "Классификатор"
PROPERTIES = "Свойства"
PROPERTY = "Свойство"
VALUE_TYPE = "ТипЗначений"
VALUE_VARIANTS = "ВариантыЗначений"
DICTIONARY = "Справочник"
VALUE_ID = "ИдЗначения"
VALUE = "Значение"

# Offers package
OFFERS_PACKAGE = "ПакетПредложений"
CHANGES_ONLY = "СодержитТолькоИзменения"
CATALOG_ID = "ИдКаталога"
CLASSIFIER_ID = "ИдКлассификатора"
PRICE_TYPES = "ТипыЦен"
PRICE_TYPE = "ТипЦены"
TAX = "Налог"
INCLUDED_IN_SUM = "УчтеноВСумме"
EXCISE = "Акциз"
WAREHOUSES = "Склады"
WAREHOUSE = "Склад"
OFFERS = "Предложения"
OFFER = "Предложение"

# Offer
ARTICLE = "Артикул"
BASE_UNIT = "БазоваяЕдиница"
UNIT_CODE = "Код"
UNIT_FULL_NAME = "НаименованиеПолное"
UNIT_ACRONYM = "МеждународноеСокращение"
PRICES = "Цены"
PRICE = "Цена"
REPRESENTATION = "Представление"
PRICE_TYPE_ID = "ИдТипаЦены"
PRICE_PER_UNIT = "ЦенаЗаЕдиницу"
UNIT = "Единица"
COEFFICIENT = "Коэффициент"
WAREHOUSE_ID = "ИдСклада"
WAREHOUSE_QUANTITY = "КоличествоНаСкладе"

# Orders
DOCUMENT = "Документ"
NUMBER = "Номер"
DATE = "Дата"
TIME = "Время"
OPERATION = "ХозОперация"
RATE = "Курс"
AMOUNT = "Сумма"
COMMENT = "Комментарий"
COUNTERPARTIES = "Контрагенты"
COUNTERPARTY = "Контрагент"
PRODUCTS = "Товары"
PRODUCT = "Товар"
