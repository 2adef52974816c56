"""Field type handlers."""

from taskfields.fields.types.checkbox import CheckboxFieldHandler
from taskfields.fields.types.currency import CurrencyFieldHandler
from taskfields.fields.types.date import DateFieldHandler
from taskfields.fields.types.email import EmailFieldHandler
from taskfields.fields.types.formula import FormulaFieldHandler
from taskfields.fields.types.multi_select import MultiSelectFieldHandler
from taskfields.fields.types.number import NumberFieldHandler
from taskfields.fields.types.percent import PercentFieldHandler
from taskfields.fields.types.rating import RatingFieldHandler
from taskfields.fields.types.rollup import RollupFieldHandler
from taskfields.fields.types.single_select import SingleSelectFieldHandler
from taskfields.fields.types.text import TextFieldHandler
from taskfields.fields.types.url import URLFieldHandler

__all__ = [
    "CheckboxFieldHandler",
    "CurrencyFieldHandler",
    "DateFieldHandler",
    "EmailFieldHandler",
    "FormulaFieldHandler",
    "MultiSelectFieldHandler",
    "NumberFieldHandler",
    "PercentFieldHandler",
    "RatingFieldHandler",
    "RollupFieldHandler",
    "SingleSelectFieldHandler",
    "TextFieldHandler",
    "URLFieldHandler",
]
