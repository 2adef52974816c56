"""Currency field type handler."""

from taskfields.fields.types.number import NumberFieldHandler
from taskfields.schemas.field import FieldDefinition, FieldType, FieldValue


class CurrencyFieldHandler(NumberFieldHandler):
    """
    Handler for currency field type.

    Stores monetary values as numbers; the field definition carries the
    ISO 4217 currency code used for display (default: "USD").
    """

    field_type = FieldType.CURRENCY

    DEFAULT_CURRENCY = "USD"
    PRECISION = 2

    # Common currency symbols for display
    CURRENCY_SYMBOLS = {
        "USD": "$",
        "EUR": "€",
        "GBP": "£",
        "JPY": "¥",
        "CNY": "¥",
        "KRW": "₩",
        "INR": "₹",
        "BRL": "R$",
        "CAD": "CA$",
        "AUD": "A$",
        "CHF": "CHF",
        "MXN": "MX$",
    }

    @classmethod
    def format_display(
        cls,
        field_value: FieldValue | None,
        field: FieldDefinition | None = None,
    ) -> str:
        """
        Format currency value for display.

        Returns:
            Formatted string like "$1,234.56" or "-€12.00"
        """
        if field_value is None or field_value.numeric_value is None:
            return ""

        currency_code = (field.currency_code if field else None) or cls.DEFAULT_CURRENCY
        symbol = cls.CURRENCY_SYMBOLS.get(currency_code, f"{currency_code} ")

        amount = float(field_value.numeric_value)
        formatted_num = f"{abs(amount):,.{cls.PRECISION}f}"
        negative_prefix = "-" if amount < 0 else ""
        return f"{negative_prefix}{symbol}{formatted_num}"
