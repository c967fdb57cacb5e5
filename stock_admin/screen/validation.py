"""Validation rules for the stock create/edit form.

Each field is checked on its own; there are no cross-field rules. The first
violation found for a field is the one reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, Mapping, Optional, Union

from pydantic import AfterValidator, BaseModel, Field, StringConstraints, ValidationError
from pydantic_core import PydanticCustomError

from stock_admin.data.models import NAME_MAX_LENGTH, PRICE_MAX, QUANTITY_MAX

FIELD_NAMES = ("product_name", "price", "quantity")

DEFAULT_STOCK_FORM_VALUES: Dict[str, Any] = {
    "product_name": "",
    "price": 0,
    "quantity": 0,
}


def _whole_number_as_int(value: float) -> Union[int, float]:
    return int(value) if float(value).is_integer() else value


def _require_integer(value: float) -> int:
    if not float(value).is_integer():
        raise PydanticCustomError("integer_required", "value must be an integer")
    return int(value)


ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=NAME_MAX_LENGTH)]
Price = Annotated[float, Field(ge=0, le=PRICE_MAX, allow_inf_nan=False), AfterValidator(_whole_number_as_int)]
Quantity = Annotated[float, Field(ge=0, le=QUANTITY_MAX, allow_inf_nan=False), AfterValidator(_require_integer)]


class StockFormValues(BaseModel):
    """Validated contents of the stock form."""
    product_name: ProductName
    price: Price
    quantity: Quantity


# error type -> message; "*" covers every other failure for the field
FIELD_MESSAGES: Dict[str, Dict[str, str]] = {
    "product_name": {
        "string_too_long": "商品名は100文字以内で入力してください",
        "*": "商品名が必須です",
    },
    "price": {
        "greater_than_equal": "価格は0円以上で入力してください",
        "less_than_equal": "価格は99,999,999円以内で入力してください",
        "*": "価格は数値で入力してください",
    },
    "quantity": {
        "greater_than_equal": "在庫数は0個以上で入力してください",
        "less_than_equal": "在庫数は999,999個以内で入力してください",
        "integer_required": "在庫数は整数で入力してください",
        "*": "在庫数は数値で入力してください",
    },
}


@dataclass(frozen=True)
class ValidationResult:
    values: Optional[StockFormValues] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.values is not None and not self.errors


def _message_for(field_name: str, error_type: str) -> str:
    messages = FIELD_MESSAGES[field_name]
    return messages.get(error_type, messages["*"])


def validate_stock_form(data: Mapping[str, Any]) -> ValidationResult:
    """Validate candidate form values.

    Returns a result holding either the parsed values (name trimmed, whole
    numbers as int) or a mapping of field name to message.
    """
    candidate = {name: data.get(name) for name in FIELD_NAMES if name in data}
    try:
        values = StockFormValues.model_validate(candidate)
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            field_name = str(error["loc"][0])
            errors.setdefault(field_name, _message_for(field_name, error["type"]))
        return ValidationResult(errors=errors)
    return ValidationResult(values=values)
