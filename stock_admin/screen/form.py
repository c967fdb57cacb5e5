"""State of one stock create/edit form."""

from __future__ import annotations

import math
from typing import Any, Awaitable, Callable, Dict, Hashable, Mapping, Optional, Set

from stock_admin.errors import StockAdminError
from stock_admin.logging import get_logger
from .validation import (
    DEFAULT_STOCK_FORM_VALUES,
    FIELD_NAMES,
    StockFormValues,
    ValidationResult,
    validate_stock_form,
)

NUMERIC_FIELDS = ("price", "quantity")

SubmitHandler = Callable[[StockFormValues], Awaitable[Any]]


def normalize_numeric_input(raw: Any) -> Any:
    """Coerce raw numeric-field input.

    - ``""`` or ``None`` -> ``0``
    - a numeric string -> int when integral, float otherwise
    - anything else -> returned unchanged, so validation can reject it
    """
    if raw is None:
        return 0
    if isinstance(raw, str):
        text = raw.strip()
        if text == "":
            return 0
        try:
            number = float(text)
        except ValueError:
            return raw
        if not math.isfinite(number):
            return raw
        return int(number) if number.is_integer() else number
    return raw


class FormController:
    """
    Field values, errors and submit lifecycle for exactly one form.

    Errors are only reported for fields the user has changed since the form
    was initialized; `is_valid` always reflects every field.
    """

    def __init__(self) -> None:
        self.logger = get_logger(__name__)
        self._values: Dict[str, Any] = dict(DEFAULT_STOCK_FORM_VALUES)
        self._initial: Dict[str, Any] = dict(DEFAULT_STOCK_FORM_VALUES)
        self._touched: Set[str] = set()
        self._open = False
        self._target_key: Optional[Hashable] = None
        self._submitting = False
        self._result: ValidationResult = validate_stock_form(self._values)

    # ---------- derived state ----------

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def is_valid(self) -> bool:
        return self._result.is_valid

    @property
    def errors(self) -> Dict[str, str]:
        return {k: v for k, v in self._result.errors.items() if k in self._touched}

    @property
    def is_dirty(self) -> bool:
        return self._values != self._initial

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def is_open(self) -> bool:
        return self._open

    # ---------- lifecycle ----------

    def _validate(self) -> None:
        self._result = validate_stock_form(self._values)

    def initialize(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        *,
        open: bool = True,
        target_key: Optional[Hashable] = None,
    ) -> bool:
        """Load field values when the form opens or its target record changes.

        Returns True when the values were (re)loaded. Calling again with the
        same open flag and target is a no-op.
        """
        should_load = open and (not self._open or target_key != self._target_key)
        self._open = open
        if not should_load:
            return False
        self._target_key = target_key
        values = dict(DEFAULT_STOCK_FORM_VALUES)
        values.update({k: v for k, v in (defaults or {}).items() if k in FIELD_NAMES})
        self._values = values
        self._initial = dict(values)
        self._touched = set()
        self._validate()
        return True

    def set_field(self, name: str, raw: Any) -> None:
        if name not in FIELD_NAMES:
            raise KeyError(f"Unknown form field: {name}")
        self._values[name] = normalize_numeric_input(raw) if name in NUMERIC_FIELDS else raw
        self._touched.add(name)
        self._validate()

    def reset(self) -> None:
        """Restore the default values and clear errors."""
        self._values = dict(DEFAULT_STOCK_FORM_VALUES)
        self._initial = dict(DEFAULT_STOCK_FORM_VALUES)
        self._touched = set()
        self._validate()

    def close(self) -> None:
        """Discard the form contents when its dialog goes away."""
        self.reset()
        self._open = False
        self._target_key = None

    async def submit(self, handler: SubmitHandler) -> bool:
        """Hand the current values to `handler`.

        Returns True when the handler completed and the form was reset. An
        invalid form or a submission already in flight is rejected without
        calling the handler. A `StockAdminError` from the handler leaves the
        values in place so the user can retry.
        """
        if self._submitting or not self.is_valid:
            self._touched.update(FIELD_NAMES)
            return False
        self._submitting = True
        try:
            await handler(self._result.values)
        except StockAdminError as e:
            self.logger.debug(f"Form submission failed: {e}")
            return False
        finally:
            self._submitting = False
        self.reset()
        return True
