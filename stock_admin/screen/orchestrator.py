"""Dialog state machine for creating, editing and deleting stock records.

Only one dialog session is active at a time. Each session kind has its own
in-flight flag; while it is set the dialog can neither be submitted again nor
cancelled. Transport failures become error notifications and leave the
dialog open so the user can retry or cancel.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from stock_admin.data.interface import StockApi
from stock_admin.data.models import StockId, StockPayload, StockRecord
from stock_admin.errors import GuardViolation, StockAdminError, TransportFailure
from stock_admin.logging import get_logger
from stock_admin.session import SessionContextProvider, get_session_context_provider
from .form import FormController
from .list_store import ListStore
from .notifications import NotificationSlot
from .validation import StockFormValues

MESSAGES = {
    "created": "在庫を登録しました",
    "create_failed": "在庫の登録に失敗しました",
    "updated": "在庫情報を更新しました",
    "update_failed": "在庫情報の更新に失敗しました",
    "deleted": "在庫を削除しました",
    "delete_failed": "在庫の削除に失敗しました",
}


class DialogKind(str, Enum):
    NONE = "none"
    CREATING = "creating"
    EDITING = "editing"
    CONFIRMING_DELETE = "confirming_delete"


@dataclass(frozen=True)
class DialogSession:
    kind: DialogKind = DialogKind.NONE
    target: Optional[StockRecord] = None

    @property
    def is_active(self) -> bool:
        return self.kind is not DialogKind.NONE


NO_SESSION = DialogSession()


def form_defaults_for(record: StockRecord) -> dict:
    return {
        "product_name": record.name or "",
        "price": record.price if record.price is not None else 0,
        "quantity": record.quantity if record.quantity is not None else 0,
    }


class CrudOrchestrator:
    def __init__(
        self,
        api: StockApi,
        list_store: ListStore,
        session_provider: Optional[SessionContextProvider] = None,
        notifications: Optional[NotificationSlot] = None,
        form: Optional[FormController] = None,
    ) -> None:
        self.api = api
        self.list_store = list_store
        self.session_provider = session_provider or get_session_context_provider()
        self.notifications = notifications or NotificationSlot()
        self.form = form or FormController()
        self.logger = get_logger(__name__)

        self.session: DialogSession = NO_SESSION
        self.creating = False
        self.editing = False
        self.deleting = False

    @property
    def in_flight(self) -> bool:
        return self.creating or self.editing or self.deleting

    def _require_id(self, record: Optional[StockRecord], action: str) -> StockId:
        if record is None or record.id is None or record.id == "":
            self.logger.warning(f"Ignoring {action}: stock record has no id")
            raise GuardViolation(f"{action} requires a stock record with an id")
        return record.id

    def _begin(self, session: DialogSession) -> bool:
        if self.session.is_active:
            self.logger.debug(f"Ignoring {session.kind.value}: {self.session.kind.value} dialog already open")
            return False
        self.session = session
        return True

    def _report_failure(self, operation: str, error: Exception) -> None:
        if isinstance(error, StockAdminError):
            self.logger.error(f"Stock {operation} failed: {error}")
        else:
            self.logger.opt(exception=error).error(f"Stock {operation} failed unexpectedly: {error!r}")
        self.notifications.error(MESSAGES[f"{operation}_failed"])

    def _close(self) -> None:
        self.session = NO_SESSION
        self.form.close()

    # ---------- transitions ----------

    @staticmethod
    def can_delete(record: StockRecord) -> bool:
        return record.id is not None and record.id != ""

    @classmethod
    def can_edit(cls, record: StockRecord) -> bool:
        """Edit needs the id plus the store/user references the update sends back."""
        return cls.can_delete(record) and bool(record.store_id) and bool(record.user_id)

    def open_create(self) -> bool:
        if not self._begin(DialogSession(DialogKind.CREATING)):
            return False
        self.form.initialize(open=True, target_key=None)
        return True

    def open_edit(self, record: StockRecord) -> bool:
        try:
            stock_id = self._require_id(record, "edit")
        except GuardViolation:
            return False
        if not self._begin(DialogSession(DialogKind.EDITING, record)):
            return False
        self.form.initialize(form_defaults_for(record), open=True, target_key=stock_id)
        return True

    def open_delete(self, record: StockRecord) -> bool:
        try:
            self._require_id(record, "delete")
        except GuardViolation:
            return False
        return self._begin(DialogSession(DialogKind.CONFIRMING_DELETE, record))

    def cancel(self) -> bool:
        if not self.session.is_active:
            return False
        if self.in_flight:
            self.logger.debug(f"Ignoring cancel: {self.session.kind.value} request in flight")
            return False
        self.logger.debug(f"Cancelled {self.session.kind.value} dialog")
        self._close()
        return True

    # ---------- submissions ----------

    async def submit(self) -> bool:
        """Submit the create or edit form of the active session."""
        if self.session.kind is DialogKind.CREATING:
            return await self.form.submit(self._create)
        if self.session.kind is DialogKind.EDITING:
            return await self.form.submit(self._update)
        return False

    async def _create(self, values: StockFormValues) -> None:
        self.creating = True
        self.logger.info(f"Creating stock '{values.product_name}'")
        try:
            context = self.session_provider.get_session_context()
            payload = StockPayload(
                name=values.product_name,
                price=values.price,
                quantity=values.quantity,
                store_id=context.store_id,
                user_id=context.user_id,
            )
            record = await self.api.create(payload)
        except StockAdminError as e:
            self._report_failure("create", e)
            raise
        except Exception as e:
            self._report_failure("create", e)
            raise TransportFailure("create", e.__class__.__name__) from e
        finally:
            self.creating = False

        self.logger.info(f"Created stock {record.id}")
        self._close()
        self.notifications.success(MESSAGES["created"])
        self.list_store.reset_to_first_page()
        await self.list_store.refetch()

    async def _update(self, values: StockFormValues) -> None:
        target = self.session.target
        stock_id = self._require_id(target, "update")
        if not target.store_id or not target.user_id:
            self.logger.warning(f"Ignoring update of stock {stock_id}: missing store/user reference")
            raise GuardViolation(f"stock {stock_id} has no store/user reference")

        self.editing = True
        self.logger.info(f"Updating stock {stock_id}")
        try:
            payload = StockPayload(
                name=values.product_name,
                price=values.price,
                quantity=values.quantity,
                store_id=target.store_id,
                user_id=target.user_id,
            )
            await self.api.update(stock_id, payload)
        except StockAdminError as e:
            self._report_failure("update", e)
            raise
        except Exception as e:
            self._report_failure("update", e)
            raise TransportFailure("update", e.__class__.__name__) from e
        finally:
            self.editing = False

        self.logger.info(f"Updated stock {stock_id}")
        self._close()
        self.notifications.success(MESSAGES["updated"])
        await self.list_store.refetch()

    async def confirm_delete(self) -> bool:
        if self.session.kind is not DialogKind.CONFIRMING_DELETE or self.deleting:
            return False
        try:
            stock_id = self._require_id(self.session.target, "delete")
        except GuardViolation:
            return False

        self.deleting = True
        self.logger.info(f"Deleting stock {stock_id}")
        try:
            try:
                await self.api.delete(stock_id)
            except Exception as e:
                self._report_failure("delete", e)
                return False
            await self.list_store.refetch()
        finally:
            self.deleting = False

        self.logger.info(f"Deleted stock {stock_id}")
        self._close()
        self.notifications.success(MESSAGES["deleted"])
        return True
