from pydantic import BaseModel, Field
from stock_admin.config import get_config
from stock_admin.errors import SessionContextError
from stock_admin.logging import get_logger

class SessionContext(BaseModel):
    """Store and user a new stock record is registered under."""
    store_id: str = Field(description="Store the screen manages stock for")
    user_id: str = Field(description="User registering the stock")

class SessionContextProvider:
    """Resolves the session context from the AppConfig singleton."""
    def __init__(self) -> None:
        """Initializes the provider using the singleton AppConfig."""
        self.config = get_config()
        self.logger = get_logger(__name__)

    def get_session_context(self) -> SessionContext:
        """Builds the SessionContext from the configured store and user.

        Returns:
            SessionContext: The store/user pair used for new stock records.
        Raises:
            SessionContextError: If either identifier is missing.
        """
        store_id = (self.config.session_store_id or "").strip()
        user_id = (self.config.session_user_id or "").strip()
        if not store_id or not user_id:
            self.logger.error("Missing session store/user configuration.")
            raise SessionContextError("Missing session store/user configuration.")
        self.logger.debug(f"Resolved session context for store {store_id}")
        return SessionContext(store_id=store_id, user_id=user_id)

def get_session_context_provider() -> SessionContextProvider:
    """Returns a new SessionContextProvider instance using the latest config."""
    return SessionContextProvider()
