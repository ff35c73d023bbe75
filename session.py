import logging
from typing import Optional

from errors import NotAuthenticated
from repositories import SessionRepository
from schemas import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """Login state, re-read from storage on every check."""

    def __init__(self, repository: SessionRepository):
        self.repository = repository

    def login(self, phone: str, token: str) -> Session:
        session = Session(phone=phone, token=token)
        self.repository.set(session)
        logger.info("Logged in %s", phone)
        return session

    def logout(self) -> None:
        self.repository.clear()
        logger.info("Logged out")

    def current(self) -> Optional[Session]:
        return self.repository.get()

    def is_authenticated(self) -> bool:
        session = self.repository.get()
        return session is not None and session.is_authenticated

    def require(self) -> Session:
        session = self.repository.get()
        if session is None or not session.is_authenticated:
            raise NotAuthenticated()
        return session
