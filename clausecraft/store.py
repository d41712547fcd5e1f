from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from clausecraft.errors import DuplicateUser
from clausecraft.schemas import ChatExchange, GeneratedContract, UserRecord

log = logging.getLogger("clausecraft.store")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemStore:
    """
    In-process record store for users, generated contracts and chat history.

    Rows are append-only; a single lock guards every table so concurrent
    handlers can insert safely. Build one per app and pass it in.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[int, UserRecord] = {}
        self._contracts: Dict[int, GeneratedContract] = {}
        self._chat: Dict[int, ChatExchange] = {}
        self._user_ids = itertools.count(1)
        self._contract_ids = itertools.count(1)
        self._chat_ids = itertools.count(1)

    # --------------------------------------------------------------------------
    # Users
    # --------------------------------------------------------------------------

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        """Raises DuplicateUser if the email (case-insensitive) is taken."""
        with self._lock:
            if self._find_by_email(email) is not None:
                raise DuplicateUser("Email already registered")
            user = UserRecord(id=next(self._user_ids), email=email, passwordHash=password_hash)
            self._users[user.id] = user
        log.info("created user id=%d", user.id)
        return user

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            return self._find_by_email(email)

    def _find_by_email(self, email: str) -> Optional[UserRecord]:
        # Caller holds the lock
        needle = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == needle:
                return user
        return None

    # --------------------------------------------------------------------------
    # Generated contracts
    # --------------------------------------------------------------------------

    def append_contract(
        self,
        owner_id: Optional[int],
        contract_type: str,
        content: str,
    ) -> GeneratedContract:
        with self._lock:
            record = GeneratedContract(
                id=next(self._contract_ids),
                ownerId=owner_id,
                contractType=contract_type,
                content=content,
                version=1,
                createdAt=_utcnow(),
            )
            self._contracts[record.id] = record
        log.info("stored contract id=%d owner=%s type=%s", record.id, owner_id, contract_type)
        return record

    def get_contract(self, contract_id: int) -> Optional[GeneratedContract]:
        with self._lock:
            return self._contracts.get(contract_id)

    # --------------------------------------------------------------------------
    # Chat history
    # --------------------------------------------------------------------------

    def append_chat_exchange(
        self,
        owner_id: int,
        question: str,
        answer: str,
        created_at: Optional[datetime] = None,
    ) -> ChatExchange:
        with self._lock:
            record = ChatExchange(
                id=next(self._chat_ids),
                ownerId=owner_id,
                question=question,
                answer=answer,
                createdAt=created_at or _utcnow(),
            )
            self._chat[record.id] = record
        log.info("stored chat exchange id=%d owner=%d", record.id, owner_id)
        return record

    def list_chat_history(self, owner_id: int) -> List[ChatExchange]:
        with self._lock:
            rows = [r for r in self._chat.values() if r.ownerId == owner_id]
        return sorted(rows, key=lambda r: (r.createdAt, r.id))
