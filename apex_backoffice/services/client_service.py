"""
Client service — insurance clients, their attachments and policy renewals.

Documents are stored through :class:`DocumentStorage` first and the row is
written second.  If the database write then fails the object stays in the
bucket unreferenced; that is preferred over a row pointing at a missing file.
"""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from apex_backoffice.core.exceptions import BusinessRuleViolation, NotFoundException
from apex_backoffice.core.locks import KeyedLock, client_locks
from apex_backoffice.core.storage import DocumentStorage
from apex_backoffice.models.client import Client, Renewal
from apex_backoffice.repositories.client_repo import ClientRepository, RenewalRepository
from apex_backoffice.schemas.client import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Encapsulates CRUD + document handling for :class:`Client` and :class:`Renewal`."""

    def __init__(
        self,
        client_repo: ClientRepository,
        renewal_repo: RenewalRepository,
        storage: DocumentStorage,
        locks: Optional[KeyedLock] = None,
    ):
        self._repo = client_repo
        self._renewal_repo = renewal_repo
        self._storage = storage
        self._locks = locks if locks is not None else client_locks

    # ── Clients ──

    async def list_clients(self, skip: int = 0, limit: int = 100) -> List[Client]:
        return await self._repo.list_recent(skip=skip, limit=limit)

    async def get_client(self, client_id: UUID) -> Client:
        """Raises :class:`NotFoundException` if the client does not exist."""
        client = await self._repo.get(client_id)
        if not client:
            raise NotFoundException("Client", client_id)
        return client

    async def create_client(self, client_in: ClientCreate) -> Client:
        client = Client(**client_in.model_dump())
        try:
            created = await self._repo.create(client)
        except IntegrityError as exc:
            await self._repo.db.rollback()
            logger.warning("IntegrityError creating client '%s': %s", client_in.name, exc)
            raise BusinessRuleViolation("Client data violates a database constraint")

        logger.info("Created client %s (%s)", created.id, created.name)
        return created

    async def update_client(self, client_id: UUID, patch: ClientUpdate) -> Client:
        """Merge the fields present in ``patch`` into the stored client."""
        client = await self.get_client(client_id)
        changes = patch.model_dump(exclude_unset=True)
        if not changes:
            return client

        for field, value in changes.items():
            setattr(client, field, value)

        try:
            updated = await self._repo.update(client)
        except IntegrityError as exc:
            await self._repo.db.rollback()
            logger.warning("IntegrityError updating client %s: %s", client_id, exc)
            raise BusinessRuleViolation("Client data violates a database constraint")

        logger.info("Updated client %s (fields: %s)", client_id, ", ".join(sorted(changes)))
        return updated

    async def delete_client(self, client_id: UUID) -> None:
        """Delete a client; its renewals go with it (FK cascade)."""
        if not await self._repo.delete(client_id):
            raise NotFoundException("Client", client_id)
        logger.info("Deleted client %s", client_id)

    async def add_attachment(
        self,
        client_id: UUID,
        filename: str,
        body: bytes,
        content_type: Optional[str] = None,
    ) -> Client:
        """
        Upload a file and append its URL to the client's attachments.

        The upload runs unlocked.  The append re-reads the row under the
        per-client lock (and a row lock on PostgreSQL), so concurrent uploads
        for one client all end up in the list.
        """
        await self.get_client(client_id)
        url = await self._storage.upload(filename, body, content_type)

        async with self._locks.hold(client_id):
            client = await self._repo.get_for_update(client_id)
            if client is None:
                raise NotFoundException("Client", client_id)
            # Assign a new list: in-place mutation of a JSON column is not tracked.
            client.additional_attachments = [*(client.additional_attachments or []), url]
            updated = await self._repo.update(client)
        logger.info("Attached %s to client %s", url, client_id)
        return updated

    # ── Renewals ──

    async def list_renewals(self, client_id: UUID) -> List[Renewal]:
        """Renewals for a client, latest first; empty when there are none."""
        return await self._renewal_repo.list_for_client(client_id)

    async def create_renewal(
        self,
        client_id: UUID,
        renewal_date: date,
        next_renewal_date: Optional[date],
        filename: str,
        body: bytes,
        content_type: Optional[str] = None,
    ) -> Renewal:
        """
        Upload the renewed policy document and record the renewal.

        Raises :class:`NotFoundException` before uploading anything if the
        client does not exist.
        """
        await self.get_client(client_id)
        url = await self._storage.upload(filename, body, content_type)

        renewal = Renewal(
            client_id=client_id,
            renewal_date=renewal_date,
            next_renewal_date=next_renewal_date,
            policy_document=url,
        )
        try:
            created = await self._renewal_repo.create(renewal)
        except IntegrityError as exc:
            await self._renewal_repo.db.rollback()
            logger.warning("IntegrityError creating renewal for client %s: %s", client_id, exc)
            raise BusinessRuleViolation("Renewal data violates a database constraint")

        logger.info("Recorded renewal %s for client %s", created.id, client_id)
        return created

    async def delete_renewal(self, client_id: UUID, renewal_id: UUID) -> None:
        """Raises :class:`NotFoundException` unless the renewal belongs to the client."""
        renewal = await self._renewal_repo.get_for_client(client_id, renewal_id)
        if renewal is None:
            raise NotFoundException("Renewal", renewal_id)
        await self._renewal_repo.delete(renewal.id)
        logger.info("Deleted renewal %s of client %s", renewal_id, client_id)
