"""Inventory ledger: move stock between owners and project bindings.

Enforces two invariants for every resource kind:
- stock (``quantity``) never goes below zero;
- at most one binding row exists per (project, resource).

Stock is decremented with a single conditional UPDATE, so two concurrent
commits against the same row cannot both pass the availability check. Each
public method is meant to run inside one ``get_session()`` block, which
commits or rolls back all of its writes together.
"""

from __future__ import annotations

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from craftshare.config import get_config
from craftshare.db.models import ProjectModel
from craftshare.errors import (
    CraftShareError,
    ConflictError,
    InsufficientStockError,
    InternalError,
    InvalidQuantityError,
    NotFoundError,
)
from craftshare.inventory.models import Commitment, resource_spec
from craftshare.models import ResourceKind

logger = structlog.get_logger(__name__)

_UPSERT_INSERTS = {"postgresql": postgresql_insert, "sqlite": sqlite_insert}


class InventoryLedger:
    """Commit, adjust and release resource quantities for projects."""

    def __init__(
        self,
        session: AsyncSession,
        kind: ResourceKind | str,
        max_quantity: int | None = None,
    ):
        """Initialize the ledger for one resource kind.

        Args:
            session: SQLAlchemy async session (unit of work owned by the caller)
            kind: ResourceKind.MATERIAL or ResourceKind.TOOL
            max_quantity: Largest quantity accepted per call
                (defaults to LedgerConfig.max_commit_quantity)
        """
        self.session = session
        self.spec = resource_spec(kind)
        if max_quantity is None:
            max_quantity = get_config().ledger.max_commit_quantity
        self.max_quantity = max_quantity

    @property
    def kind(self) -> ResourceKind:
        return self.spec.kind

    async def commit(self, project_id: int, resource_id: int, quantity: int) -> Commitment:
        """Reserve ``quantity`` units of a resource for a project.

        Creates the binding on first commit, otherwise grows the existing one.

        Raises:
            NotFoundError: project or resource missing
            InvalidQuantityError: quantity <= 0 or above the configured maximum
            InsufficientStockError: quantity exceeds the resource's stock
            ConflictError: the binding was created concurrently on a backend
                without upsert support
        """
        log = logger.bind(
            kind=self.kind.value,
            project_id=project_id,
            resource_id=resource_id,
            quantity=quantity,
        )
        try:
            await self._require_project(project_id)
            resource = await self._require_resource(resource_id)
            self._check_quantity(quantity, allow_zero=False)
            self._check_limit(quantity)

            await self._take_stock(resource, quantity)

            binding = await self._add_to_binding(project_id, resource_id, quantity)

            commitment = self._to_commitment(binding, resource)
        except IntegrityError as exc:
            log.warning("commit_rejected", error="conflict")
            raise ConflictError(
                f"{self.spec.label} {resource_id} is already bound to project {project_id}"
            ) from exc
        except CraftShareError as exc:
            log.warning("commit_rejected", error=exc.kind.value, reason=exc.message)
            raise
        except SQLAlchemyError as exc:
            log.error("commit_failed", error=str(exc))
            raise InternalError(f"Failed to commit {self.spec.label.lower()}: {exc}") from exc

        log.info(
            "resource_committed",
            quantity_used=commitment.quantity_used,
            stock_remaining=commitment.stock_remaining,
        )
        return commitment

    async def adjust(
        self, project_id: int, resource_id: int, new_quantity_used: int
    ) -> Commitment:
        """Set a binding's committed quantity, moving the difference to/from stock.

        Shrinking a commitment always succeeds; growing it needs enough stock
        for the difference. Zero keeps the binding row with nothing committed.

        Raises:
            NotFoundError: binding or resource missing
            InvalidQuantityError: new quantity negative, or an increase above the maximum
            InsufficientStockError: increase exceeds available stock
        """
        log = logger.bind(
            kind=self.kind.value,
            project_id=project_id,
            resource_id=resource_id,
            new_quantity_used=new_quantity_used,
        )
        try:
            binding = await self._require_binding(project_id, resource_id, lock=True)
            resource = await self._require_resource(resource_id)
            self._check_quantity(new_quantity_used, allow_zero=True)

            delta = new_quantity_used - binding.quantity_used
            if delta > 0:
                self._check_limit(delta)
                await self._take_stock(resource, delta)
            elif delta < 0:
                await self._return_stock(resource, -delta)

            if delta != 0:
                binding.quantity_used = new_quantity_used
                await self.session.flush()

            commitment = self._to_commitment(binding, resource)
        except CraftShareError as exc:
            log.warning("adjust_rejected", error=exc.kind.value, reason=exc.message)
            raise
        except SQLAlchemyError as exc:
            log.error("adjust_failed", error=str(exc))
            raise InternalError(f"Failed to adjust {self.spec.label.lower()}: {exc}") from exc

        log.info(
            "commitment_adjusted",
            delta=delta,
            quantity_used=commitment.quantity_used,
            stock_remaining=commitment.stock_remaining,
        )
        return commitment

    async def release(self, project_id: int, resource_id: int) -> int:
        """Delete a binding and return its committed quantity to stock.

        Returns:
            The quantity given back to the resource's stock.

        Raises:
            NotFoundError: binding missing
        """
        log = logger.bind(
            kind=self.kind.value, project_id=project_id, resource_id=resource_id
        )
        binding_model = self.spec.binding_model
        try:
            binding = await self._require_binding(project_id, resource_id, lock=True)
            resource = await self._require_resource(resource_id)
            released = binding.quantity_used

            await self.session.execute(
                delete(binding_model)
                .where(binding_model.id == binding.id)
                .execution_options(synchronize_session=False)
            )
            self.session.expunge(binding)

            if released > 0:
                await self._return_stock(resource, released)
        except CraftShareError as exc:
            log.warning("release_rejected", error=exc.kind.value, reason=exc.message)
            raise
        except SQLAlchemyError as exc:
            log.error("release_failed", error=str(exc))
            raise InternalError(f"Failed to release {self.spec.label.lower()}: {exc}") from exc

        log.info("commitment_released", released=released)
        return released

    async def release_project(self, project_id: int) -> int:
        """Release every binding of this kind held by a project.

        Returns:
            Total quantity given back to stock.
        """
        binding_model = self.spec.binding_model
        result = await self.session.execute(
            select(self.spec.binding_fk_column)
            .where(binding_model.project_id == project_id)
            .order_by(binding_model.id)
        )
        total = 0
        for resource_id in result.scalars().all():
            total += await self.release(project_id, resource_id)
        return total

    async def release_owner(self, user_id: int) -> int:
        """Release every binding of this kind on resources owned by ``user_id``.

        Used before the owner's resources are removed, so no project keeps a
        binding to a row that is about to disappear.

        Returns:
            Total quantity given back to stock.
        """
        binding_model = self.spec.binding_model
        resource_model = self.spec.resource_model
        result = await self.session.execute(
            select(binding_model.project_id, self.spec.binding_fk_column)
            .join(resource_model, resource_model.id == self.spec.binding_fk_column)
            .where(resource_model.user_id == user_id)
            .order_by(binding_model.id)
        )
        total = 0
        for project_id, resource_id in result.all():
            total += await self.release(project_id, resource_id)
        return total

    # ------------------------------------------------------------------
    # Internals

    def _check_quantity(self, quantity: int, allow_zero: bool) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidQuantityError("Quantity must be an integer")
        if quantity < 0 or (quantity == 0 and not allow_zero):
            bound = "zero or greater" if allow_zero else "greater than zero"
            raise InvalidQuantityError(f"Quantity used must be {bound}")

    def _check_limit(self, amount: int) -> None:
        """Cap the stock moved into a project by a single request."""
        if amount > self.max_quantity:
            raise InvalidQuantityError(
                f"Quantity used must not exceed {self.max_quantity} per request"
            )

    async def _require_project(self, project_id: int) -> ProjectModel:
        project = await self.session.get(ProjectModel, project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        return project

    async def _require_resource(self, resource_id: int):
        resource = await self.session.get(self.spec.resource_model, resource_id)
        if resource is None:
            raise NotFoundError(f"{self.spec.label} {resource_id} not found")
        return resource

    async def _find_binding(self, project_id: int, resource_id: int, lock: bool = False):
        binding_model = self.spec.binding_model
        stmt = select(binding_model).where(
            binding_model.project_id == project_id,
            self.spec.binding_fk_column == resource_id,
        )
        if lock:
            # FOR UPDATE is a no-op on SQLite, which serializes writers anyway
            stmt = stmt.with_for_update()
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _require_binding(self, project_id: int, resource_id: int, lock: bool = False):
        binding = await self._find_binding(project_id, resource_id, lock=lock)
        if binding is None:
            raise NotFoundError(
                f"{self.spec.label} {resource_id} is not committed to project {project_id}"
            )
        return binding

    async def _add_to_binding(self, project_id: int, resource_id: int, quantity: int):
        """Create the (project, resource) binding or grow it by ``quantity``.

        PostgreSQL and SQLite get a single ``INSERT ... ON CONFLICT DO UPDATE``,
        so two first commits racing on the same pair add up instead of
        colliding. Other backends fall back to select-then-write, where the
        loser of such a race hits the unique constraint.
        """
        binding_model = self.spec.binding_model
        fk_column = self.spec.binding_fk_column
        upsert_insert = _UPSERT_INSERTS.get(self.session.get_bind().dialect.name)

        if upsert_insert is not None:
            stmt = upsert_insert(binding_model).values(
                project_id=project_id,
                quantity_used=quantity,
                **{self.spec.binding_fk: resource_id},
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[binding_model.project_id, fk_column],
                set_={"quantity_used": binding_model.quantity_used + stmt.excluded.quantity_used},
            ).returning(binding_model.id)
            binding_id = (await self.session.execute(stmt)).scalar_one()
            return await self.session.get(binding_model, binding_id, populate_existing=True)

        binding = await self._find_binding(project_id, resource_id)
        if binding is None:
            binding = binding_model(
                project_id=project_id,
                quantity_used=quantity,
                **{self.spec.binding_fk: resource_id},
            )
            self.session.add(binding)
            await self.session.flush()
            return binding

        await self.session.execute(
            update(binding_model)
            .where(binding_model.id == binding.id)
            .values(quantity_used=binding_model.quantity_used + quantity)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(binding)
        return binding

    async def _take_stock(self, resource, quantity: int) -> None:
        """Atomically decrement stock, failing when it would go negative."""
        resource_model = self.spec.resource_model
        result = await self.session.execute(
            update(resource_model)
            .where(
                resource_model.id == resource.id,
                resource_model.quantity >= quantity,
            )
            .values(quantity=resource_model.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(resource, attribute_names=["quantity"])
        if result.rowcount == 0:
            raise InsufficientStockError(
                f"Insufficient quantity of the {self.spec.label.lower()} available "
                f"(requested {quantity}, available {resource.quantity})",
                requested=quantity,
                available=resource.quantity,
            )

    async def _return_stock(self, resource, quantity: int) -> None:
        resource_model = self.spec.resource_model
        await self.session.execute(
            update(resource_model)
            .where(resource_model.id == resource.id)
            .values(quantity=resource_model.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(resource, attribute_names=["quantity"])

    def _to_commitment(self, binding, resource) -> Commitment:
        return Commitment(
            id=binding.id,
            project_id=binding.project_id,
            resource_id=resource.id,
            kind=self.kind,
            quantity_used=binding.quantity_used,
            stock_remaining=resource.quantity,
        )
