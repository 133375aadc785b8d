"""
LineItemRequests -- request-level entry points for line items.

Responsibility:
    Adapts LineItemService and LineItemSelector to the shape an external
    HTTP layer consumes: a status code and an optional JSON-ready body.
    The caller resolves the authenticated user, the current order cycle and
    the current distributor and passes them in.

        index()    -> 200 with the user's bought items, 403 without a user
        destroy()  -> 204 on removal, 403 on policy denial, 404 for an
                      unknown line item, 400 for an unparseable id

Architecture position:
    Kernel > Services -- the transaction owner for line item requests.
    Commits on success and rolls back on failure when auto_commit=True.

Failure modes:
    - MissingLineItemIdError propagates: a destroy without an id is a
      malformed request, not a policy outcome.
    - ComputationError propagates after rollback.
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from order_kernel.domain.dtos import RecalculationSettings
from order_kernel.exceptions import (
    AuthorizationError,
    MissingLineItemIdError,
    NotFoundError,
)
from order_kernel.logging_config import LogContext, get_logger
from order_kernel.selectors.line_item_selector import LineItemSelector
from order_kernel.services.line_item_service import LineItemService

logger = get_logger("services.line_item_requests")


@dataclass(frozen=True)
class RequestResult:
    """Status and body for the HTTP layer to serialize."""

    status: HTTPStatus
    body: Any = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


class LineItemRequests:
    """Line item index and destroy requests."""

    def __init__(
        self,
        session: Session,
        settings: RecalculationSettings,
        auto_commit: bool = True,
    ):
        self._session = session
        self._auto_commit = auto_commit
        self._service = LineItemService(session, settings)
        self._selector = LineItemSelector(session)

    def index(
        self,
        current_user_id: UUID | None,
        current_order_cycle_id: UUID | None,
        current_distributor_id: UUID | None,
    ) -> RequestResult:
        """List line items the user bought from this shop in this order cycle."""
        if current_user_id is None:
            return RequestResult(status=HTTPStatus.FORBIDDEN)
        items = self._selector.list_bought_items(
            current_user_id, current_distributor_id, current_order_cycle_id
        )
        return RequestResult(
            status=HTTPStatus.OK,
            body=[item.to_dict() for item in items],
        )

    def destroy(
        self,
        line_item_id: UUID | str | None,
        current_user_id: UUID | None,
        current_order_cycle_id: UUID | None = None,
        current_distributor_id: UUID | None = None,
    ) -> RequestResult:
        """
        Remove a line item and recalculate its order.

        Authorization is decided on the line item's own order; the current
        order cycle and distributor are passed through to the service for
        its events.

        Raises:
            MissingLineItemIdError: If no line item id was supplied.
            ComputationError: If the order cannot be recalculated.
        """
        if line_item_id is None or line_item_id == "":
            raise MissingLineItemIdError("destroy")

        if not isinstance(line_item_id, UUID):
            try:
                line_item_id = UUID(str(line_item_id))
            except ValueError:
                return RequestResult(status=HTTPStatus.BAD_REQUEST)

        with LogContext.bind(
            correlation_id=str(uuid4()),
            user_id=str(current_user_id) if current_user_id else None,
            line_item_id=str(line_item_id),
        ):
            try:
                self._service.destroy(
                    line_item_id,
                    current_user_id,
                    current_order_cycle_id=current_order_cycle_id,
                    current_distributor_id=current_distributor_id,
                )
                if self._auto_commit:
                    self._session.commit()
                return RequestResult(status=HTTPStatus.NO_CONTENT)

            except AuthorizationError:
                if self._auto_commit:
                    self._session.rollback()
                return RequestResult(status=HTTPStatus.FORBIDDEN)

            except NotFoundError:
                if self._auto_commit:
                    self._session.rollback()
                return RequestResult(status=HTTPStatus.NOT_FOUND)

            except Exception:
                if self._auto_commit:
                    self._session.rollback()
                logger.error("line_item_destroy_failed", exc_info=True)
                raise
