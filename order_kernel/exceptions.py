"""
Typed Exception Hierarchy for the Order Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from OrderKernelError:

    OrderKernelError (base)
    |
    +-- RequestError
    |   +-- MissingLineItemIdError
    |
    +-- NotFoundError
    |   +-- LineItemNotFoundError
    |   +-- OrderNotFoundError
    |
    +-- AuthorizationError
    |   +-- LineItemDeletionForbiddenError
    |
    +-- ComputationError
    |   +-- InvalidTaxRateError
    |   +-- InvalidCalculatorConfigError
    |   +-- UnknownCalculatorError
    |   +-- UnsupportedCalculationTargetError
    |
    +-- ConfigError
        +-- ConfigValidationError (order_config)

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                           | When Raised
----------------|--------------------------------|--------------------------------------
Request         | MISSING_LINE_ITEM_ID           | Destroy called without an identifier
----------------|--------------------------------|--------------------------------------
Not found       | LINE_ITEM_NOT_FOUND            | Line item ID doesn't exist
                | ORDER_NOT_FOUND                | Order ID doesn't exist
----------------|--------------------------------|--------------------------------------
Authorization   | LINE_ITEM_DELETION_FORBIDDEN   | Deletion policy denied the request
----------------|--------------------------------|--------------------------------------
Computation     | INVALID_TAX_RATE               | Rate is negative, NaN or not numeric
                | INVALID_CALCULATOR_CONFIG      | Calculator preference is malformed
                | UNKNOWN_CALCULATOR             | No calculator registered for the kind
                | UNSUPPORTED_CALCULATION_TARGET | Compute asked for a non order target
----------------|--------------------------------|--------------------------------------
Config          | CONFIG_VALIDATION_FAILED       | Marketplace config failed validation

===============================================================================
HANDLING PATTERNS
===============================================================================

Request endpoints map categories to response statuses:

    try:
        service.destroy(line_item_id, user_id)
    except AuthorizationError:
        return RequestResult(status=HTTPStatus.FORBIDDEN)
    except NotFoundError:
        return RequestResult(status=HTTPStatus.NOT_FOUND)

RequestError and ComputationError always propagate to the caller: the first
is a malformed request, the second means totals could not be derived and the
transaction has been rolled back.
"""


class OrderKernelError(Exception):
    """
    Base exception for all order kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ORDER_KERNEL_ERROR"


# Request-shape exceptions


class RequestError(OrderKernelError):
    """Base exception for malformed requests."""

    code: str = "REQUEST_ERROR"


class MissingLineItemIdError(RequestError):
    """A line item operation was requested without an identifier."""

    code: str = "MISSING_LINE_ITEM_ID"

    def __init__(self, operation: str = "destroy"):
        self.operation = operation
        super().__init__(f"Line item id is required for {operation}")


# Lookup exceptions


class NotFoundError(OrderKernelError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"


class LineItemNotFoundError(NotFoundError):
    """Line item with given ID was not found."""

    code: str = "LINE_ITEM_NOT_FOUND"

    def __init__(self, line_item_id: str):
        self.line_item_id = line_item_id
        super().__init__(f"Line item not found: {line_item_id}")


class OrderNotFoundError(NotFoundError):
    """Order with given ID was not found."""

    code: str = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


# Authorization exceptions


class AuthorizationError(OrderKernelError):
    """Base exception for policy denials."""

    code: str = "AUTHORIZATION_ERROR"


class LineItemDeletionForbiddenError(AuthorizationError):
    """The deletion policy refused to remove a line item."""

    code: str = "LINE_ITEM_DELETION_FORBIDDEN"

    def __init__(self, line_item_id: str, reason: str):
        self.line_item_id = line_item_id
        self.reason = reason
        super().__init__(f"Deletion of line item {line_item_id} forbidden: {reason}")


# Computation exceptions


class ComputationError(OrderKernelError):
    """Base exception for failures while deriving fee or tax amounts."""

    code: str = "COMPUTATION_ERROR"


class InvalidTaxRateError(ComputationError):
    """Tax rate is not a finite, non-negative number."""

    code: str = "INVALID_TAX_RATE"

    def __init__(self, rate: object):
        self.rate = str(rate)
        super().__init__(f"Invalid tax rate: {rate!r}")


class InvalidCalculatorConfigError(ComputationError):
    """A calculator preference is missing or malformed."""

    code: str = "INVALID_CALCULATOR_CONFIG"

    def __init__(self, calculator: str, preference: str, value: object):
        self.calculator = calculator
        self.preference = preference
        self.value = str(value)
        super().__init__(
            f"Invalid preference {preference}={value!r} for calculator {calculator}"
        )


class UnknownCalculatorError(ComputationError):
    """No calculator is registered under the requested kind."""

    code: str = "UNKNOWN_CALCULATOR"

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown calculator kind: {kind}")


class UnsupportedCalculationTargetError(ComputationError):
    """Compute was asked to price something that is not a line item or order."""

    code: str = "UNSUPPORTED_CALCULATION_TARGET"

    def __init__(self, calculator: str, target_type: str):
        self.calculator = calculator
        self.target_type = target_type
        super().__init__(
            f"Calculator {calculator} cannot compute an amount for {target_type}"
        )


# Configuration exceptions


class ConfigError(OrderKernelError):
    """Base exception for marketplace configuration problems."""

    code: str = "CONFIG_ERROR"
