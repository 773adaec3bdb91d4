from planets_service.utils.errors import (
    DetailsNotFound,
    FoundationError,
    GatewayUnavailable,
    InvalidIdentifier,
    UnsupportedOperation,
)


def test_foundation_error_wraps_problem():
    error = FoundationError("Oops", status=404)
    assert error.problem.status == 404
    assert error.problem.type == "https://planets-service/errors/internal-error"


def test_error_extensions_carry_code_status_and_extra():
    error = DetailsNotFound(9)
    assert error.extensions == {"code": "DETAILS_NOT_FOUND", "status": 500, "planet_id": 9}
    assert str(error) == "Details not found for planet 9"


def test_invalid_identifier_is_client_error():
    error = InvalidIdentifier("abc")
    assert error.problem.status == 400
    assert error.extensions["value"] == "abc"


def test_gateway_unavailable_keeps_reason():
    error = GatewayUnavailable("list_all", ConnectionError("refused"))
    assert error.problem.status == 503
    assert error.problem.detail == "refused"
    assert error.extensions["operation"] == "list_all"


def test_unsupported_operation_is_not_implemented():
    error = UnsupportedOperation("nope")
    assert isinstance(error, NotImplementedError)
    assert error.extensions["code"] == "UNSUPPORTED_OPERATION"
