from planets_service.services.health import CheckResult, HealthService, failure, success
from planets_service.utils.errors import GatewayUnavailable


def test_liveness_does_not_run_checks() -> None:
    def exploding() -> CheckResult:
        raise AssertionError("liveness must not run checks")

    service = HealthService(checks={"database": exploding}, version="0.1.0")
    payload = service.liveness()
    assert payload["status"] == "ok"
    assert payload["version"] == "0.1.0"


def test_readiness_ok_when_all_checks_pass() -> None:
    service = HealthService(checks={"database": lambda: success("reachable")}, version="0.1.0")
    payload = service.readiness()
    assert payload["status"] == "ok"
    assert payload["checks"] == {"database": {"status": "ok", "detail": "reachable"}}


def test_readiness_reports_raised_errors() -> None:
    def unreachable() -> CheckResult:
        raise GatewayUnavailable("ping", "connection refused")

    service = HealthService(
        checks={"database": unreachable, "cache": lambda: CheckResult(status="degraded")},
        version="0.1.0",
    )
    payload = service.readiness()
    assert payload["status"] == "error"
    assert payload["checks"]["database"]["status"] == "error"
    assert "unavailable" in payload["checks"]["database"]["detail"]


def test_readiness_degraded_when_no_errors() -> None:
    service = HealthService(
        checks={"a": lambda: success(), "b": lambda: CheckResult(status="degraded", detail="slow")},
        version="0.1.0",
    )
    assert service.readiness()["status"] == "degraded"


def test_failure_helper() -> None:
    assert failure("down") == CheckResult(status="error", detail="down")
