from types import SimpleNamespace

from apps.backend.services.admin.logger import log_request_response, mask_headers
from apps.backend.services.commission.commission_policy import CommissionPolicyError
from apps.backend.services.core_service import CoreError
from apps.backend.utils.envelope import fail


def test_mask_headers_hides_secrets():
    out = mask_headers({"X-Admin-Token": "s3cret", "Authorization": "Bearer x", "Accept": "*/*"})
    assert out["X-Admin-Token"] == "***masked***"
    assert out["Authorization"] == "***masked***"
    assert out["Accept"] == "*/*"


def test_log_request_response_entry():
    request = SimpleNamespace(
        method="GET",
        url=SimpleNamespace(path="/commission/config"),
        client=None,
        headers={"apikey": "k"},
    )
    entry = log_request_response(request, SimpleNamespace(status_code=200), start_time=0.0)
    assert entry["path"] == "/commission/config"
    assert entry["headers"]["apikey"] == "***masked***"


def test_fail_uses_domain_status():
    r = fail(CoreError("Reseller not found", 404), "x")
    assert r.status_code == 404
    assert fail(CommissionPolicyError("bad tier"), "x").status_code == 400


def test_fail_hides_unexpected_errors():
    r = fail(RuntimeError("db password is hunter2"), "x")
    assert r.status_code == 500
    assert b"hunter2" not in r.body
