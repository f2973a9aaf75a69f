from __future__ import annotations

import json
import logging

from storefront.core.logging import JsonLogFormatter, bind_request_id


def test_json_formatter_includes_correlation_id_and_known_extras() -> None:
    bind_request_id("corr-1")
    record = logging.LogRecord(
        name="storefront.orders",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="order_placed",
        args=(),
        exc_info=None,
    )
    record.user_id = "u1"
    record.resource_id = "ORD123456ABC"
    record.unrelated = "dropped"

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["message"] == "order_placed"
    assert payload["correlation_id"] == "corr-1"
    assert payload["user_id"] == "u1"
    assert payload["resource_id"] == "ORD123456ABC"
    assert "unrelated" not in payload
