from __future__ import annotations

import json
import logging

import pytest
from prometheus_client import REGISTRY

import protocol_testers
from protocol_testers import DnsTester, HttpTester, InvalidResponseError
from protocol_testers.logging_setup import JsonFormatter
from protocol_testers.tester import instrument


def test_testers_satisfy_protocol():
    testers: list[protocol_testers.Tester] = [DnsTester("127.0.0.1", 1.0), HttpTester(1.0)]
    for t in testers:
        for hook in ("before", "after", "before_each", "after_each", "request_executor"):
            assert callable(getattr(t, hook))


def test_instrument_counts_outcomes_and_latency(count_outcome):
    def execute(n, request):
        if request == "bad":
            raise InvalidResponseError("invalid response: nope")
        if request == "boom":
            raise ConnectionError("refused")
        return request

    run = instrument("unit", execute)
    hist_before = REGISTRY.get_sample_value("tester_latency_seconds_count", {"protocol": "unit"}) or 0.0
    ok_before = count_outcome("unit", "ok")
    bad_before = count_outcome("unit", "invalid_response")
    err_before = count_outcome("unit", "error")

    assert run(1, "fine") == "fine"
    with pytest.raises(InvalidResponseError):
        run(2, "bad")
    with pytest.raises(ConnectionError):
        run(3, "boom")

    assert count_outcome("unit", "ok") == ok_before + 1
    assert count_outcome("unit", "invalid_response") == bad_before + 1
    assert count_outcome("unit", "error") == err_before + 1
    assert REGISTRY.get_sample_value("tester_latency_seconds_count", {"protocol": "unit"}) == hist_before + 3


def test_sequence_number_does_not_change_result():
    run = instrument("unit", lambda n, request: request)
    assert run(1, "same") == run(99999, "same")


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("protocol_testers.tester", logging.WARNING, __file__, 1,
                               "invalid_request seq=%s", (7,), None)
    record.protocol = "dns"
    record.seq = 7

    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["msg"] == "invalid_request seq=7"
    assert payload["protocol"] == "dns"
    assert payload["seq"] == 7


def test_setup_logging_installs_json_handler(capsys):
    from protocol_testers.logging_setup import setup_logging

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("info")
        logging.getLogger("protocol_testers.test").info("hello key=%s", "v")
        line = capsys.readouterr().out.strip().splitlines()[-1]
        assert json.loads(line)["msg"] == "hello key=v"
        assert root.level == logging.INFO
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_start_metrics_server_on_ephemeral_port():
    from protocol_testers.config import Config
    from protocol_testers.metrics import start_metrics_server

    cfg = Config(log_level="INFO", metrics_bind="127.0.0.1", metrics_port=0, dns=None, http=None)
    server, thread = start_metrics_server(cfg)
    try:
        assert server.server_address[1] != 0
    finally:
        server.shutdown()
        server.server_close()
    thread.join(timeout=5)
    assert not thread.is_alive()
