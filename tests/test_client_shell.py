import threading

import requests

from client.shell import (
    CONNECT_TEXT,
    LOADING_TEXT,
    OFFLINE_TEXT,
    RATE_LIMIT_TEXT,
    ChatShell,
    LivenessMonitor,
    ServerStatus,
)


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("not json")
        return self._body

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code}")


class FakeSession:
    """Stands in for requests.Session; queue results per method."""

    def __init__(self):
        self.get_results = []
        self.post_results = []
        self.calls = []

    def _next(self, results):
        item = results.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url, timeout=None):
        self.calls.append(("GET", url, timeout))
        return self._next(self.get_results)

    def post(self, url, json=None, timeout=None):
        self.calls.append(("POST", url, timeout, json))
        return self._next(self.post_results)

    def close(self):
        pass


def _shell(session):
    return ChatShell("http://relay.test/", session=session, ping_interval=3600)


def test_initial_status_is_checking():
    assert _shell(FakeSession()).status == ServerStatus.CHECKING


def test_ping_success_goes_online():
    s = FakeSession()
    s.get_results = [FakeResponse(200, {"status": "ok"})]
    shell = _shell(s)
    assert shell.check_status() == ServerStatus.ONLINE
    assert s.calls == [("GET", "http://relay.test/api/ping", 5.0)]
    assert shell.messages == []


def test_ping_failure_adds_single_offline_message():
    s = FakeSession()
    s.get_results = [requests.ConnectionError("down"), FakeResponse(500), requests.Timeout("slow")]
    shell = _shell(s)
    for _ in range(3):
        assert shell.check_status() == ServerStatus.OFFLINE
    offline = [m for m in shell.messages if m.text == OFFLINE_TEXT]
    assert len(offline) == 1
    assert offline[0].is_error


def test_online_to_offline_transition():
    s = FakeSession()
    s.get_results = [FakeResponse(200, {}), requests.ConnectionError("down")]
    shell = _shell(s)
    shell.check_status()
    assert shell.status == ServerStatus.ONLINE
    shell.check_status()
    assert shell.status == ServerStatus.OFFLINE


def test_retry_connection_recovers():
    s = FakeSession()
    s.get_results = [requests.ConnectionError("down"), FakeResponse(200, {})]
    shell = _shell(s)
    shell.check_status()
    assert shell.retry_connection() == ServerStatus.ONLINE


def test_send_success():
    s = FakeSession()
    s.post_results = [FakeResponse(200, {"reply": "Christopher Nolan"})]
    shell = _shell(s)
    shell.status = ServerStatus.ONLINE
    msg = shell.send("Who directed Inception?")
    assert msg.text == "Christopher Nolan"
    assert not msg.is_error
    assert [m.sender for m in shell.messages] == ["user", "bot"]
    assert s.calls[0] == ("POST", "http://relay.test/api/chat", 60.0, {"message": "Who directed Inception?"})
    assert shell.is_loading is False


def test_send_refuses_blank_and_offline():
    s = FakeSession()
    shell = _shell(s)
    assert shell.send("   ") is None
    shell.status = ServerStatus.OFFLINE
    assert shell.send("hello") is None
    assert s.calls == []
    assert shell.messages == []


def test_send_refuses_while_loading():
    shell = _shell(FakeSession())
    shell.is_loading = True
    assert shell.send("hello") is None


def test_send_uses_server_error_text():
    s = FakeSession()
    s.post_results = [FakeResponse(503, {"error": "The AI model is warming up"})]
    shell = _shell(s)
    msg = shell.send("hi")
    assert msg.is_error
    assert msg.text == "The AI model is warming up"


def test_send_maps_status_without_error_field():
    s = FakeSession()
    s.post_results = [FakeResponse(503, None), FakeResponse(429, {}), FakeResponse(502, None)]
    shell = _shell(s)
    assert shell.send("a").text == LOADING_TEXT
    assert shell.send("b").text == RATE_LIMIT_TEXT
    assert shell.send("c").text.startswith("Sorry, I encountered an error")


def test_send_connection_error_goes_offline():
    s = FakeSession()
    s.post_results = [requests.ConnectionError("refused")]
    shell = _shell(s)
    shell.status = ServerStatus.ONLINE
    msg = shell.send("hi")
    assert msg.text == CONNECT_TEXT
    assert shell.status == ServerStatus.OFFLINE
    assert shell.is_loading is False


def test_liveness_monitor_runs_immediately_and_stops():
    hits = []
    first = threading.Event()

    def probe():
        hits.append(1)
        first.set()

    mon = LivenessMonitor(probe, interval=3600)
    mon.start()
    assert first.wait(2)
    assert mon.running
    mon.stop(timeout=2)
    assert not mon.running
    assert hits == [1]


def test_shell_context_manager_stops_monitor():
    s = FakeSession()
    s.get_results = [FakeResponse(200, {})]
    with _shell(s) as shell:
        assert shell.monitor.running or shell.status == ServerStatus.ONLINE
    assert not shell.monitor.running


def test_concurrent_status_checks_do_not_overlap():
    state = {"active": 0, "peak": 0}
    guard = threading.Lock()
    release = threading.Event()

    class SlowSession(FakeSession):
        def get(self, url, timeout=None):
            with guard:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            release.wait(0.2)
            with guard:
                state["active"] -= 1
            return FakeResponse(200, {})

    shell = _shell(SlowSession())
    workers = [threading.Thread(target=shell.check_status) for _ in range(2)]
    workers.append(threading.Thread(target=shell.retry_connection))
    for w in workers:
        w.start()
    for w in workers:
        w.join(5)
    assert state["peak"] == 1
    assert shell.status == ServerStatus.ONLINE
