"""Shared fakes; nothing here touches the network."""

import requests


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=""):
        self._payload = payload
        self.status_code = status_code
        self.text = text or str(payload)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Stands in for RateLimitedSession; replays queued responses in order."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


class FakeRPC:
    """Minimal RPCClient: block timestamps from a function, logs from a callback."""

    def __init__(self, timestamp_of=lambda n: n * 12, head=1000, logs_for=None, contracts=None):
        self.timestamp_of = timestamp_of
        self.head = head
        self.logs_for = logs_for or (lambda f: [])
        self.contracts = contracts or {}
        self.filters = []

    def get_block_number(self):
        return self.head

    def get_block_timestamp(self, number):
        return self.timestamp_of(number)

    def get_logs(self, filter_params):
        self.filters.append(filter_params)
        return self.logs_for(filter_params)

    def contract(self, address, abi):
        return self.contracts[address]


def install_session(client, responses):
    session = FakeSession(responses)
    client._session = session
    client.config.retry_delay_base = 0
    return session
