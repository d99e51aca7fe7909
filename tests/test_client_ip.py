from starlette.requests import Request

from gamediss.client_ip import ANONYMOUS, client_ip, parse_proxy_nets

LOOPBACK = parse_proxy_nets("127.0.0.1/32,::1/128")


def _request(peer: str | None, headers: dict[str, str] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": (peer, 50000) if peer else None,
    }
    return Request(scope)


def test_direct_peer_is_used():
    assert client_ip(_request("203.0.113.7"), LOOPBACK) == "203.0.113.7"


def test_forwarded_for_ignored_from_untrusted_peer():
    r = _request("203.0.113.7", {"X-Forwarded-For": "1.2.3.4"})
    assert client_ip(r, LOOPBACK) == "203.0.113.7"


def test_forwarded_for_from_trusted_proxy():
    r = _request("127.0.0.1", {"X-Forwarded-For": "1.2.3.4"})
    assert client_ip(r, LOOPBACK) == "1.2.3.4"


def test_forwarded_chain_skips_trusted_hops():
    r = _request("127.0.0.1", {"X-Forwarded-For": "9.9.9.9, 1.2.3.4, 127.0.0.1"})
    assert client_ip(r, LOOPBACK) == "1.2.3.4"


def test_garbage_forwarded_entries_are_dropped():
    r = _request("127.0.0.1", {"X-Forwarded-For": "not-an-ip, <script>"})
    assert client_ip(r, LOOPBACK) == "127.0.0.1"


def test_real_ip_fallback():
    r = _request("127.0.0.1", {"X-Real-IP": "2001:db8::1"})
    assert client_ip(r, LOOPBACK) == "2001:db8::1"


def test_unparseable_peer_is_anonymous():
    assert client_ip(_request("testclient"), LOOPBACK) == ANONYMOUS
    assert client_ip(_request(None), LOOPBACK) == ANONYMOUS


def test_parse_proxy_nets_skips_invalid():
    nets = parse_proxy_nets("10.0.0.0/8, bogus, ,::1/128")
    assert [str(n) for n in nets] == ["10.0.0.0/8", "::1/128"]
