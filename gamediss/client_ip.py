"""Resolve the client address used as a rate-limit identifier.

Forwarding headers are only honoured when the direct peer is a trusted
proxy (TRUSTED_PROXY_NETS, loopback by default). Anything that does not
parse as an IP address is ignored, so arbitrary header text never ends up
in a limiter key.
"""
import ipaddress

from starlette.requests import Request

from gamediss.config import TRUSTED_PROXY_NETS

ANONYMOUS = "anonymous"

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def parse_proxy_nets(raw: str) -> list[IPNetwork]:
    nets: list[IPNetwork] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            nets.append(ipaddress.ip_network(part, strict=False))
        except ValueError:
            continue
    return nets


_TRUSTED_PROXY_NETS = parse_proxy_nets(TRUSTED_PROXY_NETS)


def _parse_ip(value: str) -> str | None:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return str(ipaddress.ip_address(value))
    except ValueError:
        return None


def _is_trusted(ip: str, trusted: list[IPNetwork]) -> bool:
    addr = ipaddress.ip_address(ip)
    return any(addr in net for net in trusted)


def client_ip(request: Request, trusted: list[IPNetwork] | None = None) -> str:
    if trusted is None:
        trusted = _TRUSTED_PROXY_NETS
    peer = _parse_ip(request.client.host if request.client else "")
    if peer and _is_trusted(peer, trusted):
        xff = request.headers.get("x-forwarded-for") or ""
        chain = [ip for ip in (_parse_ip(p) for p in xff.split(",")) if ip]
        # Right-most hop not added by one of our own proxies.
        while chain and _is_trusted(chain[-1], trusted):
            chain.pop()
        if chain:
            return chain[-1]
        real_ip = _parse_ip(request.headers.get("x-real-ip") or "")
        if real_ip:
            return real_ip
    return peer or ANONYMOUS

