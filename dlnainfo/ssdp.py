import socket
from datetime import datetime, timedelta
import select
import ifaddr

from .const import AVTRANSPORT_SERVICE_TYPE
from .errors import DiscoveryError
from .util import _getLogger

DISCOVER_TIMEOUT = 2
SSDP_TARGET = ("239.255.255.250", 1900)
SSDP_MX = DISCOVER_TIMEOUT
SSDP_TTL = 2
ST_ALL = "ssdp:all"

log = _getLogger(__name__)


class Advertisement(object):
    """
    A single SSDP search reply.
    """

    def __init__(self, service_type, location, server=None):
        self.service_type = service_type
        self.location = location
        self.server = server

    def __repr__(self):
        return "<Advertisement %s @ %s>" % (self.service_type, self.location)

    def __eq__(self, other):
        if not isinstance(other, Advertisement):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def _key(self):
        return (self.service_type, self.location, self.server)


def ssdp_request(ssdp_st, ssdp_mx=SSDP_MX):
    """Return request bytes for given st and mx."""
    return "\r\n".join(
        [
            "M-SEARCH * HTTP/1.1",
            "ST: {}".format(ssdp_st),
            "MX: {:d}".format(ssdp_mx),
            'MAN: "ssdp:discover"',
            "HOST: {}:{}".format(*SSDP_TARGET),
            "",
            "",
        ]
    ).encode("utf-8")


def parse_response(data):
    """
    Turn the raw bytes of an M-SEARCH reply into an `Advertisement`. Returns
    None for anything that isn't a usable reply.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return None
    lines = text.replace("\r\n", "\n").split("\n")
    if not lines[0].upper().startswith("HTTP/"):
        return None

    headers = {}
    for line in lines[1:]:
        if not line.strip():
            break
        name, sep, value = line.partition(":")
        if not sep:
            return None
        headers[name.strip().lower()] = value.strip()

    st = headers.get("st")
    location = headers.get("location")
    if not st or not location:
        return None
    return Advertisement(st, location, headers.get("server") or None)


def get_addresses_ipv4():
    # Get all adapters on current machine
    adapters = ifaddr.get_adapters()
    # Get the ip from the found adapters
    # Ignore localhost und IPv6 addresses
    return list(
        set(
            addr.ip
            for iface in adapters
            for addr in iface.ips
            if addr.is_IPv4 and addr.ip != "127.0.0.1"
        )
    )


def _open_sockets(request, target):
    sockets = []
    addresses = get_addresses_ipv4() or ["0.0.0.0"]
    for addr in addresses:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, SSDP_TTL)
            sock.bind((addr, 0))
            sock.sendto(request, target)
            sock.setblocking(False)
        except socket.error as exc:
            log.warning("Unable to search for devices on %s: %s", addr, exc)
            sock.close()
            continue
        log.debug("Sent M-SEARCH from %s to %s:%s", addr, *target)
        sockets.append(sock)
    return sockets


def scan(window=DISCOVER_TIMEOUT, target=SSDP_TARGET):
    """
    Multicast an `ssdp:all` M-SEARCH on every IPv4 interface and collect the
    replies that arrive within `window` seconds. Raises `DiscoveryError` if
    the search couldn't be sent anywhere.
    """
    found = []
    mx = max(int(window), 1)
    stop_wait = datetime.now() + timedelta(seconds=window)

    sockets = _open_sockets(ssdp_request(ST_ALL, mx), target)
    if not sockets:
        raise DiscoveryError("Unable to send an SSDP search on any network interface")

    try:
        while sockets:
            time_diff = stop_wait - datetime.now()
            seconds_left = time_diff.total_seconds()
            if seconds_left <= 0:
                break

            ready = select.select(sockets, [], [], seconds_left)[0]

            for sock in ready:
                try:
                    data, address = sock.recvfrom(2048)
                except socket.error:
                    log.exception("Socket error while discovering SSDP devices")
                    sockets.remove(sock)
                    sock.close()
                    continue
                advertisement = parse_response(data)
                if advertisement is None:
                    log.debug("Ignoring invalid SSDP response from %s", address)
                    continue
                if advertisement not in found:
                    found.append(advertisement)

    finally:
        for s in sockets:
            s.close()

    return found


def search(window=DISCOVER_TIMEOUT, st=AVTRANSPORT_SERVICE_TYPE):
    """
    Discover the devices advertising the `st` service. Every other reply is
    dropped.
    """
    advertisements = [adv for adv in scan(window) if adv.service_type == st]
    log.debug("%d of the SSDP replies match %s", len(advertisements), st)
    return advertisements
