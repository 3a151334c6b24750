import asyncio
from functools import partial

import requests
import aiohttp
from requests.compat import urlparse
from lxml import etree

from .util import _getLogger, _origin
from .const import HTTP_TIMEOUT, CONNECTION_MANAGER_SERVICE_ID
from .errors import DescriptionError, EndpointMissing


class ServiceEndpoint(object):
    """
    A service listed in a device description, with its control URL already
    made absolute.
    """

    def __init__(self, service_type, service_id, control_url):
        self.service_type = service_type
        self.service_id = service_id
        self.control_url = control_url

    def __repr__(self):
        return "<ServiceEndpoint service_id='%s'>" % (self.service_id)


def resolve_control_url(location, control_url):
    """
    Make `control_url` absolute. Relative paths hang off the scheme and
    authority of the description URL, never off its path.
    """
    parsed = urlparse(control_url)
    if parsed.scheme and parsed.netloc:
        return control_url
    if not control_url.startswith("/"):
        control_url = "/" + control_url
    return _origin(location) + control_url


class DeviceDescription(object):
    """
    UPnP device description.
    `location` is the URL from the SSDP 'LOCATION' header. The XML document
    found there is fetched and its service list read. Only what's needed to
    talk to the ConnectionManager is kept.

    Raises DescriptionError when the location is invalid, can't be fetched or
    doesn't hold well formed XML.

    Example:

    >>> desc = DeviceDescription('http://10.0.0.2:8000/desc.xml')
    >>> desc.friendly_name
    'Living Room'
    >>> desc.connection_manager.control_url
    'http://10.0.0.2:8000/ctl/cm'
    """

    def __init__(
        self,
        location,
        use_async=False,
        device_name=None,
        session=None,
        timeout=HTTP_TIMEOUT,
    ):
        self.location = location
        self.device_name = device_name
        self.timeout = timeout
        self.friendly_name = ""
        self.services = []
        self._log = _getLogger("DeviceDescription")

        try:
            parsed = urlparse(location)
        except ValueError as exc:
            raise DescriptionError(location, exc, device_name) from exc
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise DescriptionError(location, "not an HTTP URL", device_name)
        self.host = parsed.hostname

        if use_async:
            self.session = session
        else:
            self.session = None
            data = self._get_device_description()
            self._set_device_attributes(data)

    def __repr__(self):
        return "<DeviceDescription '%s'>" % (self.friendly_name or self.location)

    def _get_device_description(self):
        """
        Synchronously retrieve the description document.
        """
        self._log.debug("Reading %s", self.location)
        try:
            resp = requests.get(self.location, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise DescriptionError(self.location, exc, self.device_name) from exc
        return resp.content

    async def async_init(self, session=None):
        """
        Asynchronously retrieve the description document and set attributes.
        """
        session = session or self.session
        if session is None:
            raise ValueError("async_init needs an aiohttp.ClientSession")
        self._log.debug("Reading %s", self.location)
        try:
            async with session.get(
                self.location, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                resp.raise_for_status()
                data = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise DescriptionError(
                self.location, str(exc) or exc.__class__.__name__, self.device_name
            ) from exc
        self._set_device_attributes(data)
        return self

    def _set_device_attributes(self, data):
        try:
            root = etree.fromstring(data)
        except (etree.XMLSyntaxError, ValueError) as exc:
            raise DescriptionError(
                self.location, "invalid XML: %s" % exc, self.device_name
            ) from exc
        findtext = partial(root.findtext, namespaces=root.nsmap, default="")

        self.friendly_name = findtext("device/friendlyName").strip()
        self._read_services(root)

    def _read_services(self, root):
        # Services can be listed in two places (Section 2.3 of uPNP device
        # architecture v1.1). The root device's own list comes first.
        self.services = []
        nodes = root.findall("device/serviceList/service", namespaces=root.nsmap)
        nodes += root.findall(
            "device/deviceList//serviceList/service", namespaces=root.nsmap)
        for node in nodes:
            findtext = partial(node.findtext, namespaces=root.nsmap, default="")
            control_url = findtext("controlURL").strip()
            try:
                resolved = resolve_control_url(self.location, control_url) if control_url else ""
            except ValueError as exc:
                raise DescriptionError(
                    self.location, "invalid controlURL %r: %s" % (control_url, exc),
                    self.device_name
                ) from exc
            svc = ServiceEndpoint(
                findtext("serviceType").strip(),
                findtext("serviceId").strip(),
                resolved,
            )
            self._log.debug(
                "%s: Service %r at %r", self.location, svc.service_id, svc.control_url
            )
            self.services.append(svc)

    def find_service(self, service_id):
        """
        Return the first service with exactly this `serviceId`, or None.
        """
        for service in self.services:
            if service.service_id == service_id:
                return service

    @property
    def connection_manager(self):
        service = self.find_service(CONNECTION_MANAGER_SERVICE_ID)
        if service is None or not service.control_url:
            raise EndpointMissing(self.location, self.device_name or self.friendly_name)
        return service


def extract(location, timeout=HTTP_TIMEOUT):
    """
    Fetch the description at `location` and return its ConnectionManager
    `ServiceEndpoint`.
    """
    return DeviceDescription(location, timeout=timeout).connection_manager


def friendly_name(description, server=None):
    """
    Pick a display name for a device: its friendlyName, then the SSDP SERVER
    header, then the host it lives on.
    """
    if description.friendly_name:
        return description.friendly_name
    if server and server.strip():
        return server.strip()
    return description.host
