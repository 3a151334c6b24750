import asyncio
from collections import OrderedDict

import aiohttp
from requests.compat import urlparse
from lxml import etree

from .util import _getLogger
from .const import (
    HTTP_TIMEOUT,
    SOAP_TIMEOUT,
    GET_PROTOCOL_INFO,
    GET_CURRENT_CONNECTION_IDS,
    PROTOCOL_INFO_HEADER,
    CONNECTION_IDS_HEADER,
    SECTION_DELIMITER,
    BLOCK_DELIMITER,
)
from .errors import DescriptionError, EndpointMissing, SOAPError, NoRenderers
from .ssdp import search, DISCOVER_TIMEOUT
from .soap import SOAP
from .upnp import DeviceDescription, friendly_name

QUERY_ERRORS = (DescriptionError, EndpointMissing, SOAPError)


class Renderer(object):
    def __init__(self, name, location, server=None):
        self.name = name
        self.location = location
        self.server = server

    def __repr__(self):
        return "<Renderer '%s' @ %s>" % (self.name, self.location)


class Aggregator(object):
    """
    Discovers the media renderers on the network and asks each one's
    ConnectionManager for its ProtocolInfo and current ConnectionIDs.

    By default the first device that fails ends the run with that error. With
    `keep_going` the error message takes the place of the device's response
    and the other devices are still queried. With `pretty` XML responses are
    re-indented before they go into the report.
    """

    def __init__(
        self,
        window=DISCOVER_TIMEOUT,
        keep_going=False,
        pretty=False,
        http_timeout=HTTP_TIMEOUT,
        soap_timeout=SOAP_TIMEOUT,
    ):
        self.window = window
        self.keep_going = keep_going
        self.pretty = pretty
        self.http_timeout = http_timeout
        self.soap_timeout = soap_timeout
        self._log = _getLogger("Aggregator")

    def run(self):
        """
        Build the report. Raises one of the `dlnainfo.errors` exceptions.
        """
        descriptions = {}
        advertisements = search(self.window)
        renderers = list(self.collect_renderers(advertisements, descriptions).values())
        protocol_info = [
            self.query(renderer, GET_PROTOCOL_INFO, descriptions) for renderer in renderers
        ]
        connection_ids = [
            self.query(renderer, GET_CURRENT_CONNECTION_IDS, descriptions)
            for renderer in renderers
        ]
        return self.compose(renderers, protocol_info, connection_ids)

    def describe(self, location, descriptions, device_name=None):
        """
        Return the `DeviceDescription` for `location`, fetching it only once
        per run.
        """
        try:
            description = descriptions[location]
        except KeyError:
            description = DeviceDescription(location, timeout=self.http_timeout)
            descriptions[location] = description
        if device_name is not None:
            description.device_name = device_name
        return description

    def collect_renderers(self, advertisements, descriptions):
        """
        Map each advertisement to a `Renderer` keyed by its display name. A
        later advertisement with the same name replaces the earlier one.
        """
        renderers = OrderedDict()
        for adv in advertisements:
            try:
                name = friendly_name(self.describe(adv.location, descriptions), adv.server)
            except DescriptionError as exc:
                if not self.keep_going:
                    raise
                name = self._fallback_name(adv)
                self._log.warning("Naming %s after its SSDP reply: %s", name, exc)
            self._add_renderer(renderers, Renderer(name, adv.location, adv.server))
        if not renderers:
            raise NoRenderers()
        return renderers

    def _add_renderer(self, renderers, renderer):
        previous = renderers.pop(renderer.name, None)
        if previous is not None:
            self._log.info(
                "%r at %s replaces %s", renderer.name, renderer.location, previous.location
            )
        renderers[renderer.name] = renderer

    @staticmethod
    def _fallback_name(adv):
        if adv.server:
            return adv.server
        try:
            return urlparse(adv.location).hostname or adv.location
        except ValueError:
            return adv.location

    def query(self, renderer, action, descriptions):
        """
        Call `action` on the renderer's ConnectionManager and return the
        response body as text.
        """
        try:
            description = self.describe(renderer.location, descriptions, renderer.name)
            endpoint = description.connection_manager
            body = SOAP(endpoint.control_url, timeout=self.soap_timeout).call(
                action, renderer.name
            )
        except QUERY_ERRORS as exc:
            if not self.keep_going:
                raise
            return self._error_body(renderer, action, exc)
        return self._format_body(body)

    def _error_body(self, renderer, action, exc):
        self._log.warning("%s on %r failed: %s", action, renderer.name, exc)
        return "ERROR: %s" % exc

    def _format_body(self, body):
        if self.pretty:
            try:
                root = etree.fromstring(body)
            except (etree.XMLSyntaxError, ValueError):
                pass
            else:
                return etree.tostring(root, pretty_print=True, encoding="unicode").rstrip("\n")
        return body.decode("utf-8", "replace")

    @staticmethod
    def compose(renderers, protocol_info, connection_ids):
        """
        Lay out the two blocks. The i-th section of each block belongs to the
        i-th renderer.
        """
        report = []
        for renderer, body in zip(renderers, protocol_info):
            report.append(PROTOCOL_INFO_HEADER % renderer.name + body + SECTION_DELIMITER)
        report.append(BLOCK_DELIMITER)
        for renderer, body in zip(renderers, connection_ids):
            report.append(CONNECTION_IDS_HEADER % renderer.name + body + SECTION_DELIMITER)
        return "".join(report)

    async def async_run(self, session=None):
        """
        Build the report, querying all renderers concurrently.
        """
        loop = asyncio.get_running_loop()
        advertisements = await loop.run_in_executor(None, search, self.window)

        own_session = session is None
        if own_session:
            session = aiohttp.ClientSession()
        try:
            descriptions = {}
            renderers = await self.async_collect_renderers(
                advertisements, descriptions, session
            )
            renderers = list(renderers.values())
            protocol_info = await self._async_query_all(
                renderers, GET_PROTOCOL_INFO, descriptions, session
            )
            connection_ids = await self._async_query_all(
                renderers, GET_CURRENT_CONNECTION_IDS, descriptions, session
            )
        finally:
            if own_session:
                await session.close()
        return self.compose(renderers, protocol_info, connection_ids)

    async def async_describe(self, location, descriptions, session, device_name=None):
        try:
            description = descriptions[location]
        except KeyError:
            description = DeviceDescription(
                location, use_async=True, session=session, timeout=self.http_timeout
            )
            await description.async_init()
            descriptions[location] = description
        if device_name is not None:
            description.device_name = device_name
        return description

    async def async_collect_renderers(self, advertisements, descriptions, session):
        locations = list(OrderedDict.fromkeys(adv.location for adv in advertisements))
        results = await asyncio.gather(
            *[self.async_describe(location, descriptions, session) for location in locations],
            return_exceptions=True
        )
        fetched = dict(zip(locations, results))

        renderers = OrderedDict()
        for adv in advertisements:
            result = fetched[adv.location]
            if isinstance(result, DescriptionError):
                if not self.keep_going:
                    raise result
                name = self._fallback_name(adv)
                self._log.warning("Naming %s after its SSDP reply: %s", name, result)
            elif isinstance(result, BaseException):
                raise result
            else:
                name = friendly_name(result, adv.server)
            self._add_renderer(renderers, Renderer(name, adv.location, adv.server))
        if not renderers:
            raise NoRenderers()
        return renderers

    async def _async_query(self, renderer, action, descriptions, session):
        try:
            description = await self.async_describe(
                renderer.location, descriptions, session, renderer.name
            )
            endpoint = description.connection_manager
            body = await SOAP(
                endpoint.control_url, session=session, timeout=self.soap_timeout
            ).async_call(action, renderer.name)
        except QUERY_ERRORS as exc:
            if not self.keep_going:
                raise
            return self._error_body(renderer, action, exc)
        return self._format_body(body)

    async def _async_query_all(self, renderers, action, descriptions, session):
        results = await asyncio.gather(
            *[self._async_query(r, action, descriptions, session) for r in renderers],
            return_exceptions=True
        )
        # Raise the error of the earliest device in report order.
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return results


def run(window=DISCOVER_TIMEOUT, **kwargs):
    """
    Convenience method to build the report for every renderer on the network.
    """
    return Aggregator(window, **kwargs).run()


async def async_run(window=DISCOVER_TIMEOUT, session=None, **kwargs):
    return await Aggregator(window, **kwargs).async_run(session=session)
