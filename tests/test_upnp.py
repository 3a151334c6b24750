import asyncio
import os.path as path
import unittest

import aiohttp
import mock
import requests

import dlnainfo as dlna
from dlnainfo.upnp import resolve_control_url
from tests.const import description
from tests.helpers import XML_DIR, async_test, make_response, serve_xml_dir


class TestResolveControlURL(unittest.TestCase):
    def test_relative(self):
        """
        A relative controlURL hangs off the scheme and authority, not the path.
        """
        self.assertEqual(
            resolve_control_url("http://10.0.0.2:8000/sub/desc.xml", "/ctl/cm"),
            "http://10.0.0.2:8000/ctl/cm",
        )

    def test_absolute(self):
        """
        An absolute controlURL is used unchanged.
        """
        self.assertEqual(
            resolve_control_url("http://10.0.0.2:8000/sub/desc.xml", "http://other:9/cm"),
            "http://other:9/cm",
        )

    def test_missing_slash(self):
        """
        A path without a leading slash still gets one.
        """
        self.assertEqual(
            resolve_control_url("http://10.0.0.3/dd.xml", "upnp/cm"),
            "http://10.0.0.3/upnp/cm",
        )

    def test_no_port(self):
        self.assertEqual(
            resolve_control_url("http://10.0.0.3/dd.xml", "/upnp/cm"),
            "http://10.0.0.3/upnp/cm",
        )


class TestDeviceDescription(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        """
        Serve the XML fixtures over HTTP.
        """
        cls.httpd, cls.base_url = serve_xml_dir()
        cls.loop = asyncio.new_event_loop()

    @classmethod
    def tearDownClass(cls):
        cls.httpd.shutdown()
        cls.httpd.server_close()
        cls.loop.close()

    def url(self, name):
        return "%s/%s" % (self.base_url, name)

    def test_friendly_name(self):
        """
        The friendlyName of the root device should be read.
        """
        desc = dlna.DeviceDescription(self.url("renderer.xml"))
        self.assertEqual(desc.friendly_name, "Living Room")

    def test_services(self):
        """
        Every service in the list should be present, with absolute control URLs.
        """
        desc = dlna.DeviceDescription(self.url("renderer.xml"))
        service_ids = [service.service_id for service in desc.services]
        self.assertEqual(service_ids, [
            "urn:upnp-org:serviceId:AVTransport",
            "urn:upnp-org:serviceId:ConnectionManager",
            "urn:upnp-org:serviceId:RenderingControl",
        ])
        for service in desc.services:
            self.assertTrue(service.control_url.startswith(self.base_url + "/ctl/"))

    def test_connection_manager_relative(self):
        """
        The ConnectionManager is matched on serviceId whatever its serviceType version.
        """
        endpoint = dlna.DeviceDescription(self.url("renderer.xml")).connection_manager
        self.assertEqual(endpoint.control_url, self.base_url + "/ctl/cm")
        self.assertEqual(
            endpoint.service_type, "urn:schemas-upnp-org:service:ConnectionManager:2")

    def test_connection_manager_absolute(self):
        endpoint = dlna.extract(self.url("absolute.xml"))
        self.assertEqual(endpoint.control_url, "http://other:9/cm")

    def test_connection_manager_embedded(self):
        """
        Services of embedded devices should be found too.
        """
        desc = dlna.DeviceDescription(self.url("embedded.xml"))
        self.assertEqual(desc.friendly_name, "Soundbar")
        self.assertEqual(desc.connection_manager.control_url, self.base_url + "/upnp/control/cm")

    def test_connection_manager_root_first(self):
        """
        The root device's own ConnectionManager wins over an embedded one,
        wherever its serviceList sits in the document.
        """
        desc = dlna.DeviceDescription(self.url("nested.xml"))
        self.assertEqual(desc.connection_manager.control_url, self.base_url + "/ctl/cm")
        self.assertEqual(
            [service.control_url for service in desc.services],
            [self.base_url + "/ctl/cm", self.base_url + "/zone2/ctl/cm"],
        )

    def test_no_namespace(self):
        """
        Descriptions without the UPnP namespace should still be read.
        """
        desc = dlna.DeviceDescription(self.url("plain.xml"))
        self.assertEqual(desc.friendly_name, "Office TV")
        self.assertEqual(desc.connection_manager.control_url, self.base_url + "/upnp/cm")

    def test_endpoint_missing(self):
        """
        Should raise `EndpointMissing` when there's no ConnectionManager.
        """
        desc = dlna.DeviceDescription(self.url("no_cm.xml"))
        with self.assertRaises(dlna.EndpointMissing) as ctx:
            desc.connection_manager
        self.assertEqual(ctx.exception.device_name, "Kitchen")
        self.assertIn("Kitchen", str(ctx.exception))

    def test_find_service_nonexists(self):
        desc = dlna.DeviceDescription(self.url("no_cm.xml"))
        self.assertIsNone(desc.find_service("urn:upnp-org:serviceId:ConnectionManager"))

    def test_description_nonexists(self):
        """
        Should raise `DescriptionError` if the XML is not found on the server.
        """
        with self.assertRaises(dlna.DescriptionError) as ctx:
            dlna.DeviceDescription(self.url("DOESNOTEXIST.xml"))
        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.HTTPError)

    def test_broken_xml(self):
        """
        Unparseable XML is a `DescriptionError`, not a missing endpoint.
        """
        with self.assertRaises(dlna.DescriptionError) as ctx:
            dlna.DeviceDescription(self.url("broken.xml"))
        self.assertIn("invalid XML", str(ctx.exception))

    def test_invalid_url(self):
        for url in ("not a url", "ftp://10.0.0.2/desc.xml", "http:///desc.xml"):
            self.assertRaises(dlna.DescriptionError, dlna.DeviceDescription, url)

    def test_invalid_ipv6_url(self):
        with self.assertRaises(dlna.DescriptionError) as ctx:
            dlna.DeviceDescription("http://[10.0.0.2/desc.xml")
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    @mock.patch("requests.get")
    def test_invalid_control_url(self, mock_get):
        """
        A controlURL that can't be parsed is a `DescriptionError`.
        """
        mock_get.return_value = make_response(description("Attic", "http://[x/cm"))
        with self.assertRaises(dlna.DescriptionError) as ctx:
            dlna.DeviceDescription("http://10.0.0.2:8000/desc.xml", device_name="Attic")
        self.assertEqual(ctx.exception.device_name, "Attic")
        self.assertIn("http://[x/cm", str(ctx.exception))

    @mock.patch("requests.get", side_effect=requests.exceptions.ConnectTimeout("timed out"))
    def test_timeout(self, mock_get):
        """
        Request timeouts are reported as `DescriptionError`.
        """
        self.assertRaises(
            dlna.DescriptionError, dlna.DeviceDescription, "http://10.0.0.2:8000/desc.xml")
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["timeout"], dlna.const.HTTP_TIMEOUT)

    @mock.patch("requests.get")
    def test_description_url_path_ignored(self, mock_get):
        """
        The control URL is resolved against the description URL's origin.
        """
        with open(path.join(XML_DIR, "renderer.xml"), "rb") as xml_f:
            mock_get.return_value = make_response(xml_f.read())
        desc = dlna.DeviceDescription("http://10.0.0.2:8000/sub/desc.xml")
        mock_get.assert_called_with("http://10.0.0.2:8000/sub/desc.xml", timeout=5)
        self.assertEqual(desc.connection_manager.control_url, "http://10.0.0.2:8000/ctl/cm")

    @async_test
    async def test_async_description(self):
        """
        The async path should read the same attributes.
        """
        async with aiohttp.ClientSession() as session:
            desc = dlna.DeviceDescription(
                self.url("renderer.xml"), use_async=True, session=session)
            await desc.async_init()
        self.assertEqual(desc.friendly_name, "Living Room")
        self.assertEqual(desc.connection_manager.control_url, self.base_url + "/ctl/cm")

    @async_test
    async def test_async_description_nonexists(self):
        async with aiohttp.ClientSession() as session:
            desc = dlna.DeviceDescription(
                self.url("DOESNOTEXIST.xml"), use_async=True, session=session)
            with self.assertRaises(dlna.DescriptionError) as ctx:
                await desc.async_init()
        self.assertIsInstance(ctx.exception.__cause__, aiohttp.ClientResponseError)

    @async_test
    async def test_async_description_no_session(self):
        desc = dlna.DeviceDescription(self.url("renderer.xml"), use_async=True)
        with self.assertRaises(ValueError):
            await desc.async_init()


class TestFriendlyName(unittest.TestCase):
    def _description(self, friendly_name):
        desc = mock.Mock()
        desc.friendly_name = friendly_name
        desc.host = "10.0.0.2"
        return desc

    def test_friendly_name(self):
        self.assertEqual(
            dlna.friendly_name(self._description("Living Room"), "Linux UPnP/1.0"),
            "Living Room")

    def test_server_fallback(self):
        self.assertEqual(
            dlna.friendly_name(self._description(""), "Linux UPnP/1.0"), "Linux UPnP/1.0")

    def test_host_fallback(self):
        self.assertEqual(dlna.friendly_name(self._description(""), None), "10.0.0.2")
        self.assertEqual(dlna.friendly_name(self._description(""), "  "), "10.0.0.2")
