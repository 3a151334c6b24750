import asyncio
from textwrap import dedent

import requests
import aiohttp

from .util import _getLogger
from .const import SOAP_TIMEOUT, CONNECTION_MANAGER_SERVICE_TYPE, ACTIONS
from .errors import SOAPError


class SOAP(object):
    """SOAP (Simple Object Access Protocol) implementation
    This class posts argument-less ConnectionManager actions and hands back
    the response body untouched, SOAP Faults included.
    """
    def __init__(self, url, service_type=CONNECTION_MANAGER_SERVICE_TYPE, session=None,
                 timeout=SOAP_TIMEOUT):
        self.url = url
        self.service_type = service_type
        self.session = session
        self.timeout = timeout
        self._log = _getLogger('SOAP')

    def build_request(self, action_name):
        """
        Return the (body, headers) pair for `action_name`.
        """
        if action_name not in ACTIONS:
            raise ValueError("Unsupported ConnectionManager action %r" % action_name)
        body = dedent("""
            <?xml version='1.0' encoding='utf-8'?>
            <s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/"
                        s:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
              <s:Body>
                <u:{action_name} xmlns:u="{service_type}"/>
              </s:Body>
            </s:Envelope>
            """.format(
                action_name=action_name,
                service_type=self.service_type,
            )).strip().encode('utf-8')
        headers = {
            'SOAPAction': '"%s#%s"' % (self.service_type, action_name),
            'Content-Type': 'text/xml',
            'charset': 'utf-8',
            'Connection': 'close',
        }
        return body, headers

    def call(self, action_name, device_name=None):
        body, headers = self.build_request(action_name)
        self._log.debug(">> %s %s", action_name, self.url)
        try:
            resp = requests.post(self.url, data=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise SOAPError(action_name, self.url, exc, device_name) from exc

        self._check_status(action_name, resp.status_code)
        return resp.content

    async def async_call(self, action_name, device_name=None, session=None):
        session = session or self.session
        if session is None:
            raise ValueError("async_call needs an aiohttp.ClientSession")
        body, headers = self.build_request(action_name)
        self._log.debug(">> %s %s", action_name, self.url)
        try:
            async with session.post(
                self.url, data=body, headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                content = await resp.read()
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SOAPError(
                action_name, self.url, str(exc) or exc.__class__.__name__, device_name
            ) from exc

        self._check_status(action_name, status)
        return content

    def _check_status(self, action_name, status):
        # Non-2xx bodies carry SOAP Faults and are still returned.
        if not 200 <= status < 300:
            self._log.warning("<< %s %s returned HTTP %s", action_name, self.url, status)
        else:
            self._log.debug("<< %s %s returned HTTP %s", action_name, self.url, status)
