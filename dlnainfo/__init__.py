# Copyright (c) 2012-2016, Ferry Boender <ferry.boender@gmail.com>
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
This module queries the DLNA Media Renderers on the local network and reports
what their ConnectionManager service says about them. It implements SSDP
(Simple Service Discovery Protocol) discovery, device description parsing and
a minimal SOAP (Simple Object Access Protocol) client.

The flow for building a report is:

- Discover renderers using SSDP.

  An `ssdp:all` M-SEARCH is multicast on every IPv4 interface. Replies
  arriving within the discovery window are kept when their search target is
  `urn:schemas-upnp-org:service:AVTransport:1`, the service every playback
  capable renderer offers.

- Read each renderer's device description.

  The XML document found at the reply's LOCATION gives the renderer's
  friendly name and the control URL of its ConnectionManager service
  (`urn:upnp-org:serviceId:ConnectionManager`).

- Call the ConnectionManager using SOAP.

  `GetProtocolInfo` and `GetCurrentConnectionIDs` are posted to every
  renderer. The response bodies are not interpreted; they go into the report
  exactly as the device sent them, SOAP Faults included.

The report holds a ProtocolInfo block and a ConnectionIDs block, separated by
a `~~~~~~~~~~~~~~~` line. Both list the renderers in the same order.

------------------------------------------------------------------------------
import dlnainfo

print(dlnainfo.run(window=2))
------------------------------------------------------------------------------

Useful Links:

* http://upnp.org/specs/arch/UPnP-arch-DeviceArchitecture-v1.1.pdf
* http://upnp.org/specs/av/UPnP-av-ConnectionManager-v1-Service.pdf
"""
from dlnainfo import const, errors, report, soap, ssdp, upnp, util  # noqa: F401
from .errors import (
    DLNAInfoError, DiscoveryError, NoRenderers, DescriptionError, EndpointMissing, SOAPError)
from .report import Aggregator, Renderer, run, async_run
from .soap import SOAP
from .ssdp import Advertisement, search
from .upnp import DeviceDescription, ServiceEndpoint, extract, friendly_name

__all__ = [
    "Aggregator", "Renderer", "run", "async_run", "SOAP", "Advertisement", "search",
    "DeviceDescription", "ServiceEndpoint", "extract", "friendly_name",
    "DLNAInfoError", "DiscoveryError", "NoRenderers", "DescriptionError", "EndpointMissing",
    "SOAPError",
]
