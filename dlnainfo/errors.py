class DLNAInfoError(Exception):
    """
    Base class for every error that ends a report run.
    """

    pass


class DiscoveryError(DLNAInfoError):
    """
    The SSDP search could not bind or send on any interface.
    """

    pass


class NoRenderers(DLNAInfoError):
    """
    Discovery worked but no media renderer answered.
    """

    def __init__(self, message="No available Media Renderers"):
        super(NoRenderers, self).__init__(message)


class DescriptionError(DLNAInfoError):
    """
    A device description could not be fetched or parsed.
    """

    def __init__(self, location, reason, device_name=None):
        self.location = location
        self.reason = reason
        self.device_name = device_name
        super(DescriptionError, self).__init__(location, reason, device_name)

    def __str__(self):
        if self.device_name:
            return "Device %r: unable to read description at %s: %s" % (
                self.device_name, self.location, self.reason)
        return "Unable to read device description at %s: %s" % (self.location, self.reason)


class EndpointMissing(DLNAInfoError):
    """
    The device description has no ConnectionManager service.
    """

    def __init__(self, location, device_name=None):
        self.location = location
        self.device_name = device_name
        super(EndpointMissing, self).__init__(location, device_name)

    def __str__(self):
        return "Device %r has no ConnectionManager service (description at %s)" % (
            self.device_name or self.location, self.location)


class SOAPError(DLNAInfoError):
    """
    A SOAP action failed at the transport level.
    """

    def __init__(self, action, url, reason, device_name=None):
        self.action = action
        self.url = url
        self.reason = reason
        self.device_name = device_name
        super(SOAPError, self).__init__(action, url, reason, device_name)

    def __str__(self):
        return "%s failed for device %r at %s: %s" % (
            self.action, self.device_name or self.url, self.url, self.reason)
