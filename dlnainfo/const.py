HTTP_TIMEOUT = 5
SOAP_TIMEOUT = 10

AVTRANSPORT_SERVICE_TYPE = "urn:schemas-upnp-org:service:AVTransport:1"
CONNECTION_MANAGER_SERVICE_TYPE = "urn:schemas-upnp-org:service:ConnectionManager:1"
CONNECTION_MANAGER_SERVICE_ID = "urn:upnp-org:serviceId:ConnectionManager"

GET_PROTOCOL_INFO = "GetProtocolInfo"
GET_CURRENT_CONNECTION_IDS = "GetCurrentConnectionIDs"
ACTIONS = (GET_PROTOCOL_INFO, GET_CURRENT_CONNECTION_IDS)

PROTOCOL_INFO_HEADER = "Protocol Info, Device: %s\n"
CONNECTION_IDS_HEADER = "ConnectionIds, Device: %s\n"
SECTION_DELIMITER = "\n----------\n"
BLOCK_DELIMITER = "\n~~~~~~~~~~~~~~~\n"
