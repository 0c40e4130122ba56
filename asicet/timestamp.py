# *-* coding: utf-8 *-*
"""
RFC 3161 time-stamp protocol: request encoding, HTTP round trip and
response decoding.
"""
import base64
import logging

import requests
from asn1crypto import algos, cms, core, tsp, util

from asicet import config
from asicet.errors import AsnParseError, TokenMissing, TsaRejected, TsaUnavailable

logger = logging.getLogger(__name__)

STATUS_NAMES = {
    0: "granted",
    1: "grantedWithMods",
    2: "rejection",
    3: "waiting",
    4: "revocationWarning",
    5: "revocationNotification",
}
GRANTED = (0, 1)


class TimeStampResp(tsp.TimeStampResp):
    # rejections carry no token, asn1crypto declares it mandatory
    _fields = [
        ("status", tsp.PKIStatusInfo),
        ("time_stamp_token", cms.ContentInfo, {"optional": True}),
    ]


def build_request(imprint: bytes) -> bytes:
    """
    Encode a TimeStampReq for a SHA-256 message imprint.

    The request carries version, messageImprint (with explicit NULL
    parameters) and certReq=TRUE as a plain universal BOOLEAN, without
    nonce or policy. The target TSA rejects any other layout.
    """
    if len(imprint) != 32:
        raise ValueError("message imprint must be a 32 byte SHA-256 digest")
    tspreq = tsp.TimeStampReq(
        {
            "version": 1,
            "message_imprint": tsp.MessageImprint(
                {
                    "hash_algorithm": algos.DigestAlgorithm(
                        {
                            "algorithm": "sha256",
                            "parameters": core.Null(),
                        }
                    ),
                    "hashed_message": imprint,
                }
            ),
            "cert_req": True,
        }
    )
    return tspreq.dump()


def request_timestamp(
    tspreq: bytes, url=None, credentials=None, timeout=None, req_options=None
) -> bytes:
    """
    POST a DER TimeStampReq to the TSA and return the raw reply.

    Parameters:
        tspreq: DER encoded TimeStampReq.
        url: TSA endpoint, defaults to config.TSA_URL.
        credentials: Optional dict with 'username' and 'password' for HTTP Basic auth.
        timeout: Seconds to wait, defaults to config.TSA_TIMEOUT.
        req_options: Extra keyword arguments for requests.post.

    Raises:
        TsaUnavailable: transport error, timeout or non-success HTTP status.
            The request is never retried.
    """
    if url is None:
        url = config.TSA_URL
    if timeout is None:
        timeout = config.TSA_TIMEOUT
    tspheaders = {
        "Content-Type": "application/timestamp-query",
        "Accept": "application/timestamp-reply",
    }
    if credentials is not None:
        username = credentials.get("username", None)
        password = credentials.get("password", None)
        if username and password:
            auth_header_value = base64.b64encode(
                bytes(username + ":" + password, "utf-8")
            ).decode("ascii")
            tspheaders["Authorization"] = f"Basic {auth_header_value}"
    if req_options is None:
        req_options = {}

    logger.debug("requesting timestamp from %s", url)
    try:
        tspresp = requests.post(
            url, data=tspreq, headers=tspheaders, timeout=timeout, **req_options
        )
        tspresp.raise_for_status()
    except requests.exceptions.RequestException as ex:
        raise TsaUnavailable(f"TSA request failed: {ex}") from ex

    content_type = tspresp.headers.get("Content-Type", None)
    if content_type != "application/timestamp-reply":
        logger.warning("TSA replied with content type %s", content_type)
    logger.debug("TSA replied with %d bytes", len(tspresp.content))
    return tspresp.content


def _status_text(status_info):
    status_string = status_info["status_string"]
    if isinstance(status_string, core.Void) or len(status_string) == 0:
        return None
    return status_string[0].native


def extract_token(tspresp: bytes) -> str:
    """
    Decode a TimeStampResp and return its TimeStampToken as base64.

    Statuses granted and grantedWithMods are successful, every other status
    raises TsaRejected naming the status and the first statusString entry.
    """
    try:
        resp = TimeStampResp.load(tspresp, strict=True)
        status_info = resp["status"]
        status = util.int_from_bytes(status_info["status"].contents, signed=True)
        text = _status_text(status_info)
    except (ValueError, TypeError, KeyError) as ex:
        raise AsnParseError(f"Failed to extract TimeStampToken: {ex}") from ex

    if status not in GRANTED:
        raise TsaRejected(status, STATUS_NAMES.get(status, "unknown"), text)

    try:
        token = resp["time_stamp_token"]
        der = None if isinstance(token, core.Void) else token.dump()
    except (ValueError, TypeError, KeyError) as ex:
        raise AsnParseError(f"Failed to extract TimeStampToken: {ex}") from ex
    if not der:
        raise TokenMissing("TimeStampToken not found in response")

    logger.debug("timestamp %s, token of %d bytes", STATUS_NAMES[status], len(der))
    return base64.b64encode(der).decode("ascii")
