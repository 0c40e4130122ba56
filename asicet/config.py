# *-* coding: utf-8 *-*
import os
import types

import attr

MIMETYPE = "application/vnd.etsi.asic-e+zip"
MIMETYPE_PATH = "mimetype"
MANIFEST_PATH = "META-INF/manifest.xml"
SIGNATURE_PATHS = ("META-INF/signatures.xml", "META-INF/signature.xml")

NAMESPACES = types.MappingProxyType(
    {
        "ds": "http://www.w3.org/2000/09/xmldsig#",
        "xades": "http://uri.etsi.org/01903/v1.3.2#",
        "xzep": "http://www.ditec.sk/ep/signature_formats/xades_zep/v1.0",
        "asic": "http://uri.etsi.org/02918/v1.2.1#",
        "manifest": "urn:oasis:names:tc:opendocument:xmlns:manifest:1.0",
    }
)

TSA_URL = "https://testpki.ditec.sk/tsarsa/tsa.aspx"
TSA_TIMEOUT = 10


@attr.s
class TSAConfig(object):
    url = attr.ib(default=TSA_URL)
    timeout = attr.ib(default=TSA_TIMEOUT, converter=float)
    credentials = attr.ib(default=None)
    req_options = attr.ib(factory=dict)

    @classmethod
    def from_env(cls, environ=None):
        """
        Build the configuration from ASICET_TSA_* environment variables,
        falling back to the module defaults.
        """
        if environ is None:
            environ = os.environ
        credentials = None
        username = environ.get("ASICET_TSA_USERNAME")
        password = environ.get("ASICET_TSA_PASSWORD")
        if username and password:
            credentials = {"username": username, "password": password}
        return cls(
            url=environ.get("ASICET_TSA_URL", TSA_URL),
            timeout=environ.get("ASICET_TSA_TIMEOUT", TSA_TIMEOUT),
            credentials=credentials,
        )
