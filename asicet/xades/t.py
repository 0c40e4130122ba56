# *-* coding: utf-8 *-*
# https://www.etsi.org/deliver/etsi_ts/101900_101999/101903/01.04.02_60/ts_101903v010402p.pdf
#
import copy
import hashlib
import io
import logging
import re

from lxml import etree

from asicet import timestamp, xmlio
from asicet.config import NAMESPACES, TSAConfig
from asicet.errors import (
    QualifyingPropertiesMissing,
    SignatureAlreadyTimestamped,
    SignatureNotFound,
    StructureInvalid,
)
from asicet.xades import document
from asicet.xades.document import SignatureDocument

logger = logging.getLogger(__name__)

APPEND, REJECT, REPLACE = "append", "reject", "replace"
POLICIES = (APPEND, REJECT, REPLACE)

QUALIFYING_PROPERTIES = "ds:Object/xades:QualifyingProperties"


def _normalized(element):
    # declare only the prefixes the subtree uses
    element = copy.deepcopy(element)
    etree.cleanup_namespaces(element)
    xml = xmlio.serialize(element)
    xml = re.sub(r">\s+<", "><", xml)
    xml = re.sub(r"\s+", " ", xml)
    return xml.strip().encode("utf-8")


def _c14n(element):
    data = etree.tostring(element, encoding="UTF-8", xml_declaration=True, standalone=False)
    tree = etree.parse(io.BytesIO(data))
    data = io.BytesIO()
    tree.write_c14n(data, exclusive=False, with_comments=False)
    return data.getvalue()


def canonicalize(element, method="normalized") -> bytes:
    """
    Serialize an element for hashing.

    The default "normalized" form serializes the element on its own,
    declaring only the namespace prefixes the subtree uses, then drops
    whitespace between tags and collapses any other whitespace run to a
    single space. It is stable for a given element but is not C14N 1.0.
    "c14n" selects inclusive C14N 1.0 as written by lxml.
    """
    if method == "normalized":
        return _normalized(element)
    if method == "c14n":
        return _c14n(element)
    raise ValueError("unknown canonicalization method: %s" % method)


def digest(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _qname(localname):
    return etree.QName(NAMESPACES["xades"], localname)


def _subelement(parent, localname):
    nsmap = None
    if NAMESPACES["xades"] not in parent.nsmap.values():
        nsmap = {"xades": NAMESPACES["xades"]}
    return etree.SubElement(parent, _qname(localname), nsmap=nsmap)


def _timestamp_element(parent, token):
    stamp = _subelement(parent, "SignatureTimeStamp")
    encapsulated = _subelement(stamp, "EncapsulatedTimeStamp")
    encapsulated.text = token
    return stamp


def _drop(element):
    """Remove an element, keeping its tail text in place."""
    parent = element.getparent()
    if element.tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + element.tail
        else:
            parent.text = (parent.text or "") + element.tail
    parent.remove(element)


def existing_timestamps(doc):
    """SignatureTimeStamp elements already present on the signature."""
    signature = document.extract_signature_root(doc)
    if signature is None:
        return []
    props = document.find_element(
        signature,
        QUALIFYING_PROPERTIES + "/xades:UnsignedProperties/xades:UnsignedSignatureProperties",
    )
    if props is None:
        return []
    return [
        child
        for child in xmlio.children(props)
        if xmlio.localname(child) == "SignatureTimeStamp"
        and xmlio.namespace(child) == NAMESPACES["xades"]
    ]


def extend(doc, token: str, on_existing=APPEND):
    """
    Add a SignatureTimeStamp holding `token` to the signature's unsigned
    properties, creating UnsignedProperties and UnsignedSignatureProperties
    when missing.

    Parameters:
        doc: Parsed signature document, mutated in place.
        token: Base64 encoded TimeStampToken.
        on_existing: What to do when the signature already carries a
            timestamp: "append" adds another one next to it, "reject" raises
            SignatureAlreadyTimestamped, "replace" puts the new timestamp in
            place of the old ones.

    Returns:
        The same document.
    """
    if on_existing not in POLICIES:
        raise ValueError("unknown re-extension policy: %s" % on_existing)

    signature = document.extract_signature_root(doc)
    if signature is None:
        raise SignatureNotFound("Signature element not found")
    qualifying = document.find_element(signature, QUALIFYING_PROPERTIES)
    if qualifying is None:
        raise QualifyingPropertiesMissing("QualifyingProperties not found")

    existing = existing_timestamps(doc)
    if existing:
        logger.warning("signature already has %d timestamp(s), policy %s", len(existing), on_existing)
        if on_existing == REJECT:
            raise SignatureAlreadyTimestamped(
                "Signature already carries %d SignatureTimeStamp element(s)" % len(existing)
            )

    unsigned = document.find_element(qualifying, "xades:UnsignedProperties")
    if unsigned is None:
        unsigned = _subelement(qualifying, "UnsignedProperties")
    props = document.find_element(unsigned, "xades:UnsignedSignatureProperties")
    if props is None:
        props = _subelement(unsigned, "UnsignedSignatureProperties")

    stamp = _timestamp_element(props, token)
    if existing and on_existing == REPLACE:
        first = existing[0]
        props.remove(stamp)
        stamp.tail = first.tail
        props.replace(first, stamp)
        for element in existing[1:]:
            _drop(element)
    return doc


class XAdEST(object):
    """
    Upgrades a validated XAdES-BES signature to XAdES-T.

    The signature value is canonicalized and hashed, the hash is sent to the
    TSA and the returned token is added as a SignatureTimeStamp.
    """

    debug = False

    def __init__(self, tsa=None, canonicalization="normalized", on_existing=APPEND):
        if tsa is None:
            tsa = TSAConfig()
        self.tsa = tsa
        self.canonicalization = canonicalization
        self.on_existing = on_existing

    def imprint(self, sigdoc):
        value = document.find_element(sigdoc.signature, "ds:SignatureValue")
        if value is None:
            raise StructureInvalid(["Missing required element: ds:Signature/ds:SignatureValue"])
        data = canonicalize(value, self.canonicalization)
        if self.debug:
            print("*" * 20, "canonicalized SignatureValue")
            print(data)
        h = digest(data)
        logger.debug("SignatureValue digest %s", h.hex())
        return h

    def request(self, sigdoc):
        """DER TimeStampReq for the signature value of `sigdoc`."""
        return timestamp.build_request(self.imprint(sigdoc))

    def timestamp(self, sigdoc):
        """Fetch a token for the signature value, returned base64 encoded."""
        sigdoc.require(SignatureDocument.VALIDATED, SignatureDocument.TIMESTAMPED)
        tspresp = timestamp.request_timestamp(
            self.request(sigdoc),
            url=self.tsa.url,
            credentials=self.tsa.credentials,
            timeout=self.tsa.timeout,
            req_options=self.tsa.req_options,
        )
        return timestamp.extract_token(tspresp)

    def extend(self, sigdoc, token):
        sigdoc.require(SignatureDocument.VALIDATED, SignatureDocument.TIMESTAMPED)
        extend(sigdoc.document, token, self.on_existing)
        sigdoc.advance(SignatureDocument.TIMESTAMPED)
        return sigdoc
