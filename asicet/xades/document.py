# *-* coding: utf-8 *-*
import logging

from asicet import xmlio
from asicet.config import NAMESPACES
from asicet.errors import InvalidState, ValidationResult
from asicet.xmlio import Document

logger = logging.getLogger(__name__)

REQUIRED_PATHS = (
    "ds:SignedInfo",
    "ds:SignatureValue",
    "ds:KeyInfo",
    "ds:Object/xades:QualifyingProperties/xades:SignedProperties/xades:SignedSignatureProperties",
)
DECLARED_PREFIXES = ("ds", "xades", "xzep")


def parse(text) -> Document:
    """
    Parse signature XML keeping whitespace, attribute order and prefixes.

    Raises XmlParseError when the text is not well-formed.
    """
    return xmlio.parse(text)


def serialize(node) -> str:
    return xmlio.serialize(node)


def _matches(element, prefix, localname, namespaces):
    if xmlio.localname(element) != localname:
        return False
    uri = namespaces.get(prefix) if prefix else None
    return uri is None or xmlio.namespace(element) == uri


def find_element(node, path, namespaces=NAMESPACES):
    """
    Walk a path such as "ds:Object/xades:QualifyingProperties" child by child.

    A known prefix matches on namespace URI and local name, anything else on
    the local name alone. Returns the first match or None.
    """
    current = node
    for part in [p for p in path.split("/") if p]:
        if ":" in part:
            prefix, localname = part.split(":", 1)
        else:
            prefix, localname = "", part
        for child in xmlio.children(current):
            if _matches(child, prefix, localname, namespaces):
                current = child
                break
        else:
            return None
    return current


def extract_signature_root(doc, namespaces=NAMESPACES):
    """Signature element of a bare ds:Signature document or of an XAdESSignatures wrapper."""
    signature = find_element(doc, "ds:Signature", namespaces)
    if signature is not None:
        return signature

    wrapper = doc.root
    if wrapper is not None and xmlio.localname(wrapper) == "XAdESSignatures":
        for child in xmlio.children(wrapper):
            if (
                xmlio.localname(child) == "Signature"
                and xmlio.namespace(child) == namespaces["ds"]
            ):
                return child
    return None


def validate(doc, namespaces=NAMESPACES) -> ValidationResult:
    """
    Check the minimum XAdES-BES element set.

    Every missing element is reported separately. Prefixes that are not
    bound on the signature element are warnings, prefixes bound to another
    namespace are errors.
    """
    result = ValidationResult()
    signature = extract_signature_root(doc, namespaces)
    if signature is None:
        result.errors.append("Missing required element: ds:Signature")
        return result

    for path in REQUIRED_PATHS:
        if find_element(signature, path, namespaces) is None:
            result.errors.append("Missing required element: ds:Signature/%s" % path)

    nsmap = signature.nsmap
    for prefix in DECLARED_PREFIXES:
        uri = nsmap.get(prefix)
        if uri is None:
            result.warnings.append("Missing namespace declaration: xmlns:%s" % prefix)
        elif uri != namespaces[prefix]:
            result.errors.append("Invalid namespace for xmlns:%s: %s" % (prefix, uri))
    return result


class SignatureDocument(object):
    """
    A parsed signature moving forward through unvalidated, validated and
    timestamped. Going back requires parsing the text again.
    """

    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"
    TIMESTAMPED = "timestamped"

    ORDER = (UNVALIDATED, VALIDATED, TIMESTAMPED)

    def __init__(self, document, namespaces=NAMESPACES):
        self.document = document
        self.namespaces = namespaces
        self.state = self.UNVALIDATED
        self.result = None

    @classmethod
    def load(cls, text, namespaces=NAMESPACES):
        return cls(parse(text), namespaces)

    @property
    def signature(self):
        return extract_signature_root(self.document, self.namespaces)

    def validate(self):
        if self.state == self.TIMESTAMPED:
            raise InvalidState("signature was already timestamped, parse it again to re-validate")
        if self.result is None:
            self.result = validate(self.document, self.namespaces)
            logger.debug(
                "validation: %d errors, %d warnings",
                len(self.result.errors),
                len(self.result.warnings),
            )
            if self.result.valid:
                self.advance(self.VALIDATED)
        return self.result

    def require(self, *states):
        if self.state not in states:
            raise InvalidState(
                "signature is %s, expected %s" % (self.state, " or ".join(states))
            )

    def advance(self, state):
        if self.ORDER.index(state) < self.ORDER.index(self.state):
            raise InvalidState("cannot move signature from %s back to %s" % (self.state, state))
        self.state = state

    def serialize(self):
        return serialize(self.document)
