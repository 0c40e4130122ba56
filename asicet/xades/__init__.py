# *-* coding: utf-8 *-*
from .document import (
    SignatureDocument,
    extract_signature_root,
    find_element,
    parse,
    serialize,
    validate,
)
from .t import XAdEST, canonicalize, digest, extend
