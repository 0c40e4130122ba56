# *-* coding: utf-8 *-*
import base64
import hashlib
import logging
from collections import OrderedDict

import attr

from asicet import config, xmlio
from asicet.errors import ManifestParseError, XmlParseError

logger = logging.getLogger(__name__)

DIGEST_SHA256 = "http://www.w3.org/2001/04/xmlenc#sha256"

FILE_ENTRY = ("file-entry", "FileEntry")
FULL_PATH = ("full-path", "FullPath")
MEDIA_TYPE = ("media-type", "MediaType")


@attr.s
class ManifestEntry(object):
    full_path = attr.ib()
    media_type = attr.ib(default=None)
    digest = attr.ib(default=None)
    digest_algorithm = attr.ib(default=None)


def sha256(data):
    h = hashlib.sha256(data).digest()
    return base64.b64encode(h).decode()


def _attribute(element, names):
    for key, value in element.attrib.items():
        if xmlio.localname(key) in names:
            return value
    return None


def _entries(root):
    for element in root.iter():
        if isinstance(element.tag, str) and xmlio.localname(element) in FILE_ENTRY:
            yield element


def _digest_node(entry):
    for element in entry.iter():
        if isinstance(element.tag, str) and xmlio.localname(element) == "DigestValue":
            return element
    return None


def _parse(manifest):
    try:
        return xmlio.parse(manifest)
    except XmlParseError as ex:
        raise ManifestParseError("Failed to parse manifest: %s" % ex) from ex


def read_manifest(manifest):
    """Map each file entry's full path to its media type and digest."""
    doc = _parse(manifest)
    entries = OrderedDict()
    for element in _entries(doc.root):
        path = _attribute(element, FULL_PATH)
        if path is None:
            continue
        entry = ManifestEntry(path, _attribute(element, MEDIA_TYPE))
        node = _digest_node(element)
        if node is not None:
            entry.digest = (node.text or "").strip()
            entry.digest_algorithm = DIGEST_SHA256
        entries[path] = entry
    return entries


def update_manifest(manifest, signature: bytes, signature_path: str = None) -> str:
    """
    Replace the signature file digest stored in the manifest.

    Parameters:
        manifest: Manifest XML as str or bytes.
        signature: New signature file content as bytes.
        signature_path: Archive path of the signature file. When omitted any
            of the known signature paths matches.

    Returns:
        Updated manifest XML as str.

    The first file entry addressed to the signature path gets the SHA-256
    base64 digest of `signature` as the text of its DigestValue element.
    Everything else is written back as parsed. When there is no such entry,
    or the entry has no DigestValue, the manifest is returned unchanged: an
    entry is never invented. Check `read_manifest` if the caller needs to
    know which case applied.
    """
    doc = _parse(manifest)
    if signature_path is None:
        paths = config.SIGNATURE_PATHS
    else:
        paths = (signature_path,)

    for entry in _entries(doc.root):
        if _attribute(entry, FULL_PATH) not in paths:
            continue
        node = _digest_node(entry)
        if node is None:
            logger.warning("manifest entry %s has no DigestValue, left unchanged",
                           _attribute(entry, FULL_PATH))
            break
        node.text = sha256(signature)
        logger.debug("manifest digest for %s set to %s", _attribute(entry, FULL_PATH), node.text)
        return xmlio.serialize(doc)
    else:
        logger.warning("manifest has no entry for %s, left unchanged", ", ".join(paths))

    if isinstance(manifest, str):
        return manifest
    return bytes(manifest).decode(doc.tree.docinfo.encoding or "utf-8")
