# *-* coding: utf-8 *-*
"""
lxml based parsing and serialization that keeps the document bytes stable.

lxml keeps whitespace text nodes, attribute order and namespace prefixes,
but drops the exact text around the root element (XML declaration quoting,
comments, line breaks). That text is captured verbatim at parse time and
written back unchanged, so only mutated subtrees differ after a round trip.
"""
import re

import attr
from lxml import etree

from asicet.errors import XmlParseError

_MISC = r"\s|<\?(?:(?!\?>).)*\?>|<!--(?:(?!-->).)*-->"
PROLOG = re.compile(
    r"\A\ufeff?(?:" + _MISC + r"|<!DOCTYPE[^\[>]*(?:\[.*?\])?\s*>)*", re.S
)
EPILOG = re.compile(r"(?:" + _MISC + r")*\Z", re.S)
DECLARATION = re.compile(r"""\A\ufeff?<\?xml[^>]*?\sencoding\s*=\s*["']([A-Za-z][\w.:-]*)["']""")


@attr.s
class Document(object):
    tree = attr.ib()
    prolog = attr.ib(default="")
    epilog = attr.ib(default="")

    @property
    def root(self):
        return self.tree.getroot()

    @property
    def encoding(self):
        return self.tree.docinfo.encoding or "UTF-8"


def _parser(encoding=None):
    return etree.XMLParser(
        encoding=encoding,
        remove_blank_text=False,
        resolve_entities=False,
        no_network=True,
        strip_cdata=False,
    )


def parse(text):
    if isinstance(text, str):
        data = text.encode("utf-8")
        parser = _parser("utf-8")
    else:
        data = bytes(text)
        parser = _parser()
    try:
        root = etree.fromstring(data, parser)
    except (etree.XMLSyntaxError, ValueError) as ex:
        raise XmlParseError("XML Parse Error: %s" % ex) from ex
    tree = root.getroottree()

    if not isinstance(text, str):
        encoding = tree.docinfo.encoding or "utf-8"
        try:
            text = data.decode(encoding)
        except (LookupError, UnicodeDecodeError) as ex:
            raise XmlParseError("XML Parse Error: %s" % ex) from ex
    prolog = PROLOG.match(text).group(0)
    epilog = EPILOG.search(text, len(prolog)).group(0)
    return Document(tree, prolog, epilog)


def serialize(node):
    if isinstance(node, Document):
        body = etree.tostring(node.root, encoding="unicode", with_tail=False)
        return node.prolog + body + node.epilog
    if isinstance(node, etree._ElementTree):
        node = node.getroot()
    return etree.tostring(node, encoding="unicode", with_tail=False)


def encode(text, encoding=None):
    """
    Encode serialized XML, by default in the encoding its declaration names.
    Characters the encoding lacks become character references.
    """
    if encoding is None:
        match = DECLARATION.match(text)
        encoding = match.group(1) if match else "utf-8"
    try:
        return text.encode(encoding, "xmlcharrefreplace")
    except LookupError as ex:
        raise XmlParseError("Unknown encoding: %s" % encoding) from ex


def localname(node):
    return etree.QName(node).localname


def namespace(node):
    return etree.QName(node).namespace


def children(node):
    """Element children only, comments and processing instructions skipped."""
    if isinstance(node, Document):
        return [node.root]
    return [child for child in node if isinstance(child.tag, str)]
