#!/usr/bin/env vpython3
# coding: utf-8
import unittest

from asicet import xades, xmlio
from asicet.errors import InvalidState, XmlParseError
from asicet.xades import SignatureDocument

import sample


def without(text, start, end):
    """Drop the first `start`...`end` region of a signature template."""
    i = text.index(start)
    j = text.index(end, i) + len(end)
    return text[:i] + text[j:]


class DocumentTests(unittest.TestCase):
    def test_round_trip(self):
        doc = xades.parse(sample.SIGNATURE)
        assert xades.serialize(doc) == sample.SIGNATURE

        doc = xades.parse(sample.WRAPPED_SIGNATURE.encode('utf-8'))
        assert xades.serialize(doc) == sample.WRAPPED_SIGNATURE

    def test_round_trip_keeps_comments_around_root(self):
        text = '<?xml version="1.0"?>\n<!-- signed -->\n<root a="1">\n <x/>\n</root>\n<!-- end -->\n'
        doc = xades.parse(text)
        assert doc.prolog == '<?xml version="1.0"?>\n<!-- signed -->\n'
        assert doc.epilog == '\n<!-- end -->\n'
        assert xades.serialize(doc) == text

    def test_parse_error(self):
        with self.assertRaises(XmlParseError) as cm:
            xades.parse('<ds:Signature xmlns:ds="http://www.w3.org/2000/09/xmldsig#">')
        assert str(cm.exception).startswith('XML Parse Error')

    def test_find_element(self):
        doc = xades.parse(sample.SIGNATURE)
        signature = xades.find_element(doc, 'ds:Signature')
        assert xmlio.localname(signature) == 'Signature'

        time = xades.find_element(
            signature,
            'ds:Object/xades:QualifyingProperties/xades:SignedProperties/'
            'xades:SignedSignatureProperties/xades:SigningTime',
        )
        assert time.text == '2024-01-15T10:30:00Z'

        # unknown prefixes match on local name
        assert xades.find_element(signature, 'foo:KeyInfo') is not None
        assert xades.find_element(signature, 'KeyInfo') is not None
        # known prefixes also check the namespace
        assert xades.find_element(signature, 'xades:KeyInfo') is None
        assert xades.find_element(signature, 'ds:Object/xades:Missing') is None

    def test_extract_signature_root(self):
        bare = xades.extract_signature_root(xades.parse(sample.SIGNATURE))
        wrapped = xades.extract_signature_root(xades.parse(sample.WRAPPED_SIGNATURE))
        assert xmlio.localname(bare) == xmlio.localname(wrapped) == 'Signature'
        assert wrapped.get('Id') == 'S1'
        assert xades.find_element(bare, 'ds:SignatureValue').text == \
            xades.find_element(wrapped, 'ds:SignatureValue').text

        assert xades.extract_signature_root(xades.parse('<root/>')) is None

    def test_validate(self):
        result = xades.validate(xades.parse(sample.SIGNATURE))
        assert result.valid
        assert result.errors == []
        assert result.warnings == ['Missing namespace declaration: xmlns:xzep']

        result = xades.validate(xades.parse(sample.WRAPPED_SIGNATURE))
        assert result.valid

    def test_validate_missing_elements(self):
        text = without(sample.SIGNATURE, '<ds:KeyInfo>', '</ds:KeyInfo>')
        text = without(text, '<ds:Object>', '</ds:Object>')
        result = xades.validate(xades.parse(text))
        assert not result.valid
        assert result.errors == [
            'Missing required element: ds:Signature/ds:KeyInfo',
            'Missing required element: ds:Signature/ds:Object/xades:QualifyingProperties/'
            'xades:SignedProperties/xades:SignedSignatureProperties',
        ]

    def test_validate_without_signature(self):
        result = xades.validate(xades.parse('<root><child/></root>'))
        assert result.errors == ['Missing required element: ds:Signature']

    def test_validate_wrong_namespace(self):
        text = sample.SIGNATURE.replace(
            'xmlns:xades="http://uri.etsi.org/01903/v1.3.2#"',
            'xmlns:xades="http://uri.etsi.org/01903/v1.3.2#" xmlns:xzep="urn:wrong"',
        )
        result = xades.validate(xades.parse(text))
        assert result.errors == ['Invalid namespace for xmlns:xzep: urn:wrong']
        assert result.warnings == []

    def test_states(self):
        sigdoc = SignatureDocument.load(sample.SIGNATURE)
        assert sigdoc.state == SignatureDocument.UNVALIDATED
        with self.assertRaises(InvalidState):
            sigdoc.require(SignatureDocument.VALIDATED)

        result = sigdoc.validate()
        assert result.valid
        assert sigdoc.state == SignatureDocument.VALIDATED
        assert sigdoc.validate() is result

        sigdoc.advance(SignatureDocument.TIMESTAMPED)
        with self.assertRaises(InvalidState):
            sigdoc.validate()
        with self.assertRaises(InvalidState):
            sigdoc.advance(SignatureDocument.VALIDATED)

    def test_invalid_document_stays_unvalidated(self):
        sigdoc = SignatureDocument.load(without(sample.SIGNATURE, '<ds:KeyInfo>', '</ds:KeyInfo>'))
        assert not sigdoc.validate().valid
        assert sigdoc.state == SignatureDocument.UNVALIDATED


if __name__ == '__main__':
    unittest.main()
