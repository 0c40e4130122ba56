# *-* coding: utf-8 *-*
"""In-memory ASiC-E containers and TSA replies shared by the tests."""
import base64
import hashlib
import io
import struct
import zipfile

from asn1crypto import cms, core, tsp

from asicet import timestamp

MIMETYPE = b"application/vnd.etsi.asic-e+zip"

DS = "http://www.w3.org/2000/09/xmldsig#"
XADES = "http://uri.etsi.org/01903/v1.3.2#"

SIGNATURE_BODY = """
  <ds:SignedInfo>
    <ds:CanonicalizationMethod Algorithm="http://www.w3.org/2001/10/xml-exc-c14n#"/>
    <ds:SignatureMethod Algorithm="http://www.w3.org/2001/04/xmldsig-more#rsa-sha256"/>
    <ds:Reference URI="#data">
      <ds:Transforms>
        <ds:Transform Algorithm="http://www.w3.org/2000/09/xmldsig#enveloped-signature"/>
      </ds:Transforms>
      <ds:DigestMethod Algorithm="http://www.w3.org/2001/04/xmlenc#sha256"/>
      <ds:DigestValue>abc123def456</ds:DigestValue>
    </ds:Reference>
  </ds:SignedInfo>
  <ds:SignatureValue>SGVsbG8gV29ybGQgU2lnbmF0dXJl</ds:SignatureValue>
  <ds:KeyInfo>
    <ds:X509Data>
      <ds:X509Certificate>MIICpDCCAYwCCQC33wnvT5ZezjANBgkqhkiG9w0BAQsFADAUMRIwEAYDVQQDDAls</ds:X509Certificate>
    </ds:X509Data>
  </ds:KeyInfo>
  <ds:Object>
    <xades:QualifyingProperties>
      <xades:SignedProperties>
        <xades:SignedSignatureProperties>
          <xades:SigningTime>2024-01-15T10:30:00Z</xades:SigningTime>
          <xades:SigningCertificate>
            <xades:Cert>
              <xades:CertDigest>
                <ds:DigestMethod Algorithm="http://www.w3.org/2001/04/xmlenc#sha256"/>
                <ds:DigestValue>abc123</ds:DigestValue>
              </xades:CertDigest>
              <xades:IssuerSerial>
                <ds:X509IssuerName>CN=Test</ds:X509IssuerName>
                <ds:X509SerialNumber>1</ds:X509SerialNumber>
              </xades:IssuerSerial>
            </xades:Cert>
          </xades:SigningCertificate>
        </xades:SignedSignatureProperties>
        <xades:SignedDataObjectProperties/>
      </xades:SignedProperties>
    </xades:QualifyingProperties>
  </ds:Object>
"""

SIGNATURE = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<ds:Signature xmlns:ds="http://www.w3.org/2000/09/xmldsig#"'
    ' xmlns:xades="http://uri.etsi.org/01903/v1.3.2#">'
    + SIGNATURE_BODY
    + "</ds:Signature>"
)

WRAPPED_SIGNATURE = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<asic:XAdESSignatures xmlns:asic="http://uri.etsi.org/02918/v1.2.1#"'
    ' xmlns:ds="http://www.w3.org/2000/09/xmldsig#"'
    ' xmlns:xades="http://uri.etsi.org/01903/v1.3.2#">\n'
    '<ds:Signature Id="S1">'
    + SIGNATURE_BODY
    + "</ds:Signature>\n"
    "</asic:XAdESSignatures>\n"
)

PAYLOAD = """<?xml version="1.0" encoding="UTF-8"?>
<document>
  <title>Sample Document</title>
  <content>This is a sample document for testing ASiC-E containers.</content>
</document>"""


def sha256(data):
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(hashlib.sha256(data).digest()).decode()


def manifest(signature=SIGNATURE, payload=PAYLOAD, signature_path="META-INF/signatures.xml"):
    return """<?xml version="1.0" encoding="UTF-8"?>
<manifest:Manifest xmlns:manifest="urn:oasis:names:tc:opendocument:xmlns:manifest:1.0">
  <manifest:file-entry manifest:media-type="application/vnd.etsi.asic-e+zip" manifest:full-path="/"/>
  <manifest:file-entry manifest:media-type="application/xml" manifest:full-path="document.xml">
    <DigestValue>%s</DigestValue>
  </manifest:file-entry>
  <manifest:file-entry manifest:media-type="application/xml" manifest:full-path="%s">
    <DigestValue>%s</DigestValue>
  </manifest:file-entry>
</manifest:Manifest>""" % (sha256(payload), signature_path, sha256(signature))


def container(members=None, signature=SIGNATURE, signature_path="META-INF/signatures.xml",
              directories=False, comment=b"", comments=None):
    """
    Build an ASiC-E container. `members` is a list of (name, data,
    compress_type) tuples and replaces the default layout. `comments` maps
    member names to per-member comments.
    """
    if members is None:
        members = [
            ("mimetype", MIMETYPE, zipfile.ZIP_STORED),
            ("document.xml", PAYLOAD, zipfile.ZIP_DEFLATED),
            ("META-INF/manifest.xml", manifest(signature, signature_path=signature_path),
             zipfile.ZIP_DEFLATED),
            (signature_path, signature, zipfile.ZIP_DEFLATED),
        ]
    out = io.BytesIO()
    with zipfile.ZipFile(out, "w") as zfp:
        if directories:
            zfp.writestr(zipfile.ZipInfo("META-INF/"), b"")
        for name, data, compress_type in members:
            if isinstance(data, str):
                data = data.encode("utf-8")
            info = zipfile.ZipInfo(name, date_time=(2024, 1, 15, 10, 30, 0))
            info.compress_type = compress_type
            if comments and name in comments:
                info.comment = comments[name]
            zfp.writestr(info, data)
        zfp.comment = comment
    return out.getvalue()


def local_headers(data):
    """(name, method, extra length, content) of each local file header, in stream order."""
    headers = []
    offset = 0
    while data[offset:offset + 4] == b"PK\x03\x04":
        (_, _, flags, method, _, _, _, csize, _, nlen, elen) = struct.unpack(
            "<4sHHHHHIIIHH", data[offset:offset + 30]
        )
        name = data[offset + 30:offset + 30 + nlen].decode("utf-8")
        start = offset + 30 + nlen + elen
        headers.append((name, method, elen, data[start:start + csize]))
        offset = start + csize
        if flags & 0x08:
            offset += 16 if data[offset:offset + 4] == b"PK\x07\x08" else 12
    return headers


TOKEN = cms.ContentInfo(
    {
        "content_type": "data",
        "content": core.OctetString(b"known timestamp token"),
    }
).dump()
TOKEN_B64 = base64.b64encode(TOKEN).decode("ascii")

# TimeStampResp { PKIStatusInfo { status 2, statusString { "bad request" } } }
REJECTION = bytes.fromhex("30143012020102300d0c0b") + b"bad request"


def response(status=0, status_string=None, token=TOKEN):
    info = {"status": status}
    if status_string is not None:
        info["status_string"] = [status_string]
    value = {"status": tsp.PKIStatusInfo(info)}
    if token is not None:
        value["time_stamp_token"] = cms.ContentInfo.load(token)
    return timestamp.TimeStampResp(value).dump()
