# *-* coding: utf-8 *-*
import logging

from asicet import asice, timestamp, xmlio
from asicet.config import TSAConfig
from asicet.errors import StructureInvalid
from asicet.xades.document import SignatureDocument
from asicet.xades.t import APPEND, XAdEST

logger = logging.getLogger(__name__)


def extend(
    data: bytes,
    tsa: TSAConfig = None,
    tsresponse: bytes = None,
    on_existing=APPEND,
    canonicalization="normalized",
) -> bytes:
    """
    Upgrade the XAdES-BES signature of an ASiC-E container to XAdES-T.

    Parameters:
        data: ASiC-E container as bytes.
        tsa: TSA endpoint configuration, defaults to TSAConfig().
        tsresponse: DER TimeStampResp obtained beforehand. When given the TSA
            is not contacted.
        on_existing: Policy for signatures that already carry a timestamp
            ("append", "reject" or "replace").
        canonicalization: "normalized" or "c14n", see xades.t.canonicalize.

    Returns:
        The new container as bytes. The input is never modified; on any error
        nothing is returned.
    """
    archive = asice.extract(data)
    result = asice.validate_structure(archive)
    if not result.valid:
        raise StructureInvalid(result.errors, result.warnings)
    for warning in result.warnings:
        logger.warning("container: %s", warning)

    path = asice.locate_signature_path(archive)
    logger.debug("signature file %s", path)
    sigdoc = SignatureDocument.load(archive.read(path))
    result = sigdoc.validate()
    if not result.valid:
        raise StructureInvalid(result.errors, result.warnings)
    for warning in result.warnings:
        logger.warning("signature: %s", warning)

    cls = XAdEST(tsa, canonicalization, on_existing)
    if tsresponse is None:
        token = cls.timestamp(sigdoc)
    else:
        token = timestamp.extract_token(tsresponse)
    cls.extend(sigdoc, token)

    signature = xmlio.encode(sigdoc.serialize(), sigdoc.document.encoding)
    manifest = asice.update_manifest(archive.manifest, signature, path)
    return asice.repackage(archive, signature, manifest, path)
