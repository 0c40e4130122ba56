# *-* coding: utf-8 *-*
import io
import logging
import zipfile
import zlib
from collections import OrderedDict

import attr

from asicet import config, xmlio
from asicet.errors import (
    MalformedArchive,
    MissingSignature,
    SignatureNotFound,
    ValidationResult,
)

logger = logging.getLogger(__name__)


@attr.s
class Member(object):
    name = attr.ib()
    data = attr.ib(default=b"", repr=False)
    is_dir = attr.ib(default=False)
    compress_type = attr.ib(default=zipfile.ZIP_DEFLATED)
    comment = attr.ib(default=b"")
    date_time = attr.ib(default=(1980, 1, 1, 0, 0, 0))
    external_attr = attr.ib(default=0)
    create_system = attr.ib(default=0)

    @classmethod
    def from_zipinfo(cls, info, data):
        return cls(
            name=info.filename,
            data=data,
            is_dir=info.is_dir(),
            compress_type=info.compress_type,
            comment=info.comment,
            date_time=info.date_time,
            external_attr=info.external_attr,
            create_system=info.create_system,
        )

    def zipinfo(self, compress_type=None):
        info = zipfile.ZipInfo(self.name, date_time=self.date_time)
        info.compress_type = self.compress_type if compress_type is None else compress_type
        info.comment = self.comment
        info.external_attr = self.external_attr
        info.create_system = self.create_system
        return info


@attr.s
class Archive(object):
    members = attr.ib(factory=OrderedDict)
    comment = attr.ib(default=b"")

    def __contains__(self, name):
        return name in self.members

    def __getitem__(self, name):
        return self.members[name]

    def __iter__(self):
        return iter(self.members.values())

    def __len__(self):
        return len(self.members)

    def names(self):
        return list(self.members)

    def read(self, name):
        member = self.members.get(name)
        return None if member is None else member.data

    @property
    def mimetype(self):
        return self.read(config.MIMETYPE_PATH)

    @property
    def manifest(self):
        return self.read(config.MANIFEST_PATH)

    @property
    def signature_paths(self):
        return [name for name in self.members if name in config.SIGNATURE_PATHS]


def extract(data: bytes) -> Archive:
    """
    Read an ASiC-E container.

    Parameters:
        data: The container as bytes.

    Returns:
        Archive holding every member in the original order.

    Raises:
        MalformedArchive: data is not a readable ZIP stream.
        MissingSignature: no META-INF/signatures.xml or META-INF/signature.xml.
    """
    archive = Archive()
    try:
        with zipfile.ZipFile(io.BytesIO(data), "r") as zfp:
            archive.comment = zfp.comment
            for info in zfp.infolist():
                if info.filename in archive.members:
                    raise MalformedArchive("Duplicate archive member: %s" % info.filename)
                content = b"" if info.is_dir() else zfp.read(info)
                archive.members[info.filename] = Member.from_zipinfo(info, content)
    except MalformedArchive:
        raise
    except (zipfile.BadZipFile, zipfile.LargeZipFile, NotImplementedError, RuntimeError,
            EOFError, OSError, TypeError, ValueError, zlib.error) as ex:
        raise MalformedArchive("Failed to extract ASiC-E container: %s" % ex) from ex

    logger.debug("extracted %d members: %s", len(archive), ", ".join(archive.names()))
    if not archive.signature_paths:
        raise MissingSignature(
            "No signature file found in ASiC-E container (expected META-INF/signatures.xml)"
        )
    return archive


def locate_signature_path(archive: Archive) -> str:
    paths = archive.signature_paths
    if not paths:
        raise SignatureNotFound("Signature file not found in container")
    return paths[0]


def validate_structure(archive: Archive) -> ValidationResult:
    result = ValidationResult()
    mimetype = archive.members.get(config.MIMETYPE_PATH)
    if mimetype is None:
        result.errors.append("Missing mimetype file")
    else:
        if mimetype.data != config.MIMETYPE.encode("ascii"):
            result.errors.append(
                "Invalid mimetype content: %r" % mimetype.data.decode("latin-1")
            )
        if archive.names()[0] != config.MIMETYPE_PATH:
            result.warnings.append("mimetype is not the first archive member")
        if mimetype.compress_type != zipfile.ZIP_STORED:
            result.warnings.append("mimetype is compressed")

    if config.MANIFEST_PATH not in archive:
        result.errors.append("Missing %s" % config.MANIFEST_PATH)

    paths = archive.signature_paths
    if not paths:
        result.errors.append(
            "Missing signature file (META-INF/signatures.xml or META-INF/signature.xml)"
        )
    elif len(paths) > 1:
        result.errors.append("Multiple signature files: %s" % ", ".join(paths))
    return result


def _encode(content):
    if isinstance(content, str):
        return xmlio.encode(content)
    return bytes(content)


def repackage(archive: Archive, signature, manifest, signature_path: str) -> bytes:
    """
    Write a new container with the signature and manifest replaced.

    The mimetype member is always written first and stored, as ASiC-E
    readers locate it at a fixed offset. Other members keep their order,
    compression method, comment and timestamp. Directory entries are dropped.
    Text content is encoded as its XML declaration names.
    """
    if signature_path not in archive:
        raise SignatureNotFound("Signature file not found in container: %s" % signature_path)
    replaced = {
        signature_path: _encode(signature),
        config.MANIFEST_PATH: _encode(manifest),
    }
    out = io.BytesIO()
    with zipfile.ZipFile(out, "w") as zfp:
        mimetype = archive.members.get(config.MIMETYPE_PATH)
        if mimetype is None:
            mimetype = Member(config.MIMETYPE_PATH)
        elif mimetype.data != config.MIMETYPE.encode("ascii"):
            logger.warning("replacing invalid mimetype content %r", mimetype.data)
        zfp.writestr(
            mimetype.zipinfo(compress_type=zipfile.ZIP_STORED),
            config.MIMETYPE.encode("ascii"),
        )

        for member in archive:
            if member.name == config.MIMETYPE_PATH or member.is_dir:
                continue
            data = replaced.get(member.name, member.data)
            zfp.writestr(member.zipinfo(), data)
        zfp.comment = archive.comment
    data = out.getvalue()
    logger.debug("repackaged %d bytes", len(data))
    return data
