# *-* coding: utf-8 *-*
import attr


@attr.s
class ValidationResult(object):
    """Aggregated outcome of a check that reports problems instead of raising."""

    errors = attr.ib(factory=list)
    warnings = attr.ib(factory=list)

    @property
    def valid(self):
        return not self.errors


class AsiceError(ValueError):
    pass


class MalformedArchive(AsiceError):
    pass


class SignatureNotFound(AsiceError):
    pass


class MissingSignature(SignatureNotFound):
    pass


class ManifestParseError(AsiceError):
    pass


class XmlParseError(AsiceError):
    pass


class StructureInvalid(AsiceError):
    """Carries every problem found, not just the first one."""

    def __init__(self, errors, warnings=()):
        self.errors = list(errors)
        self.warnings = list(warnings)
        super(StructureInvalid, self).__init__("; ".join(self.errors))


class QualifyingPropertiesMissing(AsiceError):
    pass


class SignatureAlreadyTimestamped(AsiceError):
    pass


class InvalidState(AsiceError):
    pass


class TsaUnavailable(AsiceError):
    pass


class TsaRejected(AsiceError):
    def __init__(self, status, name, text=None):
        self.status = status
        self.name = name
        self.text = text
        message = "TSA returned status: %s (%d)" % (name, status)
        if text:
            message = message + " - " + text
        super(TsaRejected, self).__init__(message)


class TokenMissing(AsiceError):
    pass


class AsnParseError(AsiceError):
    pass
