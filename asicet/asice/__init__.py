# *-* coding: utf-8 *-*
from .container import (
    Archive,
    Member,
    ValidationResult,
    extract,
    locate_signature_path,
    repackage,
    validate_structure,
)
from .manifest import ManifestEntry, read_manifest, update_manifest
