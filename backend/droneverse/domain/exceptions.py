class InspectionError(Exception):
    """Base error for the inspection core."""


class InvalidAnnotationError(InspectionError, ValueError):
    """Annotation shape violates its kind's invariants (point count, ranges, severity)."""


class InvalidTransitionError(InspectionError):
    """Drawing session action not allowed in the current state."""


class ImageLoadError(InspectionError):
    """Source image could not be fetched or decoded (CORS, 404, network, corrupt bytes)."""


class SurfaceCreationError(InspectionError):
    """Raster surface could not be allocated for the source dimensions."""


class EncodingError(InspectionError):
    """Composited surface could not be serialized to JPEG."""


class UploadError(InspectionError):
    """Upload collaborator rejected or failed to store the blob."""


class PersistenceError(InspectionError):
    """Database read or write failed."""


class ReportPersistenceError(PersistenceError):
    """Report could not be stored, read or deleted."""


class InvalidUploadPathError(UploadError, ValueError):
    """Upload folder or filename would resolve outside the storage root."""


class UserAlreadyExistsError(InspectionError):
    """Registration with an email that already has an account."""


class InvalidCredentialsError(InspectionError):
    """Unknown email or wrong password."""


class InvalidInspectionError(InspectionError, ValueError):
    """Inspection is missing required client, employee or location fields."""


class InspectionNotFoundError(InspectionError, LookupError):
    """Inspection, or an image within it, does not exist for this owner."""
