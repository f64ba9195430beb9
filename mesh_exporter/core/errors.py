"""
Error taxonomy for the export pipeline.

Internal stages raise these; the orchestration layer in exporter.py catches
them, logs them and turns them into a boolean result. Which ones are fatal:

    InputError      fatal, aborts the whole export
    GeometryError   fatal, aborts the whole export
    ExportIOError   fatal for the OBJ file, logged for the MTL and textures
    ResolutionMiss  never fatal, the material is exported untextured
    FormatError     never fatal, the texture is dropped
"""


class ExportError(Exception):
    """Base class for every failure raised by the export pipeline."""
    pass


class InputError(ExportError):
    """
    Raised when there is nothing to export: a null mesh, or an empty set of
    source meshes handed to the merge step.
    """
    pass


class GeometryError(ExportError):
    """Raised when a mesh has no retrievable geometry description."""
    pass


class ExportIOError(ExportError):
    """
    Raised when an output file (OBJ, MTL or texture image) cannot be written.

    Wraps the underlying OSError so the message names the file that failed.
    """
    pass


class ResolutionMiss(ExportError):
    """Raised when no texture can be resolved for a material."""
    pass


class FormatError(ExportError):
    """
    Raised when texture bytes cannot be turned into a canonical pixel buffer:
    an unsupported source format, or a buffer smaller than the declared size.
    """
    pass
