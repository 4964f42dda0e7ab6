"""
Exceptions raised while generating client types.

Every generation error carries enough context (service, endpoint and the
qualified path of the offending type, field or view) to locate the schema
entry that caused it.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for errors that abort the generation of one service.

    Attributes:
        service: Name of the service being generated (if known)
        endpoint: Name of the endpoint being processed (if known)
        path: Qualified path of the offending type, field or view
    """

    def __init__(self, message: str, service: str = "", endpoint: str = "", path: str = ""):
        self.message = message
        self.service = service
        self.endpoint = endpoint
        self.path = path
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.service:
            location.append(f"service {self.service!r}")
        if self.endpoint:
            location.append(f"endpoint {self.endpoint!r}")
        if self.path:
            location.append(f"at {self.path}")
        if not location:
            return self.message
        return f"{self.message} ({', '.join(location)})"

    def with_context(self, service: str = "", endpoint: str = "") -> GenerationError:
        """Fill in missing service/endpoint context and return self."""
        if service and not self.service:
            self.service = service
        if endpoint and not self.endpoint:
            self.endpoint = endpoint
        self.args = (self._format(),)
        return self


class SchemaInconsistency(GenerationError):
    """A referenced type, field or view is absent from the model."""


class UnsupportedFieldShape(GenerationError):
    """A field has a (kind, context) shape the bindings cannot represent."""


class RenderFailure(GenerationError):
    """The templating backend rejected the content of a descriptor.

    Attributes:
        section_kind: Kind of the section being rendered
        descriptor: Identity (name) of the descriptor being rendered
    """

    def __init__(self, message: str, section_kind: str, descriptor: str, service: str = ""):
        self.section_kind = section_kind
        self.descriptor = descriptor
        super().__init__(f"{message} [section {section_kind} for {descriptor}]", service=service)


class UnexpectedFailure(GenerationError):
    """An error outside the generation error hierarchy escaped one step of a service.

    Attributes:
        step: Name of the failing step
    """

    def __init__(self, error: Exception, step: str, service: str = ""):
        self.step = step
        super().__init__(f"{step} failed with {type(error).__name__}: {error}", service=service)
        self.__cause__ = error


class SchemaParseError(ValueError):
    """The JSON service description is structurally malformed."""


class EmitError(Exception):
    """A generated artifact failed validation before it was written."""
