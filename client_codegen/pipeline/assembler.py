"""
Artifact assembler.

Renders planned sections through the backend templates and concatenates
them into the source text of one service.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import jinja2

from ..errors import RenderFailure
from .backends.base import CodeBackend
from .config import CodeGeneratorConfig
from .descriptors import Artifact, Section, ServiceDescriptor
from .formatters import Formatter

logger = logging.getLogger(__name__)


class ArtifactAssembler:
    """Assembles the artifact of a service from its planned sections."""

    def __init__(self, backend: CodeBackend, config: CodeGeneratorConfig, formatter: Formatter | None = None):
        """
        Args:
            backend: Backend of the target language
            config: Code generation configuration
            formatter: Formatter applied to the assembled text (if enabled)
        """
        self.backend = backend
        self.config = config
        self.formatter = formatter

    def assemble(self, service: ServiceDescriptor, sections: Sequence[Section]) -> Artifact:
        """
        Render sections in order into one artifact.

        Raises:
            RenderFailure: If a template rejects a descriptor
        """
        rendered = [self.render_section(service, section) for section in sections]
        text = self.backend.SECTION_SEPARATOR.join(part for part in rendered if part) + "\n"

        if self.formatter is not None:
            text = self.formatter.apply(text, self.config.language, self.config.formatter)

        path = self.backend.artifact_path(service.slug)
        logger.debug("Assembled %s from %d sections", path, len(sections))
        return Artifact(service=service.name, path=path, text=text)

    def render_section(self, service: ServiceDescriptor, section: Section) -> str:
        try:
            return self.backend.render(section)
        except jinja2.TemplateError as e:
            raise RenderFailure(str(e), section.kind.value, section.name, service=service.name) from e
