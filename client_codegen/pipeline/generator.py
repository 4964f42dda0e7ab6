"""
Client types generator.

Orchestrates a run: one unit of work per service, from the service model to
one rendered artifact. Services are processed over a bounded worker pool and
a failing service never aborts its siblings.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from ..errors import GenerationError, UnexpectedFailure
from ..schema.nodes import SchemaModel, ServiceExpr
from .assembler import ArtifactAssembler
from .backends import create_backend
from .body_builder import BodyDescriptorBuilder
from .config import CodeGeneratorConfig, RegistryScope
from .descriptors import Artifact, ServiceDescriptor
from .formatters import BlackFormatter
from .planner import SectionPlanner
from .registry import DeduplicationRegistry

logger = logging.getLogger(__name__)

GENERATION_COMMENT = "Code generated by client_codegen, DO NOT EDIT."


@dataclass(frozen=True)
class ServiceResult:
    """Outcome of the generation of one service."""

    service: str
    artifact: Artifact | None = None
    error: GenerationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class GenerationReport:
    """Outcome of a run, one result per service in schema order."""

    results: tuple[ServiceResult, ...] = ()

    @property
    def artifacts(self) -> tuple[Artifact, ...]:
        return tuple(r.artifact for r in self.results if r.artifact is not None)

    @property
    def failures(self) -> tuple[ServiceResult, ...]:
        return tuple(r for r in self.results if r.error is not None)

    @property
    def success(self) -> bool:
        return not self.failures


class ClientTypesGenerator:
    """Generates the client types of every service of a model."""

    def __init__(self, model: SchemaModel, config: CodeGeneratorConfig | None = None, command_line: str | None = None):
        """
        Args:
            model: The service model
            config: Code generation configuration
            command_line: Command line recorded in the generation comment
        """
        self.model = model
        self.config = config or CodeGeneratorConfig()
        self.backend = create_backend(self.config)

        comment = GENERATION_COMMENT
        if command_line:
            comment = f"{comment}\n\nCommand:\n{command_line}"
        self.builder = BodyDescriptorBuilder(model, self.backend, comment)

        self.assembler = ArtifactAssembler(self.backend, self.config, BlackFormatter())

    def generate(self) -> GenerationReport:
        """
        Generate the artifacts of every service.

        Returns:
            Report listing the artifact or the error of each service
        """
        services = self.model.services
        errors: dict[str, GenerationError] = {}

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            built = list(pool.map(lambda s: self._guard(errors, s, self.builder.build, s), services))
            if self.config.registry_scope == RegistryScope.RUN:
                artifacts = self._generate_in_order(errors, services, built)
            else:
                artifacts = list(
                    pool.map(
                        lambda item: self._plan_and_assemble(
                            errors, item[0], item[1], DeduplicationRegistry(RegistryScope.SERVICE.value)
                        ),
                        zip(services, built),
                    )
                )

        results = []
        for service, artifact in zip(services, artifacts):
            error = errors.get(service.name)
            results.append(ServiceResult(service.name, None if error else artifact, error))
        report = GenerationReport(tuple(results))
        logger.info("Generated %d of %d services", len(report.artifacts), len(services))
        return report

    def _generate_in_order(
        self,
        errors: dict[str, GenerationError],
        services: tuple[ServiceExpr, ...],
        built: list[ServiceDescriptor | None],
    ) -> list[Artifact | None]:
        """Generate services against a registry shared by the run, in schema order."""
        registry = DeduplicationRegistry(RegistryScope.RUN.value)
        artifacts = []
        for service, descriptor in zip(services, built):
            # Declarations of a failed service must not be skipped by the services after it
            staged = registry.stage()
            artifact = self._plan_and_assemble(errors, service, descriptor, staged)
            if artifact is not None:
                staged.commit()
            artifacts.append(artifact)
        return artifacts

    def _plan_and_assemble(
        self,
        errors: dict[str, GenerationError],
        service: ServiceExpr,
        descriptor: ServiceDescriptor | None,
        registry: DeduplicationRegistry,
    ) -> Artifact | None:
        planner = SectionPlanner(registry, self.config.transport)
        sections = self._guard(errors, service, planner.plan, descriptor)
        return self._guard(errors, service, self.assembler.assemble, descriptor, sections)

    @staticmethod
    def _guard(errors: dict[str, GenerationError], service: ServiceExpr, step, *args):
        """Run one step of a service unless an earlier step failed, recording its failure."""
        if service.name in errors or any(a is None for a in args):
            return None
        try:
            return step(*args)
        except GenerationError as e:
            e.with_context(service=service.name)
            logger.error("Generation of service %s failed: %s", service.name, e)
            errors[service.name] = e
            return None
        except Exception as e:
            logger.exception("Generation of service %s failed unexpectedly", service.name)
            errors[service.name] = UnexpectedFailure(e, getattr(step, "__name__", "step"), service=service.name)
            return None
