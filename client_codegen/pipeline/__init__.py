"""
Client types generation pipeline.

Architecture:
1. BodyDescriptorBuilder: Service model -> descriptors (representations resolved)
2. SectionPlanner: Descriptors -> ordered sections (duplicates claimed in a registry)
3. ArtifactAssembler: Sections -> rendered artifact (one per service)
4. AtomicWriter: Artifact -> file
"""

from __future__ import annotations

from .assembler import ArtifactAssembler
from .backends import BACKENDS, CodeBackend, GoBackend, PythonBackend, create_backend
from .body_builder import BodyDescriptorBuilder
from .config import CodeGeneratorConfig, FormatterConfig, OutputConfig, OutputMode, RegistryScope
from .descriptors import Artifact, Section, SectionKind, ServiceDescriptor
from .emitter import AtomicWriter
from .formatters import BlackFormatter, Formatter
from .generator import ClientTypesGenerator, GenerationReport, ServiceResult
from .planner import SectionPlanner
from .pointer_policy import FieldContext, FieldKind, Representation, resolve_representation
from .registry import DeduplicationRegistry

__all__ = [
    "Artifact",
    "ArtifactAssembler",
    "AtomicWriter",
    "BACKENDS",
    "BlackFormatter",
    "BodyDescriptorBuilder",
    "ClientTypesGenerator",
    "CodeBackend",
    "CodeGeneratorConfig",
    "DeduplicationRegistry",
    "FieldContext",
    "FieldKind",
    "Formatter",
    "FormatterConfig",
    "GenerationReport",
    "GoBackend",
    "OutputConfig",
    "OutputMode",
    "PythonBackend",
    "RegistryScope",
    "Representation",
    "Section",
    "SectionKind",
    "SectionPlanner",
    "ServiceDescriptor",
    "ServiceResult",
    "create_backend",
    "resolve_representation",
]
