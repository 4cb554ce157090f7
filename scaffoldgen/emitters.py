# File: scaffoldgen/emitters.py
"""
scaffoldgen - Template Emitter Boundary
=======================================
``TemplateEmitter`` turns artifact descriptors into file contents.  The
pipeline only ever talks to this interface; rendering descriptors into a
particular target language belongs to external emitters.

The one built-in emitter, ``YamlDescriptorEmitter``, writes each
descriptor as a YAML document next to its namespaced location.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import Iterable, List

import yaml

from scaffoldgen.descriptors import ArtifactDescriptor, ArtifactKind

logger: logging.Logger = logging.getLogger("scaffoldgen.emitters")


@dataclass(frozen=True, slots=True)
class RenderedArtifact:
    """Emitter output for one descriptor."""

    kind: str
    identifier: str
    relative_path: str
    content: str


class TemplateEmitter(abc.ABC):
    """Descriptor → text."""

    name: str = "abstract"
    extension: str = ""

    @abc.abstractmethod
    def render(self, descriptor: ArtifactDescriptor) -> str:
        """Return the full text of the artifact described by *descriptor*."""

    def relative_path(self, descriptor: ArtifactDescriptor) -> str:
        return f"{descriptor.location}{self.extension}"

    def emit(self, descriptor: ArtifactDescriptor) -> RenderedArtifact:
        return RenderedArtifact(
            kind=ArtifactKind(descriptor.kind).value,
            identifier=descriptor.identifier,
            relative_path=self.relative_path(descriptor),
            content=self.render(descriptor),
        )

    def emit_all(self, descriptors: Iterable[ArtifactDescriptor]) -> List[RenderedArtifact]:
        rendered: List[RenderedArtifact] = [self.emit(d) for d in descriptors]
        logger.debug("%s emitter rendered %d artifact(s).", self.name, len(rendered))
        return rendered


class YamlDescriptorEmitter(TemplateEmitter):
    """Renders the descriptor payload itself, field order preserved."""

    name = "yaml"
    extension = ".yaml"

    def render(self, descriptor: ArtifactDescriptor) -> str:
        return yaml.safe_dump(
            descriptor.to_dict(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )


__all__: List[str] = [
    "RenderedArtifact",
    "TemplateEmitter",
    "YamlDescriptorEmitter",
]

logger.debug("scaffoldgen.emitters loaded.")
