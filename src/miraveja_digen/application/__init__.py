"""
Application layer - Generation passes and orchestration.

This layer contains the passes that turn a declaration set into source units.
It depends only on the Domain layer.
"""

from .collector import CollectedType, DependencyCollection, DependencyCollector
from .constructor_synthesizer import ConstructorSynthesizer
from .conventions import Ancestor, AutoInterfaceLink, Conventions
from .emitter import ImportTable, SourceEmitter
from .generator import DIGenerator
from .interface_synthesizer import InterfaceSynthesizer
from .registration_builder import RegistrationGraph, RegistrationGraphBuilder
from .validator import GraphValidator

__all__ = [
    "DIGenerator",
    "Conventions",
    "AutoInterfaceLink",
    "Ancestor",
    "DependencyCollector",
    "DependencyCollection",
    "CollectedType",
    "InterfaceSynthesizer",
    "ConstructorSynthesizer",
    "RegistrationGraphBuilder",
    "RegistrationGraph",
    "GraphValidator",
    "SourceEmitter",
    "ImportTable",
]
