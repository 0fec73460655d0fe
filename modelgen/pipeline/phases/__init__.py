"""Generation phases, in pipeline order."""

from .analysis import AnalysisPhase
from .base import Capability, Phase
from .checklist import ChecklistPhase
from .controller import ControllerPhase
from .dto import DTOPhase
from .hooks import HooksPhase
from .naming import NamingConflictPhase
from .plugins import PluginPhase
from .registry import RegistryPhase
from .route import RoutePhase
from .sdk import SDKPhase
from .service import ServicePhase
from .validation import ValidationPhase

__all__ = [
    "Phase",
    "Capability",
    "ValidationPhase",
    "AnalysisPhase",
    "NamingConflictPhase",
    "DTOPhase",
    "RegistryPhase",
    "ServicePhase",
    "ControllerPhase",
    "RoutePhase",
    "SDKPhase",
    "HooksPhase",
    "PluginPhase",
    "ChecklistPhase",
]
