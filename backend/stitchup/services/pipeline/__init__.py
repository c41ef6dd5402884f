"""
Pipeline driver.

Modules:
- orchestrator: Runs the stages, full run or single steps
- provider_factory: Opens provider clients from configured credentials

Example:
    from stitchup.services.pipeline import PipelineOrchestrator, PipelineError

    orchestrator = PipelineOrchestrator(settings)
    result = await orchestrator.run()
"""

from .orchestrator import PipelineError, PipelineOrchestrator, PipelineResult
from .provider_factory import ProviderClients, ProviderFactory

__all__ = [
    "PipelineOrchestrator",
    "PipelineError",
    "PipelineResult",
    "ProviderClients",
    "ProviderFactory",
]
