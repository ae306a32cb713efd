"""End-to-end ``deploy`` flow: optional source build, then deployment."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from coderun.utils.console_like import ConsoleLike, coalesce_console

from .errors import BackendRejection, CodeRunError
from .orchestrator import BuildOrchestrator
from .translator import translate

if TYPE_CHECKING:
    from coderun.api.client import PlatformClient
    from coderun.api.models import DeploymentResponse

    from .request import DeploymentPlan


class DeployPipeline:
    """Fulfils a validated :class:`DeploymentPlan` against the platform."""

    def __init__(
        self,
        gateway: PlatformClient,
        console: ConsoleLike | None = None,
        orchestrator: BuildOrchestrator | None = None,
    ) -> None:
        self.gateway = gateway
        self.console = coalesce_console(console)
        self.orchestrator = orchestrator or BuildOrchestrator(gateway, self.console)

    def run(self, plan: DeploymentPlan) -> DeploymentResponse:
        """Build (if requested) and create the deployment.

        A failed build raises before the deployment endpoint is called.

        Raises:
            CodeRunError: Any build, packaging, transport or backend failure
        """
        spec = plan.spec

        if plan.build is not None:
            image = self.orchestrator.build_image(plan.build, spec.app_name)
            spec = spec.with_image(image)
            self.console.info(f"Deploying built image {image}...")
        else:
            self.console.info(f"Deploying {spec.image}...")

        if spec.http_port is not None:
            self.console.info(
                "Note: Deploy with HTTP port may take several minutes "
                "(waiting for TLS certificate)"
            )
        if spec.tcp_port is not None:
            self.console.info(
                "Note: Deploy with TCP port will be available in the NodePort "
                "range (30000-32767)"
            )

        try:
            deployment = self.gateway.create_deployment(spec.to_payload())
        except BackendRejection as e:
            friendly = translate(e.message)
            raise CodeRunError(
                f"Deployment failed: {friendly}",
                details=e.message if friendly != e.message else None,
            ) from e

        logger.debug(f"Created deployment {deployment.id} for {spec.app_name}")
        return deployment
