"""
Boot configuration for lab VMs.

Each VM receives an opaque blob at boot, rendered from its hostname. The
default renderer produces a cloud-init document that installs FRR with
``bgpd`` enabled and returns it base64 encoded, which is what the provider
expects for custom data.
"""

import base64
import logging
from typing import Protocol

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

__all__ = [
    "BootConfigRenderer",
    "CloudInitRenderer",
]

_LOGGER = logging.getLogger(__name__)

CLOUD_INIT_TEMPLATE = "cloud-init.yaml.j2"


class BootConfigRenderer(Protocol):
    """Turns a VM hostname into its boot configuration."""

    def render(self, hostname: str) -> str:
        """Boot configuration for one VM.

        Args:
            hostname: Hostname of the VM.

        Returns:
            An opaque blob, stored on the VM resource as is.
        """
        ...


class CloudInitRenderer:
    """Render the packaged cloud-init template for a hostname."""

    def __init__(self, template: str = CLOUD_INIT_TEMPLATE) -> None:
        self.env = Environment(
            loader=PackageLoader("bgplab", "templates"),
            autoescape=select_autoescape(default=False),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self.template = self.env.get_template(template)

    def render_text(self, hostname: str) -> str:
        """The cloud-init document before encoding."""
        return self.template.render(hostname=hostname)

    def render(self, hostname: str) -> str:
        """Render and encode the cloud-init document.

        Args:
            hostname: Hostname the VM sets on first boot.

        Returns:
            The base64 encoding of the rendered text, the provider's
            custom-data format.
        """
        text = self.render_text(hostname)
        _LOGGER.debug("rendered boot config for %s (%d bytes)", hostname, len(text))
        return base64.b64encode(text.encode("utf-8")).decode("ascii")
