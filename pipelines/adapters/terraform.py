"""Terraform Registry source adapter.

The registry renders most pages client-side; when the server-rendered
markdown region is missing, a short pointer to the registry page is
returned instead of an empty document.
"""

from bs4 import BeautifulSoup

from sources.models import TerraformSource
from ..html_ingest import select_main_region, strip_noise
from .base import SourceAdapter

TERRAFORM_REGISTRY_BASE = "https://registry.terraform.io"

CONTENT_SELECTORS = ("div.markdown",)


def resource_slug(provider: str, resource: str) -> str:
    """``google_storage_bucket`` -> ``storage_bucket``."""
    for prefix in (f"{provider}_", "google_"):
        if resource.startswith(prefix):
            resource = resource[len(prefix):]
    return resource


def registry_url(provider: str, resource: str) -> str:
    return (f"{TERRAFORM_REGISTRY_BASE}/providers/hashicorp/{provider}"
            f"/latest/docs/resources/{resource_slug(provider, resource)}")


class TerraformAdapter(SourceAdapter):
    source_type = "terraform"

    def cache_key(self, spec: TerraformSource) -> str:
        return f"terraform:{spec.provider}:{spec.resource}"

    async def _fetch_uncached(self, spec: TerraformSource) -> str:
        url = registry_url(spec.provider, spec.resource)
        response = await self._get_page(
            url,
            not_found_message=f"Terraform resource not found: {spec.provider}/{spec.resource}",
            error_label="Terraform registry"
        )

        soup = strip_noise(BeautifulSoup(response.text, "html.parser"))
        node = select_main_region(soup, CONTENT_SELECTORS)
        if node is None:
            return (f"# {spec.resource}\n\n"
                    f"Terraform resource documentation.\n\n"
                    f"For full documentation, visit:\n{url}\n")
        return self.normalize(node.decode_contents())

    async def check_access(self) -> bool:
        return await self._check_url(f"{TERRAFORM_REGISTRY_BASE}/providers/hashicorp/google")
