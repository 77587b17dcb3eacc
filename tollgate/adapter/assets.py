"""Login page and static content rendering."""

import logging
import mimetypes
from pathlib import Path

from jinja2 import Environment

from tollgate.domain.provider import LoginAssetProvider, RenderedAsset

logger = logging.getLogger(__name__)

LOGIN_PAGE = "login.html"


class TemplateLoginAssetProvider(LoginAssetProvider):
    """Renders the login template and serves files from an optional folder."""

    def __init__(self, environment: Environment, asset_path: Path | None = None) -> None:
        self.environment = environment
        self._root = asset_path.resolve() if asset_path else None

    def render(
        self, asset_path: str | None, locale: str | None, bindings: dict[str, str]
    ) -> RenderedAsset | None:
        if asset_path is None:
            page = self.environment.get_template(LOGIN_PAGE).render(
                locale=locale or "en", bindings=bindings
            )
            return RenderedAsset(content=page.encode("utf-8"), media_type="text/html")

        file_path = self._resolve(asset_path)
        if file_path is None:
            return None
        media_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        return RenderedAsset(content=file_path.read_bytes(), media_type=media_type)

    def _resolve(self, asset_path: str) -> Path | None:
        if self._root is None:
            return None
        candidate = (self._root / asset_path).resolve()
        # Stay inside the asset folder
        if not candidate.is_relative_to(self._root) or not candidate.is_file():
            logger.debug(f"Asset not found: {asset_path}")
            return None
        return candidate
