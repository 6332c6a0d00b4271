# backend/app/services/template_service.py
"""
Template rendering service for the Disciplix platform.

Provides centralized template rendering using Jinja2 for the
transactional emails (verification, password reset).
"""

from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from ..core.config import settings
from ..core.constants import BRAND_NAME

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class TemplateService:
    """
    Centralized template rendering service using Jinja2.

    Templates live under ``app/templates`` and always receive the common
    context (brand name, client URL, current year).
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def get_common_context(self) -> Dict[str, Any]:
        """Common context variables used across all templates."""
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now(timezone.utc).year,
            "client_url": settings.client_url,
            "support_email": settings.email_from,
        }

    def render_template(
        self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs
    ) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Path to template relative to templates directory
            context: Dictionary of template variables
            **kwargs: Additional template variables

        Raises:
            TemplateNotFound: If template doesn't exist
        """
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            self.logger.error(f"Template not found: {template_name}")
            raise

        full_context = self.get_common_context()
        if context:
            full_context.update(context)
        full_context.update(kwargs)
        return template.render(full_context)
