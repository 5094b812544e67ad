# slotkeeper/services/template_service.py
"""
Template rendering service for SlotKeeper.

Provides centralized Jinja2 rendering for notification emails, with
brand-level context and date/time filters that render in the business
timezone.
"""

from datetime import datetime
from enum import Enum
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound
import pytz

from ..core.config import settings
from .base import BaseService

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class TemplateRegistry(str, Enum):
    """Known email templates (paths relative to the templates directory)."""

    BOOKING_REQUEST_RECEIVED = "email/booking/request_received.html"
    BOOKING_ADMIN_PENDING_REVIEW = "email/booking/admin_pending_review.html"
    BOOKING_CONFIRMED = "email/booking/confirmed.html"
    BOOKING_REJECTED = "email/booking/rejected.html"


class TemplateService(BaseService):
    """
    Centralized template rendering service using Jinja2.

    Holds no database session.
    """

    def __init__(self, template_dir: Optional[Path] = None, timezone_name: Optional[str] = None):
        """
        Initialize the template service with a Jinja2 environment.

        Args:
            template_dir: Override for the templates directory
            timezone_name: Timezone used by the date/time filters
        """
        super().__init__()

        self.template_dir = template_dir or TEMPLATE_DIR
        self.timezone = pytz.timezone(timezone_name or settings.business_timezone)

        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=True,  # Requester-supplied text ends up in HTML bodies
            trim_blocks=True,
            lstrip_blocks=True,
        )

        self._register_custom_filters()
        self.logger.debug(f"Template service initialized with template directory: {self.template_dir}")

    def _register_custom_filters(self) -> None:
        """Register date and time filters."""

        def _localize(value: datetime) -> datetime:
            if value.tzinfo is None:
                value = pytz.utc.localize(value)
            return value.astimezone(self.timezone)

        def format_date(value: Union[datetime, str], format_str: str = "%A, %B %d, %Y") -> str:
            """Format a datetime as a date in the business timezone."""
            if isinstance(value, str):
                return value  # Already formatted
            return _localize(value).strftime(format_str)

        def format_time(value: Union[datetime, str], format_str: str = "%I:%M %p") -> str:
            """Format a datetime as a time of day in the business timezone."""
            if isinstance(value, str):
                return value  # Already formatted
            return _localize(value).strftime(format_str).lstrip("0")

        self.env.filters["format_date"] = format_date
        self.env.filters["format_time"] = format_time

    def get_common_context(self) -> Dict[str, Any]:
        """
        Get common context variables used across all templates.
        """
        return {
            "brand_name": settings.brand_name,
            "current_year": datetime.now(self.timezone).year,
            "timezone_name": self.timezone.zone,
        }

    @BaseService.measure_operation("render_template")
    def render_template(
        self,
        template_name: Union[TemplateRegistry, str],
        context: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Registry entry or path relative to the templates directory
            context: Dictionary of template variables
            **kwargs: Additional template variables

        Returns:
            Rendered template as string

        Raises:
            TemplateNotFound: If template doesn't exist
        """
        name = template_name.value if isinstance(template_name, TemplateRegistry) else template_name
        try:
            template = self.env.get_template(name)

            full_context = self.get_common_context()
            if context:
                full_context.update(context)
            full_context.update(kwargs)

            rendered = template.render(full_context)
            self.logger.debug(f"Successfully rendered template: {name}")
            return rendered

        except TemplateNotFound:
            self.logger.error(f"Template not found: {name}")
            raise
        except Exception as e:
            self.logger.error(f"Error rendering template {name}: {str(e)}")
            raise

