"""
Tour card - presentational rendering of a single tour.

The card holds no state of its own. It renders the tour's fields through a
Jinja2 template and forwards the tour id to caller-supplied update and
delete handlers.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import jinja2
import yaml

from tour_booking.domain.tour import Tour
from tour_booking.utils.logger import StructuredLogger, get_logger

logger = get_logger(__name__)

DEFAULT_TEMPLATE_PATH = Path(__file__).parent / "templates" / "tour_card.yaml"

Handler = Callable[[Any], Any]


class MissingHandlerError(RuntimeError):
    """Raised when a card button is pressed but no handler was supplied."""


class CardTemplateLoader:
    """
    Loader for card templates from YAML configuration.

    Templates are cached in memory after first load.
    """

    def __init__(
        self,
        template_path: Union[str, Path] = DEFAULT_TEMPLATE_PATH,
        logger: Optional[StructuredLogger] = None,
    ):
        self.template_path = str(template_path)
        self.logger = logger
        self._templates: Dict[str, str] = {}
        self._loaded = False
        self._environment = jinja2.Environment(autoescape=True)

    def load_templates(self) -> None:
        """Load all templates from YAML file."""
        if self._loaded:
            return

        try:
            with open(self.template_path, "r", encoding="utf-8") as f:
                self._templates = yaml.safe_load(f) or {}
                self._loaded = True
                if self.logger:
                    self.logger.debug(
                        f"Loaded {len(self._templates)} card templates",
                        operation="load_card_templates",
                    )
        except FileNotFoundError as e:
            if self.logger:
                self.logger.error(
                    f"Card templates file not found: {self.template_path}",
                    operation="load_card_templates",
                    error=str(e),
                )
            raise

    def render(self, template_name: str, **context: Any) -> str:
        """
        Render a template with context variables.

        Raises:
            KeyError: If template not found
            jinja2.TemplateError: If template rendering fails
        """
        self.load_templates()

        if template_name not in self._templates:
            raise KeyError(
                f"Template '{template_name}' not found. Available: {list(self._templates.keys())}"
            )

        try:
            template = self._environment.from_string(self._templates[template_name])
            return template.render(**context)
        except jinja2.TemplateError as e:
            if self.logger:
                self.logger.error(
                    f"Failed to render card template '{template_name}'",
                    operation="render_card_template",
                    error=str(e),
                )
            raise


_default_loader: Optional[CardTemplateLoader] = None


def _get_default_loader() -> CardTemplateLoader:
    global _default_loader
    if _default_loader is None:
        _default_loader = CardTemplateLoader(logger=logger)
    return _default_loader


def format_start_date(value: Optional[str]) -> str:
    """
    Format an ISO date as en-US ``M/D/YYYY``.

    Returns an empty string when the value is missing or not a date.
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return ""
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class TourCard:
    """
    Display unit for one tour.

    Args:
        tour: Tour to show; a dict in wire form is accepted; None renders
            an empty card
        handle_update: Called with the tour id when Update is pressed
        handle_delete: Called with the tour id when Delete is pressed
    """

    def __init__(
        self,
        tour: Optional[Union[Tour, Dict[str, Any]]] = None,
        handle_update: Optional[Handler] = None,
        handle_delete: Optional[Handler] = None,
        template_loader: Optional[CardTemplateLoader] = None,
    ):
        if isinstance(tour, dict):
            tour = Tour.from_dict(tour)
        self.tour: Optional[Tour] = tour
        self.handle_update = handle_update
        self.handle_delete = handle_delete
        self.template_loader = template_loader or _get_default_loader()

    def context(self) -> Dict[str, Any]:
        """Template variables, with every missing field as an empty string."""
        tour = self.tour or Tour()
        return {
            "tour_id": _text(tour.tour_id),
            "title": _text(tour.title),
            "description": _text(tour.description),
            "image_link": _text(tour.image_link),
            "duration": _text(tour.duration),
            "start_date": format_start_date(tour.start_date),
            "price": _text(tour.price),
            "destination_names": [_text(d.dest_name) for d in tour.destinations],
        }

    def render(self) -> str:
        return self.template_loader.render("card", **self.context())

    def _press(self, action: str, handler: Optional[Handler]) -> Any:
        if handler is None:
            raise MissingHandlerError(f"No {action} handler supplied to this tour card")
        tour_id = self.tour.tour_id if self.tour is not None else None
        logger.debug("Card action", operation=f"card_{action}", context={"tour_id": tour_id})
        return handler(tour_id)

    def click_update(self) -> Any:
        return self._press("update", self.handle_update)

    def click_delete(self) -> Any:
        return self._press("delete", self.handle_delete)
