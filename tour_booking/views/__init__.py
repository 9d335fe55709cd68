"""Views - presentational units."""

from .tour_card import CardTemplateLoader, MissingHandlerError, TourCard

__all__ = ["CardTemplateLoader", "MissingHandlerError", "TourCard"]
