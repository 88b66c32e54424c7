from encore.providers.ticketmaster.ticketmaster_provider import (
    TicketmasterProvider,
    parse_attraction,
    parse_banner_image,
    parse_event,
)

__all__ = ["TicketmasterProvider", "parse_attraction", "parse_banner_image", "parse_event"]
