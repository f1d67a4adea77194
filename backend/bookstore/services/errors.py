"""Errors raised by the enrichment gateway and its providers."""


class EnrichmentError(Exception):
    """Base class for failures while enriching book data from upstream services."""


class UpstreamUnavailable(EnrichmentError):
    """The provider could not be reached, timed out or answered with an error.

    Transient: the caller may retry.
    """


class InvalidCurrency(EnrichmentError):
    """The rate provider answered but has no rate for the currency pair."""

    def __init__(self, from_currency: str, to_currency: str):
        super().__init__(f"No conversion rate for {from_currency} -> {to_currency}")
        self.from_currency = from_currency
        self.to_currency = to_currency
