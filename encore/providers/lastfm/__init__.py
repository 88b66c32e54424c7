from encore.providers.lastfm.lastfm_provider import LastFmProvider, top_by_metric

__all__ = ["LastFmProvider", "top_by_metric"]
