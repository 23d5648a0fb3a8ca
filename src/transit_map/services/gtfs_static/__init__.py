"""Static GTFS loading pipeline: fetch, parse, normalize."""

from transit_map.services.gtfs_static.fetcher import ResourceFetcher
from transit_map.services.gtfs_static.loader import TabularLoader
from transit_map.services.gtfs_static.normalizer import GtfsNormalizer
from transit_map.services.gtfs_static.parser import GtfsParser, parse_delimited

__all__ = [
    "GtfsNormalizer",
    "GtfsParser",
    "ResourceFetcher",
    "TabularLoader",
    "parse_delimited",
]
