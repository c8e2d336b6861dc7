from doppel_core.errors import DomainError


class FeedError(DomainError):
    code = "feed_error"
    status = 502


class InvalidUrl(FeedError):
    code = "invalid_url"
    status = 400


class FetchFailure(FeedError):
    code = "fetch_failure"
    status = 502


class ParseFailure(FeedError):
    code = "parse_failure"
    status = 502


class StructureFailure(FeedError):
    code = "structure_failure"
    status = 502


class EmptyFeed(FeedError):
    code = "empty_feed"
    status = 422


class NoValidRecords(FeedError):
    code = "no_valid_records"
    status = 422
