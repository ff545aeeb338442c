"""Exception types raised by the loader."""


class WxBulkError(Exception):
    """Base exception for all loader failures."""


class ConfigError(WxBulkError):
    """Raised for invalid loader configuration."""


class ParseSkip(WxBulkError):
    """A single input line could not be parsed; the record is dropped."""

    def __init__(self, line_num: int, reason: str):
        super().__init__(f"line {line_num}: {reason}")
        self.line_num = line_num
        self.reason = reason


class WriteError(WxBulkError):
    """A batch could not be bulk-written after exhausting its retries."""

    def __init__(self, batch_num: int, row_count: int, cause: BaseException):
        super().__init__(f"Batch {batch_num} ({row_count} rows) failed: {cause}")
        self.batch_num = batch_num
        self.row_count = row_count
        self.cause = cause
