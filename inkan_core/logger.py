import logging, json, re, sys, time, os

# key=value pairs whose value must never reach a log sink
SECRET_FIELDS = ("password", "passphrase", "private_key", "seed", "salt", "nonce")
_SECRET_RE = re.compile(
    r"\b(" + "|".join(SECRET_FIELDS) + r")(\s*[=:]\s*)('[^']*'|\"[^\"]*\"|\S+)",
    re.IGNORECASE,
)


class RedactSecretsFilter(logging.Filter):
    """Masks ``password=...`` style fields in the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        redacted = _SECRET_RE.sub(r"\1\2<redacted>", msg)
        if redacted != msg:
            record.msg, record.args = redacted, None
        return True


def get_logger(name="inkan", level=None, to_file=None):
    """Unified structured logger for all Inkan components."""
    logger = logging.getLogger(name)
    if level is None:
        level = os.getenv("INKAN_LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)

    if not logger.handlers:
        logger.addFilter(RedactSecretsFilter())
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # UTC timestamps
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
