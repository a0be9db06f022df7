import json
import logging

from opgate.core.utils.sanitizer import redact_params

FORMAT = "%(levelname)s %(name)s - %(message)s"


class StructuredFormatter(logging.Formatter):
    """Append the record's structured fields (if any) as one JSON object."""

    def format(self, record):
        line = super().format(record)
        fields = getattr(record, "fields", None)
        if fields:
            event = getattr(record, "event", None)
            payload = {"event": event, **fields} if event else fields
            line += " " + json.dumps(payload, default=str, sort_keys=True)
        return line


def configure(level="INFO", *, structured=True):
    logging.basicConfig(level=getattr(logging, level.upper()), format=FORMAT)
    if structured:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(StructuredFormatter(FORMAT))


def emit(logger, level, event, message, **fields):
    """
    Structured log call; `event` names the record, `fields` ride along in extra.
    Each field value is redacted, so a `parameters` mapping never leaks secrets.
    """
    fields = {key: redact_params(value) for key, value in fields.items()}
    logger.log(level, message, extra={"event": event, "fields": fields})
