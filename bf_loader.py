import logging
import re

from bf_errors import LoadError

logger = logging.getLogger(__name__)

INSTRUCTIONS = b"><+-.,[]"

# Anything outside the eight instruction characters is a comment
_NOISE = re.compile(rb"[^.,<>\[\]+-]")


def sanitize(text):
    """Strip everything but instruction characters, keeping their order."""
    if isinstance(text, str):
        text = text.encode('utf-8')
    return _NOISE.sub(b"", text)


def load_program(path):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(path, e) from e

    code = sanitize(text)
    logger.debug("Loaded %s: %d chars, %d instructions", path, len(text), len(code))
    return code
