"""ridquiz: meaning and grammatical-gender vocabulary drills."""

from ridquiz.consts import VERSION

__version__ = VERSION
